import logging
from typing import Optional
from fastapi import APIRouter, Query, HTTPException
from pydantic import BaseModel
from app.core import config
from app.core.rubrics import get_rubric
from app.models.rubric import Rubric
from app.services.extract import load_essay
from app.services.llm import EvaluationError, EvaluatorUnavailable
from app.services.pipeline import evaluate_text, save_report
from app.utils.storage import doc_dir_for, new_doc, original_paths

router = APIRouter(tags=["evaluate"])
log = logging.getLogger("routes.evaluate")


class TextSubmission(BaseModel):
    text: str = ""
    prompt: Optional[str] = None
    rubric: Optional[str] = None


def _rubric(rubric_id: Optional[str]) -> Rubric:
    try:
        return get_rubric(rubric_id or config.DEFAULT_RUBRIC_ID)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e.args[0]))


def _run(fn, *args, **kwargs):
    try:
        return fn(*args, **kwargs)
    except EvaluatorUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    except EvaluationError as e:
        log.error("Evaluation failed: %s", e)
        raise HTTPException(status_code=502, detail="AI evaluation failed. Please try again.")


@router.post("/evaluate")
def evaluate(
    doc_id: str = Query(..., description="Document ID returned by /upload"),
    rubric: Optional[str] = Query(None, description="Rubric id, see /rubrics"),
    prompt: Optional[str] = Query(None, description="Writing prompt, if not on the page"),
):
    doc_dir = doc_dir_for(doc_id)
    if doc_dir is None:
        raise HTTPException(status_code=404, detail="Document not found")
    paths = original_paths(doc_dir)
    if not paths:
        raise HTTPException(status_code=404, detail="No original file found")
    rb = _rubric(rubric)

    try:
        writing_prompt, text = _run(load_essay, paths, prompt)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    report = _run(evaluate_text, text, rb, writing_prompt)
    save_report(doc_dir, report)
    return {"doc_id": doc_id, "report": report.model_dump(mode="json")}


@router.post("/process-text")
def process_text(body: TextSubmission):
    rb = _rubric(body.rubric)
    report = _run(evaluate_text, body.text, rb, body.prompt)
    doc_id, doc_dir = new_doc()
    save_report(doc_dir, report)
    return {"doc_id": doc_id, "report": report.model_dump(mode="json")}
