# app/services/pipeline.py
from __future__ import annotations

import json
import os
import logging
from datetime import datetime, timezone
from typing import Optional

from app.models.report import AnnotatedReport, EvaluationResult
from app.models.rubric import Rubric
from app.services import llm
from app.services.report import build_report

log = logging.getLogger("pipeline")

REPORT_FILE = "report.json"
ESSAY_FILE = "essay.txt"


def evaluate_text(
    text: str,
    rubric: Rubric,
    prompt: Optional[str] = None,
    generated_at: Optional[str] = None,
) -> AnnotatedReport:
    """
    Evaluate one essay and shape the result into a report.
    Blank essays skip the evaluator and render with no scores.
    """
    if text.strip():
        evaluation = llm.evaluate_essay(text, rubric, prompt)
    else:
        log.info("Blank essay; skipping evaluator call")
        evaluation = EvaluationResult()
    if generated_at is None:
        generated_at = datetime.now(timezone.utc).isoformat(timespec="seconds")
    return build_report(text, evaluation, rubric, prompt=prompt, generated_at=generated_at)


def save_report(doc_dir: str, report: AnnotatedReport) -> str:
    with open(os.path.join(doc_dir, ESSAY_FILE), "w", encoding="utf-8") as f:
        f.write(report.text)
    path = os.path.join(doc_dir, REPORT_FILE)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report.model_dump(mode="json"), f, ensure_ascii=False, indent=2)
    return path


def load_report(doc_dir: str) -> Optional[AnnotatedReport]:
    path = os.path.join(doc_dir, REPORT_FILE)
    if not os.path.isfile(path):
        return None
    with open(path, encoding="utf-8") as f:
        return AnnotatedReport.model_validate(json.load(f))
