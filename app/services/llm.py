# app/services/llm.py
import base64
import json
import os
import time
import re
import logging
from typing import Optional

from openai import OpenAI

from app.core import config
from app.models.report import EvaluationResult
from app.models.rubric import Rubric
from app.services.evaluation import parse_evaluation

log = logging.getLogger("llm")


class EvaluationError(RuntimeError):
    ...


class EvaluatorUnavailable(EvaluationError):
    """No API key configured."""


_client: Optional[OpenAI] = None


def client() -> OpenAI:
    global _client
    if _client is None:
        if not os.getenv("OPENAI_API_KEY"):
            raise EvaluatorUnavailable("AI evaluation service unavailable. Please check API configuration.")
        # the SDK retries transient network failures itself
        _client = OpenAI(timeout=config.LLM_TIMEOUT, max_retries=3)
    return _client


SYSTEM = (
    "You are an expert essay evaluator and writing tutor.\n"
    "Score strictly against the rubric you are given and give specific, encouraging feedback.\n"
    "Annotation excerpts MUST be copied character-for-character from the essay.\n"
    "Return ONLY valid JSON. No prose, no markdown."
)

VISION_SYSTEM = (
    "You transcribe photographs of handwritten student essays.\n"
    "Return only the text exactly as written, keeping paragraph breaks as blank lines.\n"
    "Do not correct spelling or grammar. Do not add commentary."
)

# grab the last {...} block to be resilient to any prefacing text
_JSON_FENCE = re.compile(r"\{.*\}", re.DOTALL)


def _extract_json(text: str) -> dict:
    try:
        return json.loads(text)
    except Exception:
        pass
    m = _JSON_FENCE.search(text)
    if m:
        return json.loads(m.group(0))
    raise ValueError("Model output was not valid JSON")


def _chat(messages: list, model: Optional[str] = None) -> str:
    """Single call to OpenAI Chat Completions."""
    model = model or config.OPENAI_MODEL
    log.info("LLM chat call model=%s, messages=%d", model, len(messages))
    resp = client().chat.completions.create(model=model, messages=messages)
    return resp.choices[0].message.content or ""


def build_evaluation_prompt(text: str, rubric: Rubric, prompt: Optional[str] = None) -> str:
    scale = f"{rubric.scale.min}-{rubric.scale.max}"
    scored = [c for c in rubric.categories if c.weight > 0 and c.category is not None]
    lines = [f"Evaluate this essay with the {rubric.name} rubric ({rubric.description})."]
    if prompt:
        lines.append(f"Writing Prompt: {prompt}")
    lines += ["", "Essay to Evaluate:", '"""', text, '"""', "",
              f"1. SCORES ({scale} scale) for each category:"]
    lines += [f"   - {c.category.value}: {c.name} ({c.description})" for c in scored]
    lines += [
        "2. FEEDBACK per category: strengths, improvements and suggestions, quoting the essay.",
        "   Do not start feedback with the category name.",
        "3. PARAGRAPH-BY-PARAGRAPH ANALYSIS: number, short title, 2-3 sentences,",
        '   type "excellent" | "positive" | "needs-improvement", priority "high" | "medium" | "low".',
        "4. ANNOTATIONS: exact 3-15 word excerpts from the essay with category",
        "   (grammar, vocabulary, structure, development, clarity, fluency or strengths),",
        '   explanation, suggested text and severity "minor" | "moderate" | "major" | "positive".',
        "5. SUMMARY: top strengths, top areas for improvement, next steps.",
        "",
        "Respond with JSON of this shape:",
        json.dumps({
            "scores": {c.category.value: scale for c in scored},
            "overallScore": "number",
            "feedback": {c.category.value: {"strengths": ["..."], "improvements": ["..."],
                                            "suggestions": ["..."]} for c in scored[:1]},
            "paragraphFeedback": [{"paragraphNumber": 1, "title": "...", "content": "...",
                                   "type": "positive", "priority": "medium"}],
            "annotations": [{"originalText": "exact text from essay", "category": "grammar",
                             "explanation": "...", "suggestedText": "...", "severity": "minor"}],
            "strengths": ["..."],
            "areasForImprovement": ["..."],
            "nextSteps": "...",
        }, indent=2),
    ]
    return "\n".join(lines)


def evaluate_essay(
    text: str,
    rubric: Rubric,
    prompt: Optional[str] = None,
    max_retries: Optional[int] = None,
) -> EvaluationResult:
    """One evaluator exchange, retried on transport or JSON failures."""
    retries = config.LLM_MAX_RETRIES if max_retries is None else max_retries
    messages = [
        {"role": "system", "content": SYSTEM},
        {"role": "user", "content": build_evaluation_prompt(text, rubric, prompt)},
    ]

    last_err: Exception | None = None
    for attempt in range(retries + 1):
        try:
            data = _extract_json(_chat(messages))
            return parse_evaluation(data)
        except EvaluatorUnavailable:
            raise
        except Exception as e:
            last_err = e
            log.warning("Evaluation attempt %d failed: %s", attempt + 1, e)
            if attempt < retries:
                # exponential-ish backoff
                time.sleep(1.0 + 0.75 * attempt)
    raise EvaluationError(f"LLM evaluation failed: {last_err}")


def transcribe_image(data: bytes, mime: str) -> str:
    """Read one handwritten page with the vision model."""
    url = f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
    messages = [
        {"role": "system", "content": VISION_SYSTEM},
        {"role": "user", "content": [
            {"type": "text", "text": "Transcribe this essay page."},
            {"type": "image_url", "image_url": {"url": url}},
        ]},
    ]
    try:
        return _chat(messages, model=config.OPENAI_VISION_MODEL).strip()
    except EvaluatorUnavailable:
        raise
    except Exception as e:
        raise EvaluationError(f"Handwriting transcription failed: {e}") from e
