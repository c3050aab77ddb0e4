from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional
import logging
import math
from app.models.report import (
    AnnotationRecord, EvaluationResult, FeedbackItem, ParagraphFeedback,
)
from app.models.rubric import Category, resolve_category

log = logging.getLogger("evaluation")

_SEVERITIES = {"minor", "moderate", "major", "positive"}
_PRIORITIES = {"high", "medium", "low"}
_PARAGRAPH_TYPES = {"excellent", "positive", "needs-improvement"}


def _first(d: Dict, *keys, default=None):
    for k in keys:
        v = d.get(k)
        if v is not None:
            return v
    return default


def _as_list(v: Any) -> List:
    return v if isinstance(v, list) else []


def _num(v: Any) -> Optional[float]:
    if isinstance(v, bool):
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    # json.loads accepts NaN, Infinity and 1e999
    return f if math.isfinite(f) else None


def _text(v: Any) -> str:
    return v.strip() if isinstance(v, str) else ""


def _scores(raw: Any) -> Dict[str, float]:
    if not isinstance(raw, dict):
        return {}
    out: Dict[str, float] = {}
    for key, value in raw.items():
        score = _num(value)
        if score is None:
            log.warning("Dropping non-numeric score %r for %r", value, key)
            continue
        category = resolve_category(str(key))
        name = category.value if category else str(key)
        if name in out:
            log.warning("Score %r for %r overrides earlier score %r for %s",
                        value, key, out[name], name)
        out[name] = score
    return out


def _annotation(raw: Any) -> Optional[AnnotationRecord]:
    if not isinstance(raw, dict):
        return None
    category = _text(_first(raw, "category", "type", default=""))
    severity = _text(raw.get("severity")).lower()
    if severity not in _SEVERITIES:
        severity = "positive" if resolve_category(category) is Category.STRENGTHS else "moderate"
    suggestion = _first(raw, "suggestedText", "suggested_replacement", "suggestion")
    excerpt = _first(raw, "originalText", "original_excerpt", "text", "excerpt")
    return AnnotationRecord(
        category=category,
        # kept verbatim, whitespace included, so it can be matched exactly
        original_excerpt=excerpt if isinstance(excerpt, str) else "",
        explanation=_text(_first(raw, "explanation", "feedback", default="")),
        suggested_replacement=suggestion if isinstance(suggestion, str) and suggestion.strip() else None,
        severity=severity,
    )


def _feedback_items(category: str, value: Any) -> Iterable[FeedbackItem]:
    if isinstance(value, str):
        if value.strip():
            yield FeedbackItem(category=category, type="improvement", content=value.strip())
        return
    if not isinstance(value, dict):
        return
    for key, ftype in (("strengths", "strength"), ("improvements", "improvement"),
                       ("suggestions", "suggestion")):
        entries = value.get(key)
        if isinstance(entries, str):
            entries = [entries]
        for entry in _as_list(entries):
            if _text(entry):
                yield FeedbackItem(category=category, type=ftype, content=_text(entry))


def _feedback(raw: Any) -> List[FeedbackItem]:
    items: List[FeedbackItem] = []
    if isinstance(raw, dict):
        for category, value in raw.items():
            items.extend(_feedback_items(str(category), value))
    elif isinstance(raw, list):
        for entry in raw:
            if isinstance(entry, dict):
                ftype = _text(entry.get("type")).lower()
                priority = _text(entry.get("priority")).lower()
                items.append(FeedbackItem(
                    category=_text(entry.get("category")) or "overall",
                    type=ftype if ftype in ("strength", "improvement", "suggestion") else "improvement",
                    title=_text(entry.get("title")) or None,
                    content=_text(_first(entry, "content", "text", default="")),
                    priority=priority if priority in _PRIORITIES else None,
                ))
            elif _text(entry):
                # legacy flat list of remarks
                items.append(FeedbackItem(category="overall", type="improvement", content=_text(entry)))
    return items


def _paragraph(raw: Any) -> Optional[ParagraphFeedback]:
    if not isinstance(raw, dict):
        return None
    number = _num(_first(raw, "paragraphNumber", "paragraph_number"))
    ptype = _text(raw.get("type")).lower()
    priority = _text(raw.get("priority")).lower()
    return ParagraphFeedback(
        paragraph_number=int(number) if number and number >= 1 else 1,
        title=_text(raw.get("title")) or "Paragraph Analysis",
        content=_text(raw.get("content")) or "Analysis not available",
        type=ptype if ptype in _PARAGRAPH_TYPES else "positive",
        priority=priority if priority in _PRIORITIES else "medium",
    )


def parse_evaluation(payload: Any) -> EvaluationResult:
    """
    Shape a raw evaluator JSON object into an EvaluationResult.
    Missing, null or mistyped fields become empty values; this never raises
    on payload shape.
    """
    if not isinstance(payload, dict):
        log.warning("Evaluator payload is %s, not an object; using empty result",
                    type(payload).__name__)
        return EvaluationResult()

    annotations = [a for a in map(_annotation, _as_list(payload.get("annotations"))) if a]
    feedback = _feedback(payload.get("feedback"))

    for s in _as_list(payload.get("strengths")):
        if _text(s):
            feedback.append(FeedbackItem(category="overall", type="strength", content=_text(s)))
    for s in _as_list(_first(payload, "areasForImprovement", "areas_for_improvement")):
        if _text(s):
            feedback.append(FeedbackItem(category="overall", type="improvement", content=_text(s)))
    next_steps = _text(_first(payload, "nextSteps", "next_steps", default=""))
    if next_steps:
        feedback.append(FeedbackItem(category="overall", type="suggestion",
                                     title="Next Steps for Improvement", content=next_steps,
                                     priority="high"))

    paragraphs = [p for p in map(_paragraph, _as_list(
        _first(payload, "paragraphFeedback", "paragraph_feedback"))) if p]

    return EvaluationResult(
        scores=_scores(payload.get("scores")),
        overall=_num(_first(payload, "overallScore", "overall")),
        annotations=annotations,
        feedback=feedback,
        paragraph_feedback=paragraphs,
    )
