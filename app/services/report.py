from __future__ import annotations
from typing import Dict, List, Optional, Sequence
import logging
import math
from app.models.report import (
    AnnotatedReport, CategoryScore, EssayDocument, EvaluationResult, FeedbackBlock,
    LegendEntry, ParagraphFeedback, Placement, ReportMetadata, ScoreSummary, TextSegment,
)
from app.models.rubric import Category, Rubric, marker_prefix
from app.services.annotate import build_segments, locate_annotations
from app.services.feedback import compose_feedback

log = logging.getLogger("report")


class ScoreNormalizationError(ValueError):
    """Rubric weights cannot normalize the scores that are present."""


def build_legend(rubric: Rubric) -> List[LegendEntry]:
    # every known category, used in this essay or not
    entries = []
    for category in Category:
        meta = rubric.meta_for(category)
        entries.append(LegendEntry(
            id=category.value, name=meta.name, color=meta.color,
            description=meta.description, marker_prefix=marker_prefix(category),
        ))
    return entries


def weighted_overall(scores: Dict[str, float], rubric: Rubric) -> Optional[float]:
    """
    sum(score * weight) / sum(weight) over rubric categories that carry a
    score, rounded half-up to one decimal. Weights need not sum to 1.
    None when no rubric category is scored.
    """
    pairs = []
    for meta in rubric.categories:
        if meta.category is None or meta.category.value not in scores:
            continue
        if meta.weight < 0:
            raise ScoreNormalizationError(
                f"Negative weight {meta.weight} for category {meta.category.value}")
        pairs.append((scores[meta.category.value], meta.weight))
    if not pairs:
        return None

    total = sum(w for _, w in pairs)
    if total <= 0:
        if any(m.weight > 0 for m in rubric.categories):
            # only legend-only categories were scored
            return None
        raise ScoreNormalizationError(f"Rubric {rubric.id} has a total category weight of zero")
    mean = sum(s * w for s, w in pairs) / total
    return math.floor(mean * 10 + 0.5) / 10


def clamp_scores(scores: Dict[str, float], rubric: Rubric) -> Dict[str, float]:
    lo, hi = rubric.scale.min, rubric.scale.max
    out: Dict[str, float] = {}
    for key, score in scores.items():
        clamped = min(max(score, lo), hi)
        if clamped != score:
            log.warning("Score %s for %s is outside %s-%s; clamped to %s", score, key, lo, hi, clamped)
        out[key] = clamped
    return out


def score_summary(evaluation: EvaluationResult, rubric: Rubric) -> ScoreSummary:
    scores = clamp_scores(evaluation.scores, rubric)
    categories: List[CategoryScore] = []
    for meta in rubric.categories:
        if meta.category is None or meta.category.value not in scores:
            continue
        score = scores[meta.category.value]
        categories.append(CategoryScore(
            category=meta.category.value, name=meta.name, score=score,
            max_score=rubric.scale.max, weight=meta.weight,
            label=rubric.scale.label_for(score),
        ))
    overall = weighted_overall(scores, rubric)
    return ScoreSummary(
        categories=categories,
        overall=overall,
        overall_label=rubric.scale.label_for(overall),
        reported_overall=evaluation.overall,
        min_score=rubric.scale.min,
        max_score=rubric.scale.max,
    )


def assemble_report(
    document: EssayDocument,
    placement: Placement,
    segments: Sequence[TextSegment],
    feedback_blocks: Sequence[FeedbackBlock],
    scores: ScoreSummary,
    rubric: Rubric,
    paragraph_feedback: Sequence[ParagraphFeedback] = (),
    generated_at: Optional[str] = None,
) -> AnnotatedReport:
    unrecognized = sorted({a.category_label for a in placement.annotations if a.category is None})
    return AnnotatedReport(
        text=document.text,
        statistics=document.statistics(),
        structure=document.structure(),
        segments=list(segments),
        annotations=list(placement.annotations),
        feedback_blocks=list(feedback_blocks),
        paragraph_feedback=sorted(paragraph_feedback, key=lambda p: p.paragraph_number),
        legend=build_legend(rubric),
        scores=scores,
        metadata=ReportMetadata(
            rubric_id=rubric.id,
            rubric_name=rubric.name,
            prompt=document.prompt,
            total_annotations=placement.total_count,
            placed_annotations=len(placement.annotations),
            dropped_annotations=placement.dropped_count,
            dropped_excerpts=[d.original_excerpt for d in placement.dropped],
            unrecognized_categories=unrecognized,
            generated_at=generated_at,
        ),
    )


def build_report(
    text: str,
    evaluation: EvaluationResult,
    rubric: Rubric,
    prompt: Optional[str] = None,
    generated_at: Optional[str] = None,
) -> AnnotatedReport:
    """Run locate -> segment -> compose -> assemble for one evaluated essay."""
    document = EssayDocument(text=text, prompt=prompt)
    placement = locate_annotations(document.text, evaluation.annotations, rubric.categories)
    segments = build_segments(document.text, placement.annotations)
    blocks = compose_feedback(evaluation.feedback, rubric.categories, placement.annotations)
    report = assemble_report(
        document, placement, segments, blocks, score_summary(evaluation, rubric), rubric,
        paragraph_feedback=evaluation.paragraph_feedback, generated_at=generated_at,
    )
    log.info("Report built: rubric=%s segments=%d annotations=%d/%d blocks=%d",
             rubric.id, len(segments), len(placement.annotations), placement.total_count, len(blocks))
    return report
