from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Set, Tuple
import logging
from app.models.report import (
    AnnotationRecord, DroppedAnnotation, Placement, ResolvedAnnotation, TextSegment,
)
from app.models.rubric import Category, CategoryMetadata, category_metadata, marker_prefix, resolve_category

log = logging.getLogger("annotate")


def _occurrences(text: str, excerpt: str):
    start = text.find(excerpt)
    while start != -1:
        yield start
        start = text.find(excerpt, start + 1)


def _bind(text: str, excerpt: str, claimed: Set[Tuple[int, int]]) -> Optional[int]:
    """First occurrence whose span is still free; the first occurrence if all are taken."""
    first = None
    for start in _occurrences(text, excerpt):
        if first is None:
            first = start
        if (start, start + len(excerpt)) not in claimed:
            return start
    return first


def assign_markers(annotations: Sequence[ResolvedAnnotation]) -> List[ResolvedAnnotation]:
    """
    Number markers per category in the order given (callers pass document order).
    Returns new objects; counters live only for this call.
    """
    counts: Dict[Optional[Category], int] = {}
    out: List[ResolvedAnnotation] = []
    for a in annotations:
        n = counts.get(a.category, 0) + 1
        counts[a.category] = n
        out.append(a.model_copy(update={"marker": f"{marker_prefix(a.category)}{n}"}))
    return out


def locate_annotations(
    text: str,
    records: Sequence[AnnotationRecord],
    category_meta: Sequence[CategoryMetadata] = (),
) -> Placement:
    """
    Place evaluator annotations onto the essay as half-open character spans.

    Excerpts are matched verbatim. Records whose excerpt is empty or absent
    are dropped and reported in ``Placement.dropped``; overlapping and
    identical spans are all kept. Result is in document order with markers
    numbered by reading order within each category.
    """
    claimed: Set[Tuple[int, int]] = set()
    located: List[Tuple[int, int, ResolvedAnnotation]] = []
    dropped: List[DroppedAnnotation] = []

    for idx, rec in enumerate(records):
        excerpt = rec.original_excerpt or ""
        if not excerpt:
            dropped.append(DroppedAnnotation(
                index=idx, category=rec.category, original_excerpt=excerpt, reason="empty_excerpt"))
            continue

        start = _bind(text, excerpt, claimed)
        if start is None:
            dropped.append(DroppedAnnotation(
                index=idx, category=rec.category, original_excerpt=excerpt, reason="not_found"))
            continue

        end = start + len(excerpt)
        claimed.add((start, end))
        category = resolve_category(rec.category)
        located.append((start, idx, ResolvedAnnotation(
            id=f"annotation_{idx}",
            category=category,
            category_label=rec.category,
            start_index=start,
            end_index=end,
            original_excerpt=excerpt,
            explanation=rec.explanation,
            suggested_replacement=rec.suggested_replacement,
            severity=rec.severity,
            color=category_metadata(category, list(category_meta)).color,
        )))

    if dropped:
        log.info("%d of %d annotations could not be placed", len(dropped), len(records))

    located.sort(key=lambda t: (t[0], t[1]))
    return Placement(annotations=assign_markers([a for _, _, a in located]), dropped=dropped)


def build_segments(text: str, resolved: Sequence[ResolvedAnnotation]) -> List[TextSegment]:
    """
    Cut the essay into contiguous segments at every annotation boundary.

    Each segment lists the ids of all annotations covering it, so identical
    spans share one segment and partial overlaps become sub-segments.
    Segments always start at 0, end at len(text) and never gap or overlap.
    """
    n = len(text)
    valid = []
    for a in sorted(resolved, key=lambda a: a.start_index):
        if 0 <= a.start_index < a.end_index <= n:
            valid.append(a)
        else:
            log.warning("Skipping annotation %s with invalid span [%d, %d)",
                        a.id, a.start_index, a.end_index)

    if n == 0:
        return [TextSegment(text="", start_index=0, end_index=0)]

    bounds = sorted({0, n, *(a.start_index for a in valid), *(a.end_index for a in valid)})
    segments: List[TextSegment] = []
    for lo, hi in zip(bounds, bounds[1:]):
        ids = [a.id for a in valid if a.start_index <= lo and a.end_index >= hi]
        segments.append(TextSegment(text=text[lo:hi], start_index=lo, end_index=hi, annotation_ids=ids))
    return segments
