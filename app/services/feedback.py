from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple
import logging
from app.models.report import FeedbackBlock, FeedbackItem, ResolvedAnnotation
from app.models.rubric import Category, CategoryMetadata, category_metadata, resolve_category

log = logging.getLogger("feedback")

TYPE_ORDER = ("strength", "improvement", "suggestion")
TYPE_TITLES = {
    "strength": "Strengths",
    "improvement": "Areas for Growth",
    "suggestion": "Suggestions",
}
_PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}


def _group_key(item: FeedbackItem) -> Tuple[Optional[Category], str]:
    category = resolve_category(item.category)
    if category is not None:
        return category, category.value
    # unrecognized labels stay separate from each other
    return None, (item.category or "overall").strip().lower()


def compose_feedback(
    items: Sequence[FeedbackItem],
    category_meta: Sequence[CategoryMetadata],
    annotations: Sequence[ResolvedAnnotation] = (),
) -> List[FeedbackBlock]:
    """Group feedback into one block per (category, type); empty groups are skipped."""
    meta = list(category_meta)
    groups: Dict[Tuple[str, str], List[FeedbackItem]] = {}
    category_of: Dict[str, Optional[Category]] = {}
    first_seen: Dict[str, int] = {}

    for item in items:
        if not (item.content or "").strip():
            continue
        category, key = _group_key(item)
        category_of[key] = category
        first_seen.setdefault(key, len(first_seen))
        groups.setdefault((key, item.type), []).append(item)

    rubric_order = {m.category.value: i for i, m in enumerate(meta) if m.category is not None}

    def order(k: Tuple[str, str]):
        key, ftype = k
        known = key in rubric_order
        return (0 if known else 1,
                rubric_order.get(key, len(rubric_order) + first_seen[key]),
                TYPE_ORDER.index(ftype))

    blocks: List[FeedbackBlock] = []
    unknown_logged = set()
    for key, ftype in sorted(groups, key=order):
        group = groups[(key, ftype)]
        category = category_of[key]
        cm = category_metadata(category, meta)
        if category is None and key not in unknown_logged:
            unknown_logged.add(key)
            log.info("Unrecognized feedback category %r; using default display metadata", key)

        contents = [i.content.strip() for i in group]
        if len(group) == 1 and group[0].title:
            title = group[0].title
        else:
            title = f"{cm.name} - {TYPE_TITLES[ftype]}"
        priorities = [i.priority for i in group if i.priority]
        priority = min(priorities, key=_PRIORITY_RANK.__getitem__) if priorities else cm.priority
        related = [a.marker for a in annotations if category is not None and a.category is category]

        blocks.append(FeedbackBlock(
            id=f"feedback_{key}_{ftype}",
            category=key,
            category_name=cm.name,
            type=ftype,
            title=title,
            content="; ".join(contents),
            items=contents,
            priority=priority,
            color=cm.color,
            legend_id=key if category is not None else None,
            related_markers=related,
        ))
    return blocks
