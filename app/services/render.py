from __future__ import annotations
from html import escape
from typing import Dict, List
from app.models.report import AnnotatedReport, ResolvedAnnotation

REPORT_CSS = """
body { font-family: Helvetica, Arial, sans-serif; line-height: 1.6; color: #1e293b; font-size: 12px; margin: 0; }
.report-header { background-color: #667eea; color: #ffffff; text-align: center; padding: 16px; }
.report-header h1 { font-size: 20px; margin: 0 0 6px 0; }
.prompt { font-style: italic; }
.legend { margin: 12px 0; }
.legend-item { display: inline; margin-right: 12px; }
.swatch { font-weight: bold; }
.essay-text { border: 1px solid #e2e8f0; padding: 12px; margin: 12px 0; }
.marked-text { padding: 1px 2px; }
.annotation-marker { color: #ffffff; font-size: 9px; font-weight: bold; padding: 0 3px; vertical-align: super; }
.notes li { margin-bottom: 6px; }
.original-text { text-decoration: line-through; color: #b91c1c; }
.suggested-text { color: #15803d; font-weight: bold; }
table.scores { border-collapse: collapse; width: 100%; }
table.scores td, table.scores th { border-bottom: 1px solid #e2e8f0; padding: 4px; text-align: left; }
.feedback-block { border-left: 4px solid #6b7280; padding: 4px 8px; margin: 8px 0; }
.feedback-header { font-weight: bold; }
.paragraph-feedback { margin: 6px 0; }
.meta { color: #64748b; font-size: 10px; }
"""


def _h(text: str) -> str:
    return escape(text or "").replace("\n", "<br>\n")


def _fmt(score) -> str:
    if score is None:
        return "N/A"
    return f"{score:g}"


def _essay_html(report: AnnotatedReport) -> str:
    by_id: Dict[str, ResolvedAnnotation] = {a.id: a for a in report.annotations}
    out: List[str] = []
    for seg in report.segments:
        if not seg.annotation_ids:
            out.append(_h(seg.text))
            continue
        # colour by the first annotation covering the segment
        first = by_id[seg.annotation_ids[0]]
        markers = "".join(
            f'<span class="annotation-marker" style="background-color: {a.color}">{escape(a.marker)}</span>'
            for a in (by_id[i] for i in seg.annotation_ids) if a.end_index == seg.end_index
        )
        out.append(
            f'<span class="marked-text" style="background-color: {first.color}33; '
            f'border-bottom: 2px solid {first.color}">{_h(seg.text)}</span>{markers}'
        )
    return "".join(out)


def render_html(report: AnnotatedReport) -> str:
    """Standalone printable HTML for one report."""
    s = report.scores
    meta = report.metadata
    title = f"{meta.rubric_name} Essay Evaluation - Score {_fmt(s.overall)}/{s.max_score}"
    parts: List[str] = [
        "<!DOCTYPE html>",
        '<html lang="en"><head><meta charset="UTF-8">',
        f"<title>{escape(title)}</title>",
        f"<style>{REPORT_CSS}</style></head><body>",
        '<div class="report-header">',
        f"<h1>{escape(title)}</h1>",
    ]
    if s.overall_label:
        parts.append(f"<div>{escape(s.overall_label)}</div>")
    if meta.prompt:
        parts.append(f'<div class="prompt"><strong>Prompt:</strong> {_h(meta.prompt)}</div>')
    parts.append("</div>")

    parts.append('<div class="legend">')
    for item in report.legend:
        parts.append(
            f'<span class="legend-item"><span class="swatch" style="color: {item.color}">'
            f"{escape(item.marker_prefix)}</span> {escape(item.name)}</span>"
        )
    parts.append("</div>")

    parts.append(f'<div class="essay-text">{_essay_html(report)}</div>')

    if report.annotations:
        parts.append("<h2>Annotations</h2><ol class=\"notes\">")
        for a in report.annotations:
            parts.append(f'<li><strong style="color: {a.color}">{escape(a.marker)}</strong> ')
            if a.suggested_replacement:
                parts.append(
                    f'<span class="original-text">{_h(a.original_excerpt)}</span> &rarr; '
                    f'<span class="suggested-text">{_h(a.suggested_replacement)}</span><br>'
                )
            parts.append(f"{_h(a.explanation)}</li>")
        parts.append("</ol>")

    parts.append("<h2>Score Breakdown</h2><table class=\"scores\">")
    parts.append("<tr><th>Category</th><th>Score</th><th>Weight</th></tr>")
    for c in s.categories:
        label = f" ({escape(c.label)})" if c.label else ""
        parts.append(
            f"<tr><td>{escape(c.name)}</td><td>{_fmt(c.score)}/{c.max_score}{label}</td>"
            f"<td>{c.weight:g}</td></tr>"
        )
    parts.append(f"<tr><th>Overall</th><th>{_fmt(s.overall)}/{s.max_score}</th><th></th></tr></table>")

    if report.feedback_blocks:
        parts.append("<h2>Detailed Feedback</h2>")
        for b in report.feedback_blocks:
            related = f' <span class="meta">({", ".join(map(escape, b.related_markers))})</span>' \
                if b.related_markers else ""
            parts.append(
                f'<div class="feedback-block" style="border-left-color: {b.color}">'
                f'<div class="feedback-header">{escape(b.title)}{related}</div>'
                f"<div>{_h(b.content)}</div></div>"
            )

    if report.paragraph_feedback:
        parts.append("<h2>Paragraph Feedback</h2>")
        for p in report.paragraph_feedback:
            parts.append(
                f'<div class="paragraph-feedback"><strong>Paragraph {p.paragraph_number}: '
                f"{escape(p.title)}</strong> {_h(p.content)}</div>"
            )

    st = report.statistics
    parts.append(
        f'<p class="meta">{st.words} words, {st.sentences} sentences, {st.paragraphs} paragraphs. '
        f"{meta.placed_annotations} of {meta.total_annotations} annotations placed.</p>"
    )
    parts.append("</body></html>")
    return "\n".join(parts)
