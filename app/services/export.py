# app/services/export.py
from __future__ import annotations

import os
import re
import logging
from pathlib import Path
from typing import Dict, Literal

import fitz  # PyMuPDF
from docx import Document
from docx.enum.text import WD_COLOR_INDEX
from docx.shared import Pt, RGBColor

from app.models.report import AnnotatedReport, ResolvedAnnotation
from app.models.rubric import Category
from app.services.render import render_html

log = logging.getLogger("export")

ExportFormat = Literal["html", "pdf", "docx"]

# Word only offers a fixed highlight palette
HIGHLIGHTS = {
    Category.GRAMMAR: WD_COLOR_INDEX.PINK,
    Category.VOCABULARY: WD_COLOR_INDEX.TURQUOISE,
    Category.STRUCTURE: WD_COLOR_INDEX.BRIGHT_GREEN,
    Category.DEVELOPMENT: WD_COLOR_INDEX.VIOLET,
    Category.CLARITY: WD_COLOR_INDEX.YELLOW,
    Category.FLUENCY: WD_COLOR_INDEX.TEAL,
    Category.STRENGTHS: WD_COLOR_INDEX.GREEN,
}

_PARA_BREAK = re.compile(r"\n\s*\n")


def _rgb(color: str) -> RGBColor:
    try:
        return RGBColor.from_string(color.lstrip("#")[:6].upper())
    except ValueError:
        return RGBColor(0x6B, 0x72, 0x80)


def write_pdf(html: str, out_path: str) -> str:
    """Lay the HTML report out on letter pages."""
    story = fitz.Story(html=html)
    writer = fitz.DocumentWriter(out_path)
    mediabox = fitz.paper_rect("letter")
    where = mediabox + (36, 36, -36, -36)
    more = True
    while more:
        device = writer.begin_page(mediabox)
        more, _ = story.place(where)
        story.draw(device)
        writer.end_page()
    writer.close()
    return out_path


def write_docx(report: AnnotatedReport, out_path: str) -> str:
    doc = Document()
    s = report.scores
    overall = "N/A" if s.overall is None else f"{s.overall:g}"
    doc.add_heading(f"{report.metadata.rubric_name} Essay Evaluation - Score {overall}/{s.max_score}", level=1)
    if report.metadata.prompt:
        p = doc.add_paragraph()
        p.add_run("Prompt: ").bold = True
        p.add_run(report.metadata.prompt).italic = True

    legend = doc.add_paragraph()
    for item in report.legend:
        run = legend.add_run(f"{item.marker_prefix} {item.name}   ")
        run.font.color.rgb = _rgb(item.color)
        run.font.size = Pt(9)

    by_id: Dict[str, ResolvedAnnotation] = {a.id: a for a in report.annotations}
    para = doc.add_paragraph()
    for seg in report.segments:
        pieces = _PARA_BREAK.split(seg.text)
        for k, piece in enumerate(pieces):
            if k > 0:
                para = doc.add_paragraph()
            for j, line in enumerate(piece.split("\n")):
                if j > 0:
                    para.add_run().add_break()
                if not line:
                    continue
                run = para.add_run(line)
                if seg.annotation_ids:
                    first = by_id[seg.annotation_ids[0]]
                    run.font.highlight_color = HIGHLIGHTS.get(first.category, WD_COLOR_INDEX.GRAY_25)
        for aid in seg.annotation_ids:
            a = by_id[aid]
            if a.end_index == seg.end_index:
                marker = para.add_run(a.marker)
                marker.font.superscript = True
                marker.bold = True
                marker.font.color.rgb = _rgb(a.color)

    if report.annotations:
        doc.add_heading("Annotations", level=2)
        for a in report.annotations:
            p = doc.add_paragraph(style="List Number")
            m = p.add_run(f"{a.marker} ")
            m.bold = True
            m.font.color.rgb = _rgb(a.color)
            if a.suggested_replacement:
                p.add_run(a.original_excerpt).font.strike = True
                p.add_run(" -> ")
                p.add_run(a.suggested_replacement).bold = True
                p.add_run(". ")
            p.add_run(a.explanation)

    doc.add_heading("Score Breakdown", level=2)
    table = doc.add_table(rows=1, cols=3)
    table.style = "Table Grid"
    hdr = table.rows[0].cells
    hdr[0].text, hdr[1].text, hdr[2].text = "Category", "Score", "Weight"
    for c in s.categories:
        row = table.add_row().cells
        row[0].text = c.name
        row[1].text = f"{c.score:g}/{c.max_score}" + (f" ({c.label})" if c.label else "")
        row[2].text = f"{c.weight:g}"
    row = table.add_row().cells
    row[0].text, row[1].text = "Overall", f"{overall}/{s.max_score}"

    if report.feedback_blocks:
        doc.add_heading("Detailed Feedback", level=2)
        for b in report.feedback_blocks:
            h = doc.add_paragraph()
            t = h.add_run(b.title)
            t.bold = True
            t.font.color.rgb = _rgb(b.color)
            if b.related_markers:
                h.add_run(f" ({', '.join(b.related_markers)})")
            doc.add_paragraph(b.content)

    if report.paragraph_feedback:
        doc.add_heading("Paragraph Feedback", level=2)
        for pf in report.paragraph_feedback:
            p = doc.add_paragraph()
            p.add_run(f"Paragraph {pf.paragraph_number}: {pf.title}. ").bold = True
            p.add_run(pf.content)

    doc.save(out_path)
    return out_path


def export_report(report: AnnotatedReport, out_dir: str, fmt: ExportFormat = "pdf") -> str:
    """Write report.<fmt> into out_dir and return its absolute path."""
    os.makedirs(out_dir, exist_ok=True)
    target = Path(out_dir).joinpath(f"report.{fmt}")

    if fmt == "html":
        target.write_text(render_html(report), encoding="utf-8")
    elif fmt == "pdf":
        write_pdf(render_html(report), str(target))
    elif fmt == "docx":
        write_docx(report, str(target))
    else:
        raise ValueError("fmt must be 'html', 'pdf' or 'docx'")

    log.info("Exported report as %s: %s", fmt, target)
    return str(target.resolve())
