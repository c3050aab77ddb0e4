# tests/test_export.py
import docx
import fitz
import pytest

from app.core.rubrics import ESSAY_TUTOR
from app.services.evaluation import parse_evaluation
from app.services.export import export_report
from app.services.render import render_html
from app.services.report import build_report


@pytest.fixture
def report(essay_text, evaluation_payload):
    return build_report(essay_text, parse_evaluation(evaluation_payload), ESSAY_TUTOR,
                        prompt="Describe a place you love.")


def test_html_escapes_essay_text():
    r = build_report("1 < 2 & <b>bold</b>", parse_evaluation({}), ESSAY_TUTOR)
    html = render_html(r)
    assert "&lt;b&gt;bold&lt;/b&gt;" in html
    assert "<b>bold</b>" not in html
    assert "Score N/A/5" in html


def test_html_has_markers_legend_and_scores(report):
    html = render_html(report)
    assert html.count('class="annotation-marker"') == 3
    assert "Strengths &amp; Excellence" in html
    assert "Describe a place you love." in html
    assert "3.6" in html


def test_html_file(report, tmp_path):
    path = export_report(report, str(tmp_path), fmt="html")
    assert path.endswith("report.html")
    with open(path, encoding="utf-8") as f:
        assert f.read().startswith("<!DOCTYPE html>")


def test_pdf_file_has_essay_text(report, tmp_path):
    path = export_report(report, str(tmp_path), fmt="pdf")
    with fitz.open(path) as doc:
        text = "".join(page.get_text() for page in doc)
    assert "favorite place" in text


def test_docx_file_marks_annotations(report, tmp_path):
    path = export_report(report, str(tmp_path), fmt="docx")
    d = docx.Document(path)
    superscripts = [r.text for p in d.paragraphs for r in p.runs if r.font.superscript]
    assert superscripts == ["✓1", "G1", "G2"]
    assert len(d.tables) == 1


def test_unknown_format_rejected(report, tmp_path):
    with pytest.raises(ValueError):
        export_report(report, str(tmp_path), fmt="odt")
