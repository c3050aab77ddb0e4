# tests/conftest.py
from __future__ import annotations
import io
import json
import shutil
import tempfile
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.core import config

import fitz  # PyMuPDF
import docx

ESSAY = (
    "My favorite place is the library. It is quiet and full of books.\n\n"
    "I go their every Saturday with my sister. We read for hours and "
    "sometimes we smaple new authors.\n\n"
    "In conclusion, the library is a place where I can learn and relax."
)

EVALUATION = {
    "scores": {"grammar": 3, "vocabulary": 4, "structure": 4, "development": 3, "clarity": 4},
    "overallScore": 3.6,
    "feedback": {
        "grammar": {"strengths": ["Sentences are mostly complete."],
                    "improvements": ["Watch homophones such as their/there."]},
        "structure": "Clear introduction and conclusion.",
    },
    "paragraphFeedback": [
        {"paragraphNumber": 2, "title": "Good Detail", "content": "Specific routine.",
         "type": "positive", "priority": "medium"},
        {"paragraphNumber": 1, "title": "Strong Introduction", "content": "Names the place.",
         "type": "excellent", "priority": "high"},
    ],
    "annotations": [
        {"originalText": "I go their every Saturday", "category": "grammar",
         "explanation": "Use 'there' for a place.", "suggestedText": "I go there every Saturday"},
        {"originalText": "smaple", "category": "spelling", "explanation": "Spelling.",
         "suggestedText": "sample"},
        {"originalText": "My favorite place is the library.", "category": "strengths",
         "explanation": "Clear thesis."},
        {"originalText": "a sentence the student never wrote", "category": "clarity",
         "explanation": "Hallucinated."},
    ],
    "strengths": ["Clear focus"],
    "areasForImprovement": ["Proofread for spelling"],
    "nextSteps": "Read your essay aloud before submitting.",
}

HANDWRITTEN_PAGE = "Describe a place you love.\nMy favorite place is the library."


# --------------------------------------------------------------------
# Fixtures for temporary DATA_DIR so tests don't pollute real data dir
# --------------------------------------------------------------------
@pytest.fixture(scope="session")
def tmp_data_dir() -> Generator[str, None, None]:
    d = tempfile.mkdtemp(prefix="test-data-")
    yield d
    shutil.rmtree(d, ignore_errors=True)

@pytest.fixture(autouse=True, scope="session")
def patch_data_dir(tmp_data_dir):
    # Override app's DATA_DIR during tests
    config.DATA_DIR = tmp_data_dir

# --------------------------------------------------------------------
# FastAPI test client available as fixture `client`
# --------------------------------------------------------------------
@pytest.fixture(scope="session")
def client() -> TestClient:
    return TestClient(app)

# --------------------------------------------------------------------
# Helpers to create in-memory sample PDF, DOCX and PNG
# --------------------------------------------------------------------
def _pdf_bytes(text: str) -> bytes:
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 100), text, fontsize=12)
    data = doc.tobytes()
    doc.close()
    return data

def _docx_bytes(text: str) -> bytes:
    d = docx.Document()
    for p in text.split("\n\n"):
        d.add_paragraph(p)
    buf = io.BytesIO()
    d.save(buf)
    return buf.getvalue()

def _png_bytes() -> bytes:
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, 16, 16), False)
    pix.clear_with(255)
    return pix.tobytes("png")

@pytest.fixture
def essay_text() -> str:
    return ESSAY

@pytest.fixture
def evaluation_payload() -> dict:
    return json.loads(json.dumps(EVALUATION))

@pytest.fixture
def sample_pdf_bytes() -> bytes:
    return _pdf_bytes("I go their every Saturday with my sister.")

@pytest.fixture
def sample_docx_bytes() -> bytes:
    return _docx_bytes(ESSAY)

@pytest.fixture
def sample_png_bytes() -> bytes:
    return _png_bytes()

# --------------------------------------------------------------------
# Stub the OpenAI calls: no network, no API key needed
# --------------------------------------------------------------------
@pytest.fixture(autouse=True)
def stub_llm(monkeypatch):
    from app.services import llm as llm_mod

    calls = []

    def _fake_chat(messages, model=None):
        calls.append(messages)
        user = messages[-1]["content"]
        if isinstance(user, list):
            # vision transcription request
            return HANDWRITTEN_PAGE
        return "Here is the evaluation:\n" + json.dumps(EVALUATION)

    monkeypatch.setattr(llm_mod, "_chat", _fake_chat)
    monkeypatch.setattr(llm_mod.time, "sleep", lambda s: None)
    return calls
