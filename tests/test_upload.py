import io
import os

from app.core import config

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def test_upload_pdf(client, sample_pdf_bytes):
    files = [("files", ("sample.pdf", io.BytesIO(sample_pdf_bytes), "application/pdf"))]
    r = client.post("/upload", files=files)
    assert r.status_code == 200, r.text
    payload = r.json()
    assert "doc_id" in payload
    assert payload["pages"] == 1

def test_upload_docx(client, sample_docx_bytes):
    files = [("files", ("sample.docx", io.BytesIO(sample_docx_bytes), DOCX_MIME))]
    r = client.post("/upload", files=files)
    assert r.status_code == 200, r.text
    assert "doc_id" in r.json()

def test_upload_txt(client, essay_text):
    files = [("files", ("essay.txt", io.BytesIO(essay_text.encode("utf-8")), "text/plain"))]
    r = client.post("/upload", files=files)
    assert r.status_code == 200, r.text

def test_upload_pages_keep_order(client, sample_png_bytes):
    files = [
        ("files", ("page1.png", io.BytesIO(sample_png_bytes), "image/png")),
        ("files", ("page2.png", io.BytesIO(sample_png_bytes), "image/png")),
    ]
    r = client.post("/upload", files=files)
    assert r.status_code == 200, r.text
    paths = r.json()["stored_paths"]
    assert [os.path.basename(p) for p in paths] == ["original_01.png", "original_02.png"]
    assert all(os.path.isfile(p) for p in paths)

def test_upload_wrong_ext(client, sample_pdf_bytes):
    files = [("files", ("bad.exe", io.BytesIO(sample_pdf_bytes), "application/octet-stream"))]
    r = client.post("/upload", files=files)
    assert r.status_code == 400

def test_upload_mime_mismatch(client, sample_pdf_bytes):
    # .txt name but pdf content -> blocked by MIME sniffing
    files = [("files", ("bad.txt", io.BytesIO(sample_pdf_bytes), "text/plain"))]
    r = client.post("/upload", files=files)
    assert r.status_code == 400
    assert "MIME" in r.json()["detail"]

def test_upload_too_many_files(client, sample_png_bytes, monkeypatch):
    monkeypatch.setattr(config, "MAX_FILES", 1)
    files = [
        ("files", ("a.png", io.BytesIO(sample_png_bytes), "image/png")),
        ("files", ("b.png", io.BytesIO(sample_png_bytes), "image/png")),
    ]
    r = client.post("/upload", files=files)
    assert r.status_code == 400

def test_upload_file_too_large(client, sample_pdf_bytes, monkeypatch):
    monkeypatch.setattr(config, "MAX_FILE_BYTES", 100)
    files = [("files", ("big.pdf", io.BytesIO(sample_pdf_bytes), "application/pdf"))]
    r = client.post("/upload", files=files)
    assert r.status_code == 413

def test_request_body_too_large(client, sample_pdf_bytes, monkeypatch):
    monkeypatch.setattr(config, "MAX_UPLOAD_BYTES", 100)
    files = [("files", ("big.pdf", io.BytesIO(sample_pdf_bytes), "application/pdf"))]
    r = client.post("/upload", files=files)
    assert r.status_code == 413
    assert r.json()["detail"] == "Upload too large"
