import os
import logging
from typing import List, Optional, Sequence, Tuple
import fitz          # PyMuPDF
import docx          # python-docx

from app.core.config import IMAGE_EXTENSIONS, MIME_ALLOW
from app.services import llm
from app.services.normalize import clean_extracted_text, split_prompt

log = logging.getLogger("extract")


def _pdf_pages(path: str) -> List[str]:
    pages: List[str] = []
    with fitz.open(path) as doc:
        for page in doc:
            # 'blocks' yields tuples; index 4 is the text
            blocks = page.get_text("blocks") or []
            parts = []
            for b in blocks:
                if isinstance(b, (list, tuple)) and len(b) >= 5:
                    text = (b[4] or "").strip()
                    if text:
                        parts.append(text)
            pages.append("\n\n".join(parts))
    return pages


def extract_page(path: str) -> List[str]:
    """
    Return the text of one uploaded file, one string per page.
    Photographs go through the vision model; everything else is read locally.
    """
    ext = os.path.splitext(path)[1].lower()

    if ext == ".pdf":
        return _pdf_pages(path)

    if ext == ".docx":
        d = docx.Document(path)
        return ["\n\n".join(p.text.strip() for p in d.paragraphs if p.text and p.text.strip())]

    if ext == ".txt":
        with open(path, encoding="utf-8", errors="replace") as f:
            return [f.read()]

    if ext in IMAGE_EXTENSIONS:
        with open(path, "rb") as f:
            data = f.read()
        mime = sorted(MIME_ALLOW[ext])[0]
        return [llm.transcribe_image(data, mime)]

    raise ValueError(f"Unsupported extension: {ext}")


def extract_pages(paths: Sequence[str]) -> List[str]:
    # pages are read one after another in upload order
    pages: List[str] = []
    for path in paths:
        for text in extract_page(path):
            text = clean_extracted_text(text)
            if text:
                pages.append(text)
            else:
                log.warning("No text found on a page of %s", os.path.basename(path))
    log.info("Extracted %d pages from %d files", len(pages), len(paths))
    return pages


def load_essay(paths: Sequence[str], prompt: Optional[str] = None) -> Tuple[Optional[str], str]:
    """Combine uploaded pages into (writing prompt, canonical essay text)."""
    full_text = clean_extracted_text("\n\n".join(extract_pages(paths)))
    return split_prompt(full_text, prompt)
