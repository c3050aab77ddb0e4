from __future__ import annotations
from typing import List, Optional, Tuple
import re
import textstat
from app.core.config import LONG_SENTENCE_WORDS, SHORT_SENTENCE_WORDS, COMPLEX_WORD_CHARS
from app.models.report import EssayStatistics, EssayStructure

_PARA_SPLIT = re.compile(r"\n\s*\n")
_SENT_SPLIT = re.compile(r"[.!?]+")

PROMPT_PATTERNS = [
    re.compile(r"^(what|describe|explain|do you|why|how|if you|imagine|compare)\b", re.I),
    re.compile(r"\?$"),
]


def normalize_text(text: str) -> str:
    text = re.sub(r"\s+", " ", text)
    text = re.sub(r"\s+([.!?,:;])", r"\1", text)
    text = re.sub(r"([.!?])([A-Z])", r"\1 \2", text)
    text = text.replace("``", '"').replace("''", '"')
    return text.strip()


def clean_extracted_text(text: str) -> str:
    """Tidy intake output without touching word spacing inside lines."""
    lines = [ln.rstrip() for ln in text.replace("\r\n", "\n").replace("\r", "\n").split("\n")]
    text = "\n".join(lines)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def split_paragraphs(text: str) -> List[str]:
    return [p for p in _PARA_SPLIT.split(text) if p.strip()]


def split_sentences(text: str) -> List[str]:
    return [s for s in _SENT_SPLIT.split(text) if s.strip()]


def _r1(x: float) -> float:
    return round(x * 10) / 10


def text_statistics(text: str) -> EssayStatistics:
    normalized = normalize_text(text)
    paragraphs = split_paragraphs(text)
    sentences = split_sentences(normalized)
    words = normalized.split()

    n_words = len(words)
    long_sentences = sum(1 for s in sentences if len(s.split()) > LONG_SENTENCE_WORDS)
    short_sentences = sum(1 for s in sentences if len(s.split()) < SHORT_SENTENCE_WORDS)
    complex_words = sum(1 for w in words if len(w) > COMPLEX_WORD_CHARS)

    return EssayStatistics(
        words=n_words,
        sentences=len(sentences),
        paragraphs=len(paragraphs),
        characters=len(normalized),
        characters_no_spaces=len(re.sub(r"\s+", "", normalized)),
        average_words_per_sentence=_r1(n_words / len(sentences)) if sentences else 0.0,
        average_sentences_per_paragraph=_r1(len(sentences) / len(paragraphs)) if paragraphs else 0.0,
        average_characters_per_word=_r1(len("".join(words)) / n_words) if n_words else 0.0,
        long_sentences=long_sentences,
        short_sentences=short_sentences,
        complex_words=complex_words,
        complexity_score=_r1(complex_words / n_words * 100) if n_words else 0.0,
        flesch_reading_ease=float(textstat.flesch_reading_ease(normalized)) if n_words else None,
    )


def analyze_structure(text: str) -> EssayStructure:
    paragraphs = split_paragraphs(text)
    return EssayStructure(
        has_introduction=len(paragraphs) > 0 and len(paragraphs[0]) > 50,
        has_body_paragraphs=len(paragraphs) >= 3,
        has_conclusion=len(paragraphs) > 1 and len(paragraphs[-1]) > 30,
        paragraph_count=len(paragraphs),
        word_count=len(text.split()),
    )


def split_prompt(full_text: str, detected_prompt: Optional[str] = None) -> Tuple[Optional[str], str]:
    """
    Separate a handwritten/typed writing prompt from the essay body.
    Only the first three non-empty lines are considered. A prompt passed
    by the caller wins and the text is returned untouched.
    """
    if detected_prompt and detected_prompt.strip():
        return detected_prompt.strip(), full_text

    lines = full_text.split("\n")
    seen = 0
    for i, line in enumerate(lines):
        stripped = line.strip()
        if not stripped:
            continue
        if any(p.search(stripped) for p in PROMPT_PATTERNS):
            essay = clean_extracted_text("\n".join(lines[i + 1:]))
            return stripped, essay
        seen += 1
        if seen >= 3:
            break
    return None, full_text
