# tests/test_normalize.py
from app.models.report import EssayDocument
from app.services.normalize import (
    analyze_structure, clean_extracted_text, normalize_text, split_prompt, text_statistics,
)


def test_normalize_text_spacing_and_punctuation():
    assert normalize_text("  Hello   world .This is\n fine ") == "Hello world. This is fine"
    assert normalize_text("``quoted''") == '"quoted"'


def test_clean_extracted_text_keeps_paragraph_breaks():
    raw = "line one   \r\nline two\n\n\n\nline three\n"
    assert clean_extracted_text(raw) == "line one\nline two\n\nline three"


def test_statistics_counts():
    stats = text_statistics("The cat sat. The dog ran!\n\nBirds fly.")
    assert stats.words == 8
    assert stats.sentences == 3
    assert stats.paragraphs == 2
    assert stats.average_words_per_sentence == 2.7
    assert stats.short_sentences == 3
    assert stats.long_sentences == 0
    assert stats.complex_words == 0
    assert stats.flesch_reading_ease is not None


def test_statistics_long_and_complex():
    sentence = " ".join(["wonderful"] * 21) + "."
    stats = text_statistics(sentence)
    assert stats.long_sentences == 1
    assert stats.complex_words == 21
    assert stats.complexity_score == 100.0


def test_statistics_empty_text():
    stats = text_statistics("")
    assert stats.words == 0
    assert stats.sentences == 0
    assert stats.paragraphs == 0
    assert stats.average_words_per_sentence == 0.0
    assert stats.flesch_reading_ease is None


def test_structure_of_full_essay(essay_text):
    structure = analyze_structure(essay_text)
    assert structure.paragraph_count == 3
    assert structure.has_introduction
    assert structure.has_body_paragraphs
    assert structure.has_conclusion


def test_structure_of_single_short_paragraph():
    structure = analyze_structure("Too short.")
    assert not structure.has_introduction
    assert not structure.has_body_paragraphs
    assert not structure.has_conclusion


def test_document_exposes_statistics(essay_text):
    doc = EssayDocument(text=essay_text, prompt="Describe a place.")
    assert doc.statistics().paragraphs == 3
    assert doc.structure().paragraph_count == 3


def test_split_prompt_first_line():
    prompt, essay = split_prompt("Describe a place you love.\nMy favorite place is the library.")
    assert prompt == "Describe a place you love."
    assert essay == "My favorite place is the library."


def test_split_prompt_question_on_second_line():
    prompt, essay = split_prompt("Name: Sam\nWhat would you change about your school?\n\nMore recess.")
    assert prompt == "What would you change about your school?"
    assert essay == "More recess."


def test_split_prompt_only_checks_first_three_lines():
    text = "One.\nTwo.\nThree.\nWhy do we sleep?\nBody."
    assert split_prompt(text) == (None, text)


def test_split_prompt_none_found():
    text = "I like dogs.\nThey are fun."
    assert split_prompt(text) == (None, text)


def test_split_prompt_caller_prompt_wins():
    text = "Describe your day.\nIt was fine."
    assert split_prompt(text, "  Given prompt ") == ("Given prompt", text)
