# tests/test_evaluation.py
import json
import logging

import pytest

from app.services.evaluation import parse_evaluation


@pytest.mark.parametrize("payload", [None, [], "text", 42])
def test_non_object_payload_gives_empty_result(payload):
    result = parse_evaluation(payload)
    assert result.scores == {}
    assert result.overall is None
    assert result.annotations == []
    assert result.feedback == []


def test_full_payload(evaluation_payload):
    result = parse_evaluation(evaluation_payload)
    assert result.scores["grammar"] == 3.0
    assert result.overall == 3.6
    assert len(result.annotations) == 4
    assert [p.paragraph_number for p in result.paragraph_feedback] == [2, 1]

    kinds = [(f.category, f.type) for f in result.feedback]
    assert ("grammar", "strength") in kinds
    assert ("grammar", "improvement") in kinds
    assert ("structure", "improvement") in kinds
    assert ("overall", "strength") in kinds
    next_steps = [f for f in result.feedback if f.title == "Next Steps for Improvement"]
    assert next_steps[0].priority == "high"


def test_scores_resolve_aliases_and_drop_junk():
    result = parse_evaluation({"scores": {"Conventions": "3", "Organization": 4, "bad": "x",
                                          "flag": True, "penmanship": 2}})
    assert result.scores == {"grammar": 3.0, "structure": 4.0, "penmanship": 2.0}


def test_annotation_fields_and_defaults():
    result = parse_evaluation({"annotations": [
        {"originalText": "  spaced  ", "category": "grammar", "severity": "SEVERE"},
        {"text": "nice", "type": "strengths", "suggestedText": "   "},
        {"original_excerpt": "x", "category": "clarity", "severity": "major",
         "suggested_replacement": "y", "feedback": "Say it plainly."},
        "not a dict",
    ]})
    first, second, third = result.annotations
    assert first.original_excerpt == "  spaced  "
    assert first.severity == "moderate"
    assert second.category == "strengths"
    assert second.severity == "positive"
    assert second.suggested_replacement is None
    assert third.severity == "major"
    assert third.suggested_replacement == "y"
    assert third.explanation == "Say it plainly."


def test_missing_excerpt_becomes_empty_string():
    result = parse_evaluation({"annotations": [{"category": "grammar", "originalText": None}]})
    assert result.annotations[0].original_excerpt == ""


def test_feedback_list_of_objects():
    result = parse_evaluation({"feedback": [
        {"category": "clarity", "type": "suggestion", "title": "Tighten", "content": "Cut filler.",
         "priority": "LOW"},
        {"type": "weird", "content": "General remark."},
    ]})
    first, second = result.feedback
    assert (first.category, first.type, first.title, first.priority) == ("clarity", "suggestion", "Tighten", "low")
    assert (second.category, second.type, second.priority) == ("overall", "improvement", None)


def test_feedback_legacy_string_list():
    result = parse_evaluation({"feedback": ["Proofread.", "", "Vary sentences."]})
    assert [f.content for f in result.feedback] == ["Proofread.", "Vary sentences."]
    assert all(f.category == "overall" for f in result.feedback)


def test_feedback_dict_with_string_entries():
    result = parse_evaluation({"feedback": {"vocabulary": {"suggestions": "Use stronger verbs."}}})
    [item] = result.feedback
    assert (item.category, item.type, item.content) == ("vocabulary", "suggestion", "Use stronger verbs.")


def test_paragraph_feedback_defaults():
    result = parse_evaluation({"paragraphFeedback": [{"paragraphNumber": 0, "type": "odd"}]})
    [p] = result.paragraph_feedback
    assert p.paragraph_number == 1
    assert p.title == "Paragraph Analysis"
    assert p.content == "Analysis not available"
    assert p.type == "positive"
    assert p.priority == "medium"


@pytest.mark.parametrize("raw", ["NaN", "Infinity", "-Infinity", "1e999"])
def test_non_finite_scores_are_dropped(raw):
    result = parse_evaluation(json.loads('{"scores": {"grammar": %s, "clarity": 4}, "overallScore": %s}' % (raw, raw)))
    assert result.scores == {"clarity": 4.0}
    assert result.overall is None


def test_non_finite_paragraph_number_defaults_to_first():
    result = parse_evaluation(json.loads('{"paragraphFeedback": [{"paragraphNumber": 1e999, "content": "x"}]}'))
    assert result.paragraph_feedback[0].paragraph_number == 1


def test_camel_case_trait_keys_resolve():
    result = parse_evaluation({"scores": {"ideasContent": 3, "voiceFocus": 4,
                                          "sentenceFluency": 2, "wordChoiceVocabulary": 4}})
    assert result.scores == {"development": 3.0, "clarity": 4.0, "fluency": 2.0, "vocabulary": 4.0}


def test_colliding_score_keys_are_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="evaluation"):
        result = parse_evaluation({"scores": {"grammar": 2, "conventions": 3}})
    assert result.scores == {"grammar": 3.0}
    assert "overrides earlier score" in caplog.text
