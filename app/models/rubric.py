from __future__ import annotations
from enum import Enum
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field

Priority = Literal["high", "medium", "low"]


class Category(str, Enum):
    GRAMMAR = "grammar"
    VOCABULARY = "vocabulary"
    STRUCTURE = "structure"
    DEVELOPMENT = "development"
    CLARITY = "clarity"
    FLUENCY = "fluency"
    STRENGTHS = "strengths"


MARKER_PREFIXES = {
    Category.GRAMMAR: "G",
    Category.VOCABULARY: "W",
    Category.STRUCTURE: "S",
    Category.DEVELOPMENT: "D",
    Category.CLARITY: "C",
    Category.FLUENCY: "F",
    Category.STRENGTHS: "✓",
}
UNKNOWN_MARKER_PREFIX = "A"

# Evaluator labels seen in practice -> closed category
_ALIASES = {
    "grammar": Category.GRAMMAR,
    "mechanics": Category.GRAMMAR,
    "conventions": Category.GRAMMAR,
    "spelling": Category.GRAMMAR,
    "punctuation": Category.GRAMMAR,
    "capitalization": Category.GRAMMAR,
    "sentence-structure": Category.GRAMMAR,
    "sentence-boundary": Category.GRAMMAR,
    "vocabulary": Category.VOCABULARY,
    "word choice": Category.VOCABULARY,
    "wordchoice": Category.VOCABULARY,
    "wordchoicevocabulary": Category.VOCABULARY,
    "precise-word": Category.VOCABULARY,
    "formal-tone": Category.VOCABULARY,
    "structure": Category.STRUCTURE,
    "organization": Category.STRUCTURE,
    "add-transition": Category.STRUCTURE,
    "strengthen-topic-sentence": Category.STRUCTURE,
    "improve-flow": Category.STRUCTURE,
    "clarify-thesis": Category.STRUCTURE,
    "strengthen-conclusion": Category.STRUCTURE,
    "development": Category.DEVELOPMENT,
    "support": Category.DEVELOPMENT,
    "ideas": Category.DEVELOPMENT,
    "ideas & content": Category.DEVELOPMENT,
    "ideascontent": Category.DEVELOPMENT,
    "add-support": Category.DEVELOPMENT,
    "strengthen-example": Category.DEVELOPMENT,
    "expand-idea": Category.DEVELOPMENT,
    "clarity": Category.CLARITY,
    "focus": Category.CLARITY,
    "voice": Category.CLARITY,
    "voicefocus": Category.CLARITY,
    "clarify-idea": Category.CLARITY,
    "stay-focused": Category.CLARITY,
    "smooth-phrasing": Category.CLARITY,
    "concise-expression": Category.CLARITY,
    "enhance-clarity": Category.CLARITY,
    "fluency": Category.FLUENCY,
    "sentence fluency": Category.FLUENCY,
    "sentencefluency": Category.FLUENCY,
    "vary-sentences": Category.FLUENCY,
    "combine-sentences": Category.FLUENCY,
    "simplify-structure": Category.FLUENCY,
    "strengths": Category.STRENGTHS,
    "strength": Category.STRENGTHS,
    "positive": Category.STRENGTHS,
}


def resolve_category(label: Optional[str]) -> Optional[Category]:
    """Map an evaluator label onto the closed category set; None if unrecognized."""
    if not label:
        return None
    key = label.strip().lower().replace("_", "-")
    if key in _ALIASES:
        return _ALIASES[key]
    return _ALIASES.get(key.replace("-", " "))


class ScoringScale(BaseModel):
    min: int = 1
    max: int = 5
    labels: Dict[int, str] = Field(default_factory=dict)

    def label_for(self, score: Optional[float]) -> Optional[str]:
        if score is None or not self.labels:
            return None
        nearest = int(min(max(score, self.min), self.max) + 0.5)
        return self.labels.get(nearest)


class CategoryMetadata(BaseModel):
    category: Optional[Category] = None  # None only for the unrecognized fallback
    name: str
    description: str = ""
    color: str = "#6b7280"
    weight: float = Field(default=1.0, ge=0)
    priority: Priority = "medium"


class Rubric(BaseModel):
    id: str
    name: str
    description: str = ""
    scale: ScoringScale = Field(default_factory=ScoringScale)
    categories: List[CategoryMetadata]

    def meta_for(self, category: Optional[Category]) -> CategoryMetadata:
        return category_metadata(category, self.categories)


DEFAULT_CATEGORY_META = {
    Category.GRAMMAR: CategoryMetadata(
        category=Category.GRAMMAR, name="Grammar & Mechanics",
        description="Grammar, punctuation, spelling, mechanics", color="#ef4444"),
    Category.VOCABULARY: CategoryMetadata(
        category=Category.VOCABULARY, name="Word Choice & Vocabulary",
        description="Advanced vocabulary and word choice", color="#3b82f6"),
    Category.STRUCTURE: CategoryMetadata(
        category=Category.STRUCTURE, name="Structure & Organization",
        description="Organization, transitions, essay structure", color="#22c55e"),
    Category.DEVELOPMENT: CategoryMetadata(
        category=Category.DEVELOPMENT, name="Development & Support",
        description="Ideas development, examples, evidence", color="#9333ea"),
    Category.CLARITY: CategoryMetadata(
        category=Category.CLARITY, name="Clarity & Focus",
        description="Clear communication and focus", color="#f97316"),
    Category.FLUENCY: CategoryMetadata(
        category=Category.FLUENCY, name="Sentence Fluency",
        description="Sentence variety, rhythm and flow", color="#0ea5e9"),
    Category.STRENGTHS: CategoryMetadata(
        category=Category.STRENGTHS, name="Strengths & Excellence",
        description="Exceptional techniques and qualities", color="#10b981", weight=0),
}

FALLBACK_NAME = "General Feedback"
FALLBACK_COLOR = "#6b7280"


def category_metadata(category: Optional[Category], meta: List[CategoryMetadata]) -> CategoryMetadata:
    """Total lookup: rubric entry, then built-in default, then the neutral fallback."""
    if category is None:
        # unrecognized evaluator category
        return CategoryMetadata(
            name=FALLBACK_NAME, color=FALLBACK_COLOR,
            weight=0, priority="low",
        )
    for m in meta:
        if m.category is category:
            return m
    return DEFAULT_CATEGORY_META[category]


def marker_prefix(category: Optional[Category]) -> str:
    if category is None:
        return UNKNOWN_MARKER_PREFIX
    return MARKER_PREFIXES[category]
