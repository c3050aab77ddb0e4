from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional

from app.models.rubric import Category, Priority

Severity = Literal["minor", "moderate", "major", "positive"]
FeedbackType = Literal["strength", "improvement", "suggestion"]
ParagraphFeedbackType = Literal["excellent", "positive", "needs-improvement"]


class EssayStatistics(BaseModel):
    words: int = 0
    sentences: int = 0
    paragraphs: int = 0
    characters: int = 0
    characters_no_spaces: int = 0
    average_words_per_sentence: float = 0.0
    average_sentences_per_paragraph: float = 0.0
    average_characters_per_word: float = 0.0
    long_sentences: int = 0
    short_sentences: int = 0
    complex_words: int = 0
    complexity_score: float = 0.0
    flesch_reading_ease: Optional[float] = None


class EssayStructure(BaseModel):
    has_introduction: bool = False
    has_body_paragraphs: bool = False
    has_conclusion: bool = False
    paragraph_count: int = 0
    word_count: int = 0


class EssayDocument(BaseModel):
    model_config = {"frozen": True}

    text: str = ""
    prompt: Optional[str] = None

    def statistics(self) -> EssayStatistics:
        from app.services.normalize import text_statistics
        return text_statistics(self.text)

    def structure(self) -> EssayStructure:
        from app.services.normalize import analyze_structure
        return analyze_structure(self.text)


# ---- evaluator output ----

class AnnotationRecord(BaseModel):
    category: str = ""
    original_excerpt: str = ""
    explanation: str = ""
    suggested_replacement: Optional[str] = None
    severity: Severity = "moderate"


class FeedbackItem(BaseModel):
    category: str = "overall"
    type: FeedbackType = "improvement"
    title: Optional[str] = None
    content: str = ""
    priority: Optional[Priority] = None


class ParagraphFeedback(BaseModel):
    paragraph_number: int = 1
    title: str = "Paragraph Analysis"
    content: str = ""
    type: ParagraphFeedbackType = "positive"
    priority: Priority = "medium"


class EvaluationResult(BaseModel):
    scores: Dict[str, float] = Field(default_factory=dict)
    overall: Optional[float] = None
    annotations: List[AnnotationRecord] = Field(default_factory=list)
    feedback: List[FeedbackItem] = Field(default_factory=list)
    paragraph_feedback: List[ParagraphFeedback] = Field(default_factory=list)


# ---- derived ----

class ResolvedAnnotation(BaseModel):
    model_config = {"frozen": True}

    id: str
    category: Optional[Category] = None
    category_label: str = ""
    marker: str = ""
    start_index: int
    end_index: int
    original_excerpt: str
    explanation: str = ""
    suggested_replacement: Optional[str] = None
    severity: Severity = "moderate"
    color: str = "#6b7280"


class DroppedAnnotation(BaseModel):
    index: int
    category: str
    original_excerpt: str
    reason: Literal["empty_excerpt", "not_found"]


class Placement(BaseModel):
    annotations: List[ResolvedAnnotation] = Field(default_factory=list)
    dropped: List[DroppedAnnotation] = Field(default_factory=list)

    @property
    def dropped_count(self) -> int:
        return len(self.dropped)

    @property
    def total_count(self) -> int:
        return len(self.annotations) + len(self.dropped)


class TextSegment(BaseModel):
    text: str
    start_index: int
    end_index: int
    annotation_ids: List[str] = Field(default_factory=list)

    @property
    def is_annotated(self) -> bool:
        return bool(self.annotation_ids)


class FeedbackBlock(BaseModel):
    id: str
    category: str
    category_name: str
    type: FeedbackType
    title: str
    content: str
    items: List[str] = Field(default_factory=list)
    priority: Priority = "medium"
    color: str = "#6b7280"
    legend_id: Optional[str] = None
    related_markers: List[str] = Field(default_factory=list)


class LegendEntry(BaseModel):
    id: str
    name: str
    color: str
    description: str = ""
    marker_prefix: str


class CategoryScore(BaseModel):
    category: str
    name: str
    score: float
    max_score: int
    weight: float
    label: Optional[str] = None


class ScoreSummary(BaseModel):
    categories: List[CategoryScore] = Field(default_factory=list)
    overall: Optional[float] = None
    overall_label: Optional[str] = None
    reported_overall: Optional[float] = None
    min_score: int = 1
    max_score: int = 5


class ReportMetadata(BaseModel):
    rubric_id: str
    rubric_name: str
    prompt: Optional[str] = None
    total_annotations: int = 0
    placed_annotations: int = 0
    dropped_annotations: int = 0
    dropped_excerpts: List[str] = Field(default_factory=list)
    unrecognized_categories: List[str] = Field(default_factory=list)
    generated_at: Optional[str] = None


class AnnotatedReport(BaseModel):
    text: str
    statistics: EssayStatistics
    structure: EssayStructure
    segments: List[TextSegment]
    annotations: List[ResolvedAnnotation]
    feedback_blocks: List[FeedbackBlock]
    paragraph_feedback: List[ParagraphFeedback]
    legend: List[LegendEntry]
    scores: ScoreSummary
    metadata: ReportMetadata
