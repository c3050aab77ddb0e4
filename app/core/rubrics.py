from typing import Dict, List
from app.models.rubric import Category, CategoryMetadata, Rubric, ScoringScale

ESSAY_TUTOR = Rubric(
    id="essay-tutor",
    name="Essay Tutor",
    description="General essay evaluation across five weighted writing traits",
    scale=ScoringScale(min=1, max=5, labels={
        1: "Needs Improvement",
        2: "Developing",
        3: "Proficient",
        4: "Advanced",
        5: "Exceptional",
    }),
    categories=[
        CategoryMetadata(category=Category.GRAMMAR, name="Grammar & Mechanics",
                         description="Grammar, punctuation, spelling, mechanics",
                         color="#ef4444", weight=1.0, priority="high"),
        CategoryMetadata(category=Category.VOCABULARY, name="Word Choice & Vocabulary",
                         description="Advanced vocabulary and word choice",
                         color="#3b82f6", weight=1.0),
        CategoryMetadata(category=Category.STRUCTURE, name="Structure & Organization",
                         description="Organization, transitions, essay structure",
                         color="#22c55e", weight=1.0, priority="high"),
        CategoryMetadata(category=Category.DEVELOPMENT, name="Development & Support",
                         description="Ideas development, examples, evidence",
                         color="#9333ea", weight=1.0, priority="high"),
        CategoryMetadata(category=Category.CLARITY, name="Clarity & Focus",
                         description="Clear communication and focus",
                         color="#f97316", weight=1.0),
        # legend and feedback only, never scored
        CategoryMetadata(category=Category.STRENGTHS, name="Strengths & Excellence",
                         description="Exceptional techniques and qualities",
                         color="#10b981", weight=0, priority="low"),
    ],
)

ISEE_UPPER = Rubric(
    id="isee-upper",
    name="ISEE Upper Level",
    description="Independent School Entrance Examination Upper Level essay evaluation",
    scale=ScoringScale(min=1, max=4, labels={
        1: "Beginning",
        2: "Developing",
        3: "Proficient",
        4: "Advanced",
    }),
    categories=[
        CategoryMetadata(category=Category.DEVELOPMENT, name="Ideas & Content",
                         description="Topic development, supporting details, depth of analysis, creativity",
                         color="#9333ea", weight=0.2, priority="high"),
        CategoryMetadata(category=Category.STRUCTURE, name="Organization",
                         description="Structure, logical sequence, transitions, introduction and conclusion",
                         color="#22c55e", weight=0.2, priority="high"),
        CategoryMetadata(category=Category.CLARITY, name="Voice & Focus",
                         description="Writer's personality, tone, clarity of message, audience awareness",
                         color="#f97316", weight=0.15),
        CategoryMetadata(category=Category.VOCABULARY, name="Word Choice",
                         description="Vocabulary precision, variety, grade-appropriate language, impact",
                         color="#3b82f6", weight=0.15),
        CategoryMetadata(category=Category.FLUENCY, name="Sentence Fluency",
                         description="Sentence variety, rhythm, flow, readability when read aloud",
                         color="#10b981", weight=0.15),
        CategoryMetadata(category=Category.GRAMMAR, name="Conventions",
                         description="Grammar, spelling, punctuation, capitalization, mechanics",
                         color="#ef4444", weight=0.15),
        CategoryMetadata(category=Category.STRENGTHS, name="Exceptional Techniques",
                         description="Exceptional techniques and qualities",
                         color="#0d9488", weight=0, priority="low"),
    ],
)

RUBRICS: Dict[str, Rubric] = {r.id: r for r in (ESSAY_TUTOR, ISEE_UPPER)}


def get_rubric(rubric_id: str) -> Rubric:
    """Raises KeyError for unknown ids."""
    try:
        return RUBRICS[rubric_id]
    except KeyError:
        raise KeyError(f"Unknown rubric: {rubric_id}") from None


def list_rubrics() -> List[Dict]:
    return [
        {"id": r.id, "name": r.name, "description": r.description,
         "scale": {"min": r.scale.min, "max": r.scale.max}}
        for r in RUBRICS.values()
    ]
