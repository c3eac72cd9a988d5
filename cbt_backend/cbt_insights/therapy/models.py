from __future__ import annotations

from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


CORE_EMOTIONS: tuple[str, ...] = ("fear", "anger", "sadness", "joy", "anxiety", "shame", "guilt")

RATING_MIN = 0
RATING_MAX = 10

Rating = Annotated[int, Field(ge=RATING_MIN, le=RATING_MAX)]

ContentTier = Literal["tier1_premium", "tier2_standard", "tier3_minimal"]
ReportType = Literal["client_friendly", "clinical_notes"]
ReflectionDepth = Literal["none", "minimal", "moderate", "comprehensive"]
AnalysisDepth = Literal["surface", "moderate", "comprehensive"]
ReflectionCategory = Literal["childhood", "schemas", "coping", "modes", "custom"]


class Record(BaseModel):
    """Immutable value record serialised with the camelCase wire names."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


# ----------------------------
# Leaf records
# ----------------------------
class EmotionSet(Record):
    fear: Rating = 0
    anger: Rating = 0
    sadness: Rating = 0
    joy: Rating = 0
    anxiety: Rating = 0
    shame: Rating = 0
    guilt: Rating = 0
    other: str = ""
    other_intensity: Rating = 0

    def core_values(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in CORE_EMOTIONS}

    def has_any_rating(self) -> bool:
        return any(v > 0 for v in self.core_values().values()) or self.other_intensity > 0


class SituationRecord(Record):
    date: str
    description: str


class ThoughtRecord(Record):
    thought: str
    credibility: Rating = 0


class RationalThoughtRecord(Record):
    thought: str
    confidence: Rating = 0


class CoreBeliefRecord(Record):
    belief: str
    credibility: Rating = 0


class ChallengeQuestionRecord(Record):
    question: str = ""
    answer: str = ""


class SchemaModeRecord(Record):
    name: str
    intensity: Rating = 0
    description: str = ""


class SchemaModeOption(Record):
    """Checklist entry of the diary form."""

    id: str
    name: str
    description: str = ""
    selected: bool = False
    intensity: Rating = 0


class ActionPlanRecord(Record):
    new_behaviors: list[str] = Field(default_factory=list)
    alternative_responses: Optional[list[str]] = None


class EmotionChange(Record):
    emotion: str
    initial: Rating
    final: Rating
    direction: Literal["increased", "decreased"]
    change: Rating

    @model_validator(mode="after")
    def _check_direction(self) -> "EmotionChange":
        expected = "increased" if self.final > self.initial else "decreased"
        if self.direction != expected or self.change != abs(self.final - self.initial):
            raise ValueError(
                f"inconsistent change for {self.emotion}: {self.initial} -> {self.final} "
                f"({self.direction} by {self.change})"
            )
        return self


class EmotionComparisonRecord(Record):
    changes: list[EmotionChange] = Field(default_factory=list)


class EmotionsRecord(Record):
    initial: dict[str, Rating] = Field(default_factory=dict)
    final: Optional[dict[str, Rating]] = None
    custom_emotion: Optional[str] = None


class ThoughtsRecord(Record):
    automatic_thoughts: list[str] = Field(default_factory=list)


class RationalThoughtsRecord(Record):
    thoughts: list[str] = Field(default_factory=list)


# ----------------------------
# Partial assessment (card / legacy markdown path)
# ----------------------------
class CBTStructuredAssessment(Record):
    """
    Partial record assembled from a chat transcript.
    A field left as None was not found in the transcript.
    """

    kind: Literal["assessment"] = "assessment"
    situation: Optional[SituationRecord] = None
    emotions: Optional[EmotionsRecord] = None
    thoughts: Optional[ThoughtsRecord] = None
    core_beliefs: Optional[CoreBeliefRecord] = None
    challenge_questions: Optional[list[ChallengeQuestionRecord]] = None
    rational_thoughts: Optional[RationalThoughtsRecord] = None
    schema_modes: Optional[list[SchemaModeRecord]] = None
    action_plan: Optional[ActionPlanRecord] = None
    emotion_comparison: Optional[EmotionComparisonRecord] = None

    def sections_present(self) -> list[str]:
        return [name for name in ASSESSMENT_SECTIONS if getattr(self, name) is not None]

    def is_empty(self) -> bool:
        return not self.sections_present()


ASSESSMENT_SECTIONS: tuple[str, ...] = (
    "situation",
    "emotions",
    "thoughts",
    "core_beliefs",
    "challenge_questions",
    "rational_thoughts",
    "schema_modes",
    "action_plan",
    "emotion_comparison",
)


# ----------------------------
# Diary form (single-document markdown path)
# ----------------------------
class SchemaReflectionQuestion(Record):
    question: str
    answer: str
    category: ReflectionCategory = "custom"
    is_required: bool = False


class SchemaReflection(Record):
    enabled: bool = False
    questions: list[SchemaReflectionQuestion] = Field(default_factory=list)
    self_assessment: str = ""


def _blank_challenges() -> list[ChallengeQuestionRecord]:
    return [ChallengeQuestionRecord() for _ in range(3)]


class CBTFormData(Record):
    date: str
    situation: str = ""
    initial_emotions: EmotionSet = Field(default_factory=EmotionSet)
    final_emotions: EmotionSet = Field(default_factory=EmotionSet)
    automatic_thoughts: list[ThoughtRecord] = Field(default_factory=list)
    rational_thoughts: list[RationalThoughtRecord] = Field(default_factory=list)
    core_belief_text: str = ""
    core_belief_credibility: Rating = 0
    confirming_behaviors: str = ""
    avoidant_behaviors: str = ""
    overriding_behaviors: str = ""
    schema_modes: list[SchemaModeOption] = Field(default_factory=list)
    schema_reflection: SchemaReflection = Field(default_factory=SchemaReflection)
    challenge_questions: list[ChallengeQuestionRecord] = Field(default_factory=_blank_challenges)
    additional_questions: list[ChallengeQuestionRecord] = Field(default_factory=list)
    original_thought_credibility: Rating = 0
    new_behaviors: str = ""


class ParsedCBTData(Record):
    kind: Literal["diary"] = "diary"
    form_data: CBTFormData
    is_complete: bool = False
    missing_fields: list[str] = Field(default_factory=list)
    parsing_errors: list[str] = Field(default_factory=list)


# ----------------------------
# Content tier
# ----------------------------
class AnalysisRecommendation(Record):
    should_analyze_cognitive_distortions: bool
    should_analyze_schemas: bool
    should_generate_action_items: bool
    should_provide_therapeutic_insights: bool
    analysis_depth: AnalysisDepth
    prioritize_user_assessments: bool

    @model_validator(mode="after")
    def _surface_stays_shallow(self) -> "AnalysisRecommendation":
        if self.analysis_depth == "surface" and (
            self.should_analyze_cognitive_distortions or self.should_analyze_schemas
        ):
            raise ValueError("surface-depth recommendations cannot enable distortion or schema analysis")
        return self


class ContentTierAnalysis(Record):
    tier: ContentTier
    confidence: int = Field(ge=0, le=100)
    triggers: list[str] = Field(default_factory=list)
    analysis_recommendation: AnalysisRecommendation
    report_type: ReportType = "client_friendly"
    user_self_assessment_present: bool = False
    schema_reflection_depth: ReflectionDepth = "none"


class ChatMessage(Record):
    content: str = ""
    role: str = ""
