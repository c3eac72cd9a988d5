"""
Three-tier classification of a conversation's therapeutic content.

- tier1_premium: structured diary data, schema reflection or self-ratings
  backed by structure. Full analysis, user ratings take precedence.
- tier2_standard: emotionally meaningful conversation. Analysis gated on
  contextual validation.
- tier3_minimal: brief or casual content. Deep analysis is always off so a
  casual remark is never pathologised.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from cbt_insights.core.logging_config import therapeutic_operation
from cbt_insights.therapy.assessments import (
    assess_schema_reflection_depth,
    has_user_quantified_assessments,
    is_brief_request,
)
from cbt_insights.therapy.context_validator import ValidationResult, validate_therapeutic_context
from cbt_insights.therapy.models import (
    AnalysisRecommendation,
    ContentTier,
    ContentTierAnalysis,
    ReflectionDepth,
)
from cbt_insights.therapy.normalizers import user_text
from cbt_insights.therapy.scoring import ScoreRule, fold_rules
from cbt_insights.therapy.signature import CBTMessageSignature, analyze_cbt_message, has_schema_reflection

TIER_NAMES: dict[str, str] = {
    "tier1_premium": "Premium CBT/Schema Analysis",
    "tier2_standard": "Standard Therapeutic Conversation",
    "tier3_minimal": "Brief Supportive Response",
}

STRONG_SIGNATURE = 0.7
SUPPORTED_SIGNATURE = 0.4
PARTIAL_SIGNATURE = 0.3


@dataclass(frozen=True)
class TierSignals:
    signature: CBTMessageSignature
    validation: ValidationResult
    schema_depth: ReflectionDepth
    schema_reflection: bool
    self_assessment: bool
    brief_request: bool

    @property
    def intensity(self) -> int:
        return self.validation.contextual_analysis.emotional_intensity

    @property
    def relevance(self) -> int:
        return self.validation.contextual_analysis.therapeutic_relevance

    @property
    def stress_count(self) -> int:
        return len(self.validation.contextual_analysis.stress_indicators)

    @property
    def valid_context(self) -> bool:
        return self.validation.is_valid_therapeutic_context


def collect_signals(content: str) -> TierSignals:
    return TierSignals(
        signature=analyze_cbt_message(content),
        validation=validate_therapeutic_context(content),
        schema_depth=assess_schema_reflection_depth(content),
        schema_reflection=has_schema_reflection(content),
        self_assessment=has_user_quantified_assessments(content),
        brief_request=is_brief_request(content),
    )


# ----------------------------
# Tier 1
# ----------------------------
def _reflection_labels(s: TierSignals) -> list[str]:
    labels = [f"Schema reflection content ({s.schema_depth} depth)"]
    if s.schema_reflection:
        labels.append("schema reflection")
    return labels


def _has_reflection(s: TierSignals) -> bool:
    return s.schema_depth != "none" or s.schema_reflection


TIER1_RULES: tuple[ScoreRule[TierSignals], ...] = (
    ScoreRule(lambda s: s.signature.has_cbt_header, 5, ("CBT diary header detected",)),
    ScoreRule(lambda s: s.signature.has_emotion_ratings, 8, ("User emotion ratings (quantified self-assessment)",)),
    ScoreRule(lambda s: s.signature.has_automatic_thoughts, 7, ("Automatic thoughts with user credibility ratings",)),
    ScoreRule(lambda s: s.schema_depth == "comprehensive", 10, _reflection_labels),
    ScoreRule(lambda s: _has_reflection(s) and s.schema_depth != "comprehensive", 6, _reflection_labels),
    ScoreRule(lambda s: s.self_assessment, 5, ("User self-assessments and ratings detected",)),
)


# ----------------------------
# Tier 2
# ----------------------------
def _intensity_labels(level: str, with_marker: bool = True):
    def labels(s: TierSignals) -> list[str]:
        out = ["emotional intensity"] if with_marker else []
        out.append(f"{level} emotional intensity ({s.intensity}/10)")
        return out

    return labels


TIER2_RULES: tuple[ScoreRule[TierSignals], ...] = (
    ScoreRule(lambda s: s.valid_context and s.relevance >= 7, 10, ("therapeutic context",)),
    ScoreRule(lambda s: s.valid_context and 5 <= s.relevance < 7, 7, ("therapeutic context",)),
    ScoreRule(lambda s: s.valid_context and s.relevance < 5, 4, ("therapeutic context",)),
    ScoreRule(lambda s: s.intensity >= 6, 8, _intensity_labels("High")),
    ScoreRule(lambda s: 4 <= s.intensity < 6, 4, _intensity_labels("Moderate")),
    ScoreRule(lambda s: 2 <= s.intensity < 4, 2, _intensity_labels("Low-moderate", with_marker=False)),
    ScoreRule(lambda s: s.relevance >= 7, 6, ("High therapeutic relevance detected",)),
    ScoreRule(lambda s: s.stress_count >= 2, 5, ("Multiple emotional distress indicators",)),
    ScoreRule(
        lambda s: PARTIAL_SIGNATURE < s.signature.confidence < STRONG_SIGNATURE,
        3,
        ("Partial CBT-style content detected",),
    ),
    ScoreRule(lambda s: s.self_assessment, 8, ("User self-assessments and ratings detected",)),
)


def _tier2_bounds(score: int, s: TierSignals) -> int:
    # keeps one strong sub-signal from carrying borderline content
    if s.intensity <= 3:
        score = min(72, score)
    elif s.intensity >= 8 or s.stress_count >= 4:
        score = max(81, score)
    elif s.intensity >= 6:
        score = min(82, score)
    else:
        score = min(78, score)
    return min(95, score)


# ----------------------------
# Tier 3
# ----------------------------
def _context_flag_labels(s: TierSignals) -> list[str]:
    flags = s.validation.contextual_analysis.neutral_context_flags
    return ["Neutral/organizational context flags"] + [f"Context: {flag}" for flag in flags]


TIER3_RULES: tuple[ScoreRule[TierSignals], ...] = (
    ScoreRule(lambda s: s.brief_request, 15, ("Brief request or casual interaction",)),
    ScoreRule(lambda s: bool(s.validation.contextual_analysis.neutral_context_flags), 10, _context_flag_labels),
    ScoreRule(
        lambda s: s.intensity < 4,
        8,
        lambda s: ["Low emotional intensity", f"Low emotional intensity ({s.intensity}/10)"],
    ),
    ScoreRule(
        lambda s: s.validation.exclusion_reason is not None,
        12,
        lambda s: [f"Excluded from analysis: {s.validation.exclusion_reason}"],
    ),
)


# ----------------------------
# Recommendations
# ----------------------------
def _tier1_recommendation(_s: TierSignals) -> AnalysisRecommendation:
    return AnalysisRecommendation(
        should_analyze_cognitive_distortions=True,
        should_analyze_schemas=True,
        should_generate_action_items=True,
        should_provide_therapeutic_insights=True,
        analysis_depth="comprehensive",
        prioritize_user_assessments=True,
    )


def _tier2_recommendation(s: TierSignals) -> AnalysisRecommendation:
    return AnalysisRecommendation(
        should_analyze_cognitive_distortions=s.valid_context,
        should_analyze_schemas=s.intensity >= 6 or s.schema_depth != "none",
        should_generate_action_items=s.intensity >= 5,
        should_provide_therapeutic_insights=True,
        analysis_depth="moderate",
        prioritize_user_assessments=s.self_assessment,
    )


def _minimal_recommendation() -> AnalysisRecommendation:
    return AnalysisRecommendation(
        should_analyze_cognitive_distortions=False,
        should_analyze_schemas=False,
        should_generate_action_items=False,
        should_provide_therapeutic_insights=False,
        analysis_depth="surface",
        prioritize_user_assessments=False,
    )


# ----------------------------
# Decision
# ----------------------------
def is_premium(s: TierSignals) -> bool:
    confidence = s.signature.confidence
    return (
        confidence >= STRONG_SIGNATURE
        or s.schema_reflection
        or (s.self_assessment and s.schema_depth != "none")
        or (confidence >= SUPPORTED_SIGNATURE and s.self_assessment)
    )


def is_minimal(s: TierSignals) -> bool:
    # a user who rates themselves is never dropped to minimal
    if s.valid_context or s.self_assessment:
        return False
    low_signal = s.intensity < 3 and s.relevance < 3
    brief = s.brief_request and s.intensity < 2
    return low_signal or brief


def _analysis(tier: ContentTier, confidence: int, triggers: list[str], recommendation, s: TierSignals):
    return ContentTierAnalysis(
        tier=tier,
        confidence=confidence,
        triggers=triggers,
        analysis_recommendation=recommendation,
        report_type="client_friendly",
        user_self_assessment_present=s.self_assessment,
        schema_reflection_depth=s.schema_depth,
    )


def classify_text(content: str) -> ContentTierAnalysis:
    """Classify already-joined user text."""
    if not content.strip():
        return ContentTierAnalysis(
            tier="tier3_minimal",
            confidence=100,
            triggers=[],
            analysis_recommendation=_minimal_recommendation(),
        )

    s = collect_signals(content)

    if is_premium(s):
        score, triggers = fold_rules(TIER1_RULES, s, base=85)
        return _analysis("tier1_premium", min(100, score), triggers, _tier1_recommendation(s), s)

    if is_minimal(s):
        score, triggers = fold_rules(TIER3_RULES, s, base=60)
        return _analysis("tier3_minimal", min(90, score), triggers, _minimal_recommendation(), s)

    score, triggers = fold_rules(TIER2_RULES, s, base=65)
    return _analysis("tier2_standard", _tier2_bounds(score, s), triggers, _tier2_recommendation(s), s)


def analyze_content_tier(messages: Any) -> ContentTierAnalysis:
    """Classify the user side of a transcript; assistant turns are ignored."""
    analysis = classify_text(user_text(messages))
    therapeutic_operation(
        "content_tier_classified",
        tier=analysis.tier,
        confidence=analysis.confidence,
        triggers=len(analysis.triggers),
    )
    return analysis


def get_content_tier_explanation(analysis: ContentTierAnalysis) -> str:
    parts = [
        f"Content classified as: {TIER_NAMES[analysis.tier]}",
        f"Confidence: {analysis.confidence}%",
    ]
    if analysis.triggers:
        parts.append(f"Triggers: {', '.join(analysis.triggers)}")
    if analysis.user_self_assessment_present:
        parts.append("User self-assessments detected - will prioritize over AI inference")
    if analysis.schema_reflection_depth != "none":
        parts.append(f"Schema reflection depth: {analysis.schema_reflection_depth}")
    return "; ".join(parts)


def meets_analysis_threshold(analysis: ContentTierAnalysis) -> bool:
    return (
        analysis.tier != "tier3_minimal"
        or analysis.analysis_recommendation.should_provide_therapeutic_insights
    )
