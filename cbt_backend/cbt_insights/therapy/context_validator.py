"""
Contextual validation of free text before any distortion or schema analysis.

Distress language raises emotional intensity and therapeutic relevance by a
fixed weight per pattern family; routine and organisational phrasing pulls
them back down. The result decides whether the text is a valid therapeutic
context at all.
"""
from __future__ import annotations

import re
from typing import Literal, Optional

from pydantic import Field

from cbt_insights.therapy.models import Record
from cbt_insights.therapy.patterns import cue

ContextType = Literal["therapeutic", "neutral", "organizational", "ambiguous"]


def _compile(*patterns: str) -> tuple[re.Pattern, ...]:
    return tuple(cue(p) for p in patterns)


HIGH_STRENGTH_DISTRESS_PATTERNS = _compile(
    r"I feel (extremely|incredibly|overwhelmingly|completely|totally|absolutely)\s?"
    r"(scared|terrified|anxious|worried|depressed|sad|hopeless|worthless|ashamed|guilty|devastated|heartbroken)",
    r"I'm (terrified|petrified|panicking)",
    r"(I'm such a|I feel like such a)\s?(failure|idiot|loser|disappointment|burden|mess|fraud)",
    r"(complete|total|absolute|utter)\s?(failure|disaster|mess|loser)",
    r"(everything (is|feels)|my life is|I'm completely|this is) (falling apart|ruined|hopeless|pointless|a disaster|over)",
    r"(everything.*worthless|everything.*garbage|everything.*terrible)",
    r"(I'm terrified|I'm petrified|I panic)\s?(that|about|of|everyone)",
    r"(everyone (thinks|knows|sees)|I'm sure (they|people))\s?.*(I'm (bad|wrong|stupid|incompetent|worthless|a failure))",
    r"(I feel like|I can't shake the feeling)\s?(everything|everyone|nothing|nobody).*(falling apart|against me|hopeless|ruined)",
)

MEDIUM_STRENGTH_DISTRESS_PATTERNS = _compile(
    r"I feel (so|really)?\s?(scared|terrified|anxious|worried|depressed|sad|hopeless|worthless|ashamed|guilty|angry|furious)",
    r"I'm (so|really|completely|totally)\s?(worried|scared|anxious|sad|depressed|angry|frustrated|overwhelmed)",
    r"(I'm afraid|I'm worried|I'm scared)\s?(that|about|of)",
    r"(I always|I never)\s.*(mess up|fail|screw up|ruin|disappoint|hurt)",
    r"(I'm worried|I'm scared|I feel like)\s.*(I always|I never|everyone|everything)",
    r"(I'm|I've been) (really )?struggling with",
    r"(I'm|I've been) dealing with.*(anxiety|depression|stress|worry)",
    r"(everyone will see|everyone will think|everyone will know)\s.*(how|that I'm|I'm)\s.*"
    r"(incompetent|stupid|worthless|a failure|bad|inadequate)",
    r"(I'll never find|nobody will ever|no one will ever)\s.*(love|care|understand|accept)",
)

LOW_STRENGTH_DISTRESS_PATTERNS = _compile(
    r"spiraling into",
    r"(feeling|I feel) (really |so |quite )?overwhelmed",
    r"(losing|I've lost) sleep (over|because)",
    r"(affecting|impacting) my (focus|concentration|ability)",
    r"(trapped|stuck) in.*(thoughts|feelings)",
    r"can't find a way out",
    r"(had|having) (some |a bit of |a lot of )?stress",
    r"wondering if I handled.*correctly",
    r"meeting didn't go.*planned",
    r"(wondering|questioning) (if|whether) I",
    r"(doubting|questioning) myself",
    r"(starting to worry|I'm worried|I worry)\s?(that|about)",
)

EMOTIONAL_AMPLIFIERS = _compile(
    r"I'm (panicking|devastated|heartbroken|crushed|shattered|breaking down)",
    r"(I can't (cope|handle|take)|this is (killing|destroying) me)",
    r"(I feel like I'm (drowning|suffocating|falling apart|losing it))",
    r"(my heart is|I'm so (hurt|broken|lost|confused|overwhelmed))",
)

NEUTRAL_CONTEXT_PATTERNS = _compile(
    r"I (always|usually|typically|generally|normally|regularly)\s?"
    r"(take|go|do|work|eat|sleep|wake up|leave|arrive)\s?(the|to|at|for)",
    r"(everyone at the|all the people|everybody in the)\s?(meeting|conference|event|party|class|office)",
    r"(this|that|it)\s?(never|always|usually)\s?(works|functions|operates|runs|performs)",
    r"(everyone|we should|they never)\s?(follow|use|implement|apply|consider|review|analyze|evaluate)",
    r"(daily routine|everyone knows)",
    r"(it's my|that's my)\s?(routine|habit|way|approach)",
)

EXCLUSION_PATTERNS = _compile(
    r"(organize|coordinate|plan|handle|manage)\s.*(everything|all)\s.*(for|at)\s.*"
    r"(project|meeting|presentation|deadline|work|office|team)",
    r"(party|event|wedding|celebration|conference|gathering|birthday)\s.*"
    r"(organize|coordinate|plan|handle|manage)\s.*(everything|all|details)",
    r"(organize|organizing|plan|planning|coordinate|coordinating)\s.*(everything|all)\s.*(for|at)\s.*"
    r"(party|event|wedding|celebration|gathering)",
    r"(commute|schedule|routine|habit|daily|weekly|monthly)\s.*(always|never|usually)",
    r"(we should|let's|I'll|I need to)\s?(implement|use|follow)\s.*(system|process|procedure|method|approach|technique)",
    r"(family|social|birthday|graduation)\s.*(party|event|gathering|celebration)\s.*(organize|plan|coordinate|handle)",
    r"(we should|let's|I'll|I need to)\s?(coordinate|organize|make sure|ensure)\s.*(all|everything)\s.*"
    r"(details|project|team|requirements)",
    r"(need to|have to|should)\s?(organize|coordinate|plan)\s.*(everything|all)\s.*(for|at)\s.*(tonight|event|party)",
)

# (patterns, points added to intensity and relevance per matching pattern)
DISTRESS_FAMILIES: tuple[tuple[tuple[re.Pattern, ...], int], ...] = (
    (HIGH_STRENGTH_DISTRESS_PATTERNS, 3),
    (MEDIUM_STRENGTH_DISTRESS_PATTERNS, 2),
    (LOW_STRENGTH_DISTRESS_PATTERNS, 1),
)
AMPLIFIER_POINTS = 3
EXCLUSION_PENALTY = 3
INDICATOR_CHARS = 50
SCORE_MAX = 10

ORGANIZATIONAL_EXCLUSION = "Content appears in organizational/planning context without emotional distress"
ROUTINE_EXCLUSION = "Content appears to be routine/factual description without therapeutic relevance"
LOW_SIGNAL_EXCLUSION = "Insufficient emotional intensity or therapeutic relevance for analysis"


class ContextualAnalysis(Record):
    emotional_intensity: int = Field(default=0, ge=0, le=SCORE_MAX)
    therapeutic_relevance: int = Field(default=0, ge=0, le=SCORE_MAX)
    neutral_context_flags: list[str] = Field(default_factory=list)
    stress_indicators: list[str] = Field(default_factory=list)
    context_type: ContextType = "neutral"
    confidence: int = Field(default=100, ge=0, le=100)


class ValidationResult(Record):
    is_valid_therapeutic_context: bool
    contextual_analysis: ContextualAnalysis
    confidence_adjustment: float = 1.0
    exclusion_reason: Optional[str] = None


def _context_type(intensity: int, relevance: int, distress: int, neutral: int, organizational: int) -> ContextType:
    # strong emotional signal wins even inside a planning conversation
    if intensity >= 5 and relevance >= 4 and distress > 0:
        return "therapeutic"
    if organizational > 0 and distress > 0:
        return "ambiguous"
    if intensity >= 3 and distress > 0 and organizational == 0:
        return "therapeutic"
    if organizational > 0 and intensity == 0 and distress == 0:
        return "organizational"
    if neutral > 0 and intensity < 2 and distress == 0:
        return "neutral"
    return "ambiguous"


def analyze_therapeutic_context(content: str) -> ContextualAnalysis:
    intensity = 0
    relevance = 0
    flags: list[str] = []
    indicators: list[str] = []

    distress = 0
    for patterns, points in DISTRESS_FAMILIES:
        for pattern in patterns:
            m = pattern.search(content)
            if m:
                distress += 1
                intensity += points
                relevance += points
                indicators.append(m.group(0)[:INDICATOR_CHARS])

    for pattern in EMOTIONAL_AMPLIFIERS:
        m = pattern.search(content)
        if m:
            intensity += AMPLIFIER_POINTS
            relevance += AMPLIFIER_POINTS
            indicators.append(m.group(0)[:INDICATOR_CHARS])

    neutral = 0
    for pattern in NEUTRAL_CONTEXT_PATTERNS:
        if pattern.search(content):
            neutral += 1
            flags.append("routine_factual")
            intensity = max(0, intensity - 1)

    organizational = 0
    for pattern in EXCLUSION_PATTERNS:
        if pattern.search(content):
            organizational += 1
            flags.append("organizational")
            intensity = max(0, intensity - EXCLUSION_PENALTY)
            relevance = max(0, relevance - EXCLUSION_PENALTY)

    intensity = min(SCORE_MAX, intensity)
    relevance = min(SCORE_MAX, relevance)

    confidence = 50
    if distress >= 2:
        confidence += 25
    if neutral >= 2:
        confidence += 20
    if flags and distress == 0:
        confidence += 25

    return ContextualAnalysis(
        emotional_intensity=intensity,
        therapeutic_relevance=relevance,
        neutral_context_flags=list(dict.fromkeys(flags)),
        stress_indicators=list(dict.fromkeys(indicators)),
        context_type=_context_type(intensity, relevance, distress, neutral, organizational),
        confidence=min(100, confidence),
    )


def validate_therapeutic_context(content: str) -> ValidationResult:
    """Decide whether `content` should be analysed for distortions at all."""
    analysis = analyze_therapeutic_context(content)
    kind = analysis.context_type

    is_valid = kind == "therapeutic" or (
        kind == "ambiguous" and (analysis.emotional_intensity >= 1 or analysis.therapeutic_relevance >= 1)
    )

    if kind == "therapeutic" and analysis.emotional_intensity >= 7:
        adjustment = 1.2
    elif kind in ("neutral", "organizational"):
        adjustment = 0.3
    elif kind == "ambiguous":
        adjustment = 0.7
    else:
        adjustment = 1.0

    reason: Optional[str] = None
    if not is_valid:
        if "organizational" in analysis.neutral_context_flags:
            reason = ORGANIZATIONAL_EXCLUSION
        elif "routine_factual" in analysis.neutral_context_flags:
            reason = ROUTINE_EXCLUSION
        elif analysis.emotional_intensity < 3 and analysis.therapeutic_relevance < 4:
            reason = LOW_SIGNAL_EXCLUSION

    return ValidationResult(
        is_valid_therapeutic_context=is_valid,
        contextual_analysis=analysis,
        confidence_adjustment=adjustment,
        exclusion_reason=reason,
    )


def calculate_contextual_confidence(
    base_confidence: float, result: ValidationResult, has_cbt_alignment: bool = False
) -> float:
    adjusted = base_confidence * result.confidence_adjustment
    if len(result.contextual_analysis.stress_indicators) >= 2:
        adjusted *= 1.1
    if has_cbt_alignment:
        adjusted *= 1.15
    return min(95.0, max(5.0, adjusted))


def get_context_validation_explanation(result: ValidationResult) -> str:
    analysis = result.contextual_analysis
    if not result.is_valid_therapeutic_context and result.exclusion_reason:
        return result.exclusion_reason

    parts: list[str] = []
    if analysis.context_type == "therapeutic":
        parts.append(f"Strong therapeutic context (emotional intensity: {analysis.emotional_intensity}/10)")
    elif analysis.context_type == "ambiguous":
        parts.append(
            f"Ambiguous context requiring careful analysis (emotional intensity: {analysis.emotional_intensity}/10)"
        )
    if analysis.stress_indicators:
        parts.append(f"{len(analysis.stress_indicators)} emotional distress indicator(s) detected")
    if analysis.neutral_context_flags:
        parts.append(f"Neutral context flags: {', '.join(analysis.neutral_context_flags)}")

    return "; ".join(parts) or "Standard therapeutic analysis context"
