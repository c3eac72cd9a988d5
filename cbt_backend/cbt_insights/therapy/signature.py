"""
Structural fingerprint of a CBT diary export.

`analyze_cbt_message` looks only for layout cues (headers, section titles,
`- Name: N/10` ratings, credibility markers, reflection headings) and folds
them into a 0-1 confidence. It does not read meaning.
"""
from __future__ import annotations

import re
from typing import Optional

from pydantic import Field

from cbt_insights.therapy.models import Record, ReflectionDepth
from cbt_insights.therapy.patterns import cue

CBT_HEADER_PATTERNS = (
    re.compile(r"🌟\s*CBT\s+Diary\s+Entry", re.I),
    re.compile(r"CBT\s+Diary\s+Entry\s+with", re.I),
    re.compile(r"#\s*🌟\s*CBT\s+Diary", re.I),
)

CBT_SECTION_PATTERNS = (
    re.compile(r"##?\s*📍\s*Situation\s+Context", re.I),
    re.compile(r"##?\s*💭\s*(Emotional\s+Landscape|Initial\s+Emotions)", re.I),
    re.compile(r"##?\s*🧠\s*Automatic\s+Thoughts", re.I),
    re.compile(r"##?\s*🎯\s*Core\s+Schema\s+Analysis", re.I),
    re.compile(r"##?\s*Challenge\s+Questions", re.I),
    re.compile(r"##?\s*Final\s+Reflection", re.I),
    re.compile(r"##?\s*🔄\s*Rational\s+Thoughts", re.I),
    re.compile(r"##?\s*✨\s*Final\s+Reflection", re.I),
)

EMOTION_RATING_PATTERNS = (
    re.compile(r"-\s*\w+:\s*\d+/10"),
    re.compile(r"-\s*[A-Z][a-z]+:\s*\d+/10"),
)

AUTOMATIC_THOUGHT_PATTERNS = (
    re.compile(r'-\s*"[^"]+"\s*\*\(\d+/10\)\*'),
    re.compile(r"\*\(\d+/10\)\*"),
)

SCHEMA_ANALYSIS_PATTERNS = (
    re.compile(r"\*Credibility:\s*\d+/10\*", re.I),
    re.compile(r"Core\s+Belief:", re.I),
    re.compile(r"Behavioral\s+Patterns", re.I),
    re.compile(r"Confirming\s+behaviors:", re.I),
    re.compile(r"Avoidant\s+behaviors:", re.I),
    re.compile(r"Schema\s+Modes", re.I),
)

QUANTIFIED_SELF_PATTERNS = (
    cue(r"I feel.*\d+/10"),  # "I feel anxiety at 7/10"
    cue(r"my.*level.*is.*\d+"),  # "My stress level is 8"
    cue(r"I would rate.*\d+"),
    cue(r"on a scale.*\d+"),
    cue(r"I assess.*\d+"),
    cue(r"personally.*\d+.*out of"),
    cue(r"\d+/10.*intensity"),
    cue(r"feeling.*\d+.*percent"),
)

USER_RATING_PATTERNS = (
    re.compile(r"-\s*\w+:\s*\d+/10"),
    re.compile(r"\*\(\d+/10\)\*"),
    re.compile(r"I rate this as \d+", re.I),
    re.compile(r"self-assessment:\s*\d+", re.I),
    re.compile(r"my rating:\s*\d+", re.I),
)

SCHEMA_REFLECTION_PATTERNS = (
    cue(r"SCHEMA\s+REFLECTION.*THERAPEUTIC\s+INSIGHTS"),
    re.compile(r"Personal\s+Self-Assessment", re.I),
    re.compile(r"Guided\s+Reflection\s+Insights", re.I),
    cue(r"childhood.*patterns.*shaped"),
    cue(r"early.*experiences.*influence"),
    cue(r"core.*beliefs?.*formed"),
    cue(r"schema\s+modes.*activated"),
    cue(r"maladaptive.*patterns.*developed"),
    cue(r"protective.*mechanisms.*learned"),
    cue(r"inner.*critic.*voice"),
    cue(r"vulnerable.*child.*part"),
    cue(r"healing.*journey.*insights"),
)

REFLECTION_PATTERNS = (
    re.compile(r"SCHEMA\s+REFLECTION", re.I),
    re.compile(r"Therapeutic\s+Insights", re.I),
    re.compile(r"Personal\s+Self-Assessment", re.I),
    re.compile(r"Guided\s+Reflection\s+Insights", re.I),
    re.compile(r"Updated\s+Feelings", re.I),
    re.compile(r"Alternative\s+Responses", re.I),
)

DATE_PATTERNS = (
    re.compile(r"\*\*Date:\*\*\s*([^\n\r]+)", re.I),
    re.compile(r"Date:\s*([^\n\r]+)", re.I),
)

DEFAULT_DIARY_THRESHOLD = 0.7

REFLECTION_DEPTH_WEIGHTS: dict[str, float] = {"comprehensive": 0.25, "moderate": 0.15, "minimal": 0.08}


class CBTMessageSignature(Record):
    has_cbt_header: bool = False
    has_cbt_sections: bool = False
    has_emotion_ratings: bool = False
    has_automatic_thoughts: bool = False
    has_schema_analysis: bool = False
    has_reflection: bool = False
    has_quantified_self_assessment: bool = False
    has_user_provided_ratings: bool = False
    has_schema_reflection_content: bool = False
    schema_reflection_depth: ReflectionDepth = "none"
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


def _hits(patterns: tuple[re.Pattern, ...], content: str) -> int:
    return sum(1 for p in patterns if p.search(content))


def _reflection_depth(hits: int) -> ReflectionDepth:
    if hits >= 8:
        return "comprehensive"
    if hits >= 4:
        return "moderate"
    if hits >= 1:
        return "minimal"
    return "none"


def analyze_cbt_message(content: str) -> CBTMessageSignature:
    """Score how closely `content` follows the diary export layout."""
    reflection_hits = _hits(SCHEMA_REFLECTION_PATTERNS, content)
    depth = _reflection_depth(reflection_hits)

    flags = {
        "has_cbt_header": _hits(CBT_HEADER_PATTERNS, content) > 0,
        "has_cbt_sections": _hits(CBT_SECTION_PATTERNS, content) >= 3,
        "has_emotion_ratings": any(len(p.findall(content)) >= 2 for p in EMOTION_RATING_PATTERNS),
        "has_automatic_thoughts": _hits(AUTOMATIC_THOUGHT_PATTERNS, content) > 0,
        "has_schema_analysis": _hits(SCHEMA_ANALYSIS_PATTERNS, content) >= 2,
        "has_reflection": _hits(REFLECTION_PATTERNS, content) >= 2,
        "has_quantified_self_assessment": _hits(QUANTIFIED_SELF_PATTERNS, content) > 0,
        "has_user_provided_ratings": _hits(USER_RATING_PATTERNS, content) > 0,
        "has_schema_reflection_content": reflection_hits > 0,
    }

    score = 0.0
    if flags["has_cbt_header"]:
        score += 0.25
    if flags["has_cbt_sections"]:
        score += 0.2
    if flags["has_emotion_ratings"]:
        score += 0.15
    if flags["has_user_provided_ratings"]:
        score += 0.2
    if flags["has_quantified_self_assessment"]:
        score += 0.15
    if flags["has_automatic_thoughts"]:
        score += 0.1
    if flags["has_schema_analysis"]:
        score += 0.08
    score += REFLECTION_DEPTH_WEIGHTS.get(depth, 0.0)
    if flags["has_reflection"]:
        score += 0.04

    premium = sum(
        1
        for key in (
            "has_cbt_header",
            "has_cbt_sections",
            "has_user_provided_ratings",
            "has_quantified_self_assessment",
            "has_schema_reflection_content",
        )
        if flags[key]
    )
    if premium >= 3:
        score += 0.1
    elif premium >= 2:
        score += 0.05

    return CBTMessageSignature(**flags, schema_reflection_depth=depth, confidence=min(score, 1.0))


def is_cbt_diary_message(content: str, threshold: float = DEFAULT_DIARY_THRESHOLD) -> bool:
    return analyze_cbt_message(content).confidence >= threshold


def get_cbt_identification_reason(signature: CBTMessageSignature) -> str:
    reasons: list[str] = []

    # self-reported data first
    if signature.has_user_provided_ratings:
        reasons.append("user-provided ratings (premium data)")
    if signature.has_quantified_self_assessment:
        reasons.append("quantified self-assessments")
    if signature.has_schema_reflection_content:
        reasons.append(f"schema reflection ({signature.schema_reflection_depth} depth)")

    if signature.has_cbt_header:
        reasons.append("CBT diary header")
    if signature.has_cbt_sections:
        reasons.append("structured CBT sections")
    if signature.has_emotion_ratings:
        reasons.append("emotion intensity ratings")
    if signature.has_automatic_thoughts:
        reasons.append("automatic thoughts with credibility")
    if signature.has_schema_analysis:
        reasons.append("schema analysis elements")
    if signature.has_reflection:
        reasons.append("therapeutic reflection content")

    if not reasons:
        return "No CBT indicators found"
    if len(reasons) == 1:
        return f"Contains {reasons[0]}"
    return f"Contains {', '.join(reasons[:-1])} and {reasons[-1]}"


def extract_cbt_date(content: str) -> Optional[str]:
    for pattern in DATE_PATTERNS:
        m = pattern.search(content)
        if m and m.group(1).strip():
            return m.group(1).strip()
    return None


def has_schema_reflection(content: str) -> bool:
    return any(p.search(content) for p in SCHEMA_REFLECTION_PATTERNS)
