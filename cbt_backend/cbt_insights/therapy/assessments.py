"""
Detection of user-provided ratings and schema-reflection language in free text.

Patterns are grouped by how explicit the self-assessment is. Every check is a
stateless `search`, so repeated calls on the same text always agree.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal

from cbt_insights.therapy.models import RATING_MAX, RATING_MIN, ReflectionDepth
from cbt_insights.therapy.patterns import cue

RatingKind = Literal["emotion", "credibility", "general"]

# Explicit structured assessments
HIGH_CONFIDENCE_ASSESSMENT_PATTERNS = (
    re.compile(r"-\s*\w+:\s*\d+/10"),  # "- Anxiety: 7/10"
    re.compile(r"\*\(\d+/10\)\*"),  # "*(7/10)*"
    re.compile(r"self-assessment:\s*\d+", re.I),
    re.compile(r"my rating:\s*\d+", re.I),
)

# Natural language assessments
MEDIUM_CONFIDENCE_ASSESSMENT_PATTERNS = (
    cue(
        r"I feel.*(?:anxiety|stress|depression|fear|worry).*(?:is|at|around|about)\s*(\d+)(?:/10|\s*out of\s*10)",
    ),
    cue(
        r"my.*(?:anxiety|stress|depression|confidence|mood).*(?:level|is).*(?:is|has been|was).*"
        r"(?:around|about)?\s*(\d+)(?:/10|\s*out of\s*10)?",
    ),
    cue(
        r"I would rate.*(?:this|my|the).*(?:feeling|emotion|anxiety|stress).*(?:as|at)\s*(\d+)(?:/10|\s*out of\s*10)?",
    ),
    cue(r"on a scale.*(?:of\s*)?1.*10.*(?:I'm|I am).*(?:at|around)\s*(\d+)"),
    cue(r"I assess.*(?:my|this).*(?:as|at)\s*(\d+)(?:/10|\s*out of\s*10)?"),
    cue(
        r"(?:my|the).*(?:anxiety|stress|depression|fear|worry|confidence).*(?:is|was).*"
        r"(?:probably|about|around)\s*(\d+)(?:/10|\s*out of\s*10)?",
    ),
    cue(r"I'd rate.*(?:my|this|the).*(?:as|at).*(?:about|around)?\s*(\d+)(?:/10|\s*out of\s*10)?"),
)

# Casual mentions
LOW_CONFIDENCE_ASSESSMENT_PATTERNS = (
    cue(r"feeling.*(?:about|around)\s*(\d+)\s*percent"),
    cue(r"(\d+)/10.*intensity"),
    cue(r"I rate this as\s*(\d+)"),
    cue(r"personally.*(?:I'd say|I think).*(\d+)\s*out of\s*10"),
)

USER_QUANTIFIED_ASSESSMENT_PATTERNS = (
    HIGH_CONFIDENCE_ASSESSMENT_PATTERNS + MEDIUM_CONFIDENCE_ASSESSMENT_PATTERNS + LOW_CONFIDENCE_ASSESSMENT_PATTERNS
)

SCHEMA_REFLECTION_INDICATORS = tuple(
    cue(p)
    for p in (
        r"SCHEMA\s+REFLECTION",
        r"Personal\s+Self-Assessment",
        r"Therapeutic\s+Insights",
        r"Guided\s+Reflection\s+Insights",
        r"childhood.*patterns",
        r"childhood.*criticism",
        r"childhood.*when",
        r"in my experience.*childhood",
        r"this started.*childhood",
        r"core\s+beliefs?",
        r"schema\s+modes",
        r"maladaptive.*patterns",
        r"early.*experiences.*influence",
        r"protective.*mechanisms.*learned",
        r"inner.*critic.*voice",
        r"vulnerable.*child.*part",
        r"healing.*journey.*insights",
        r"self-awareness",
        r"shaped.*beliefs",
        r"triggered.*situations",
        r"patterns.*in.*thinking",
        r"I notice.*patterns",
        r"I'm aware.*that",
    )
)

BRIEF_REQUEST_PATTERNS = tuple(
    cue(p)
    for p in (
        r"^(can you |could you |please )?search (for|about)",
        r"^(can you |could you |please )?find.*information",
        r"^(can you |could you |please )?look up",
        r"^(can you |could you |please )?help me find",
        r"^what are some.*(resources|apps|techniques|strategies|options|methods)",
        r"^where can I find",
        r"^do you know.*about",
        r"^tell me about",
    )
)

SELF_REFLECTIVE_PATTERNS = tuple(
    cue(p)
    for p in (
        r"I feel.*like",
        r"in my experience",
        r"I notice.*that",
        r"I'm aware.*that",
        r"personally.*I",
    )
)

STRUCTURED_EMOTION_RATING = re.compile(r"-\s*(\w+):\s*(\d+)/10")
CREDIBILITY_RATING = re.compile(r"\*\((\d+)/10\)\*")

# (pattern, kind) pairs for natural-language ratings, tried in order
ENHANCED_RATING_PATTERNS: tuple[tuple[re.Pattern, RatingKind], ...] = (
    (cue(r"my.*(?:anxiety|stress|depression|fear|worry).*(?:is|at)\s*(\d+)/10"), "emotion"),
    (cue(r"(?:anxiety|stress|depression|fear|worry).*(?:is|around|about)\s*(\d+)\s*out of\s*10"), "emotion"),
    (
        cue(
            r"my.*(?:anxiety|stress|depression|confidence|mood).*(?:level).*(?:has been|was).*"
            r"(?:around|about)\s*(\d+)(?:/10|\s*out of\s*10)?",
        ),
        "emotion",
    ),
    (
        cue(
            r"(?:my|the).*(?:confidence).*(?:is|was).*(?:probably|about|around)\s*(\d+)(?:/10|\s*out of\s*10)?",
        ),
        "general",
    ),
    (cue(r"I feel.*?(\d+)/10"), "emotion"),
    (cue(r"my.*level.*is.*(\d+)"), "general"),
    (cue(r"I would rate.*?(\d+)"), "general"),
)


@dataclass(frozen=True)
class UserRating:
    rating: int
    context: str
    kind: RatingKind


@dataclass(frozen=True)
class ContentMetrics:
    word_count: int
    has_user_assessments: bool
    user_assessment_count: int
    schema_reflection_depth: ReflectionDepth
    is_brief_request: bool
    user_data_reliability: int


@dataclass(frozen=True)
class UserDataPriority:
    has_user_provided_data: bool
    user_rating_count: int
    user_data_reliability: int
    should_prioritize_user_data: bool
    extracted_ratings: list[UserRating] = field(default_factory=list)
    user_assessment_types: list[str] = field(default_factory=list)


def extract_user_ratings(content: str) -> list[UserRating]:
    ratings: list[UserRating] = []

    for m in STRUCTURED_EMOTION_RATING.finditer(content):
        ratings.append(UserRating(rating=int(m.group(2)), context=m.group(1), kind="emotion"))

    for m in CREDIBILITY_RATING.finditer(content):
        ratings.append(UserRating(rating=int(m.group(1)), context="thought credibility", kind="credibility"))

    for pattern, kind in ENHANCED_RATING_PATTERNS:
        m = pattern.search(content)
        if not m or not m.group(1):
            continue
        rating = int(m.group(1))
        if not RATING_MIN <= rating <= RATING_MAX:
            continue
        # the same number already captured by a more specific pattern
        if any(r.rating == rating for r in ratings):
            continue
        ratings.append(UserRating(rating=rating, context="self-assessment", kind=kind))

    return ratings


def has_user_quantified_assessments(content: str) -> bool:
    if extract_user_ratings(content):
        return True
    return any(p.search(content) for p in USER_QUANTIFIED_ASSESSMENT_PATTERNS)


def _count_matches(patterns: tuple[re.Pattern, ...], content: str) -> int:
    return sum(1 for p in patterns if p.search(content))


def assess_schema_reflection_depth(content: str) -> ReflectionDepth:
    matches = _count_matches(SCHEMA_REFLECTION_INDICATORS, content)
    if matches >= 6:
        return "comprehensive"
    if matches >= 3:
        return "moderate"
    if matches >= 1:
        return "minimal"
    return "none"


def is_brief_request(content: str) -> bool:
    text = content.strip()
    return any(p.search(text) for p in BRIEF_REQUEST_PATTERNS)


def analyze_content_metrics(content: str) -> ContentMetrics:
    ratings = extract_user_ratings(content)

    reliability = 50
    if len(ratings) >= 3:
        reliability += 25
    if ratings:
        reliability += 10
    if any(r.kind in ("emotion", "credibility") for r in ratings):
        reliability += 15
    if _count_matches(SELF_REFLECTIVE_PATTERNS, content) >= 2:
        reliability += 10

    return ContentMetrics(
        word_count=len(content.split()),
        has_user_assessments=has_user_quantified_assessments(content),
        user_assessment_count=len(ratings),
        schema_reflection_depth=assess_schema_reflection_depth(content),
        is_brief_request=is_brief_request(content),
        user_data_reliability=min(100, reliability),
    )


def assess_user_data_priority(content: str) -> UserDataPriority:
    ratings = extract_user_ratings(content)
    has_data = bool(ratings) or has_user_quantified_assessments(content)
    metrics = analyze_content_metrics(content)
    return UserDataPriority(
        has_user_provided_data=has_data,
        user_rating_count=len(ratings),
        user_data_reliability=metrics.user_data_reliability,
        should_prioritize_user_data=has_data and metrics.user_data_reliability >= 60,
        extracted_ratings=ratings,
        user_assessment_types=list(dict.fromkeys(r.kind for r in ratings)),
    )
