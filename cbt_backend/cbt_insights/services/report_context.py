from __future__ import annotations

from typing import Any, Literal, Optional

from cbt_insights.core.config import Settings, get_settings
from cbt_insights.core.logging_config import therapeutic_operation
from cbt_insights.exceptions import TranscriptTooLargeError
from cbt_insights.therapy.assessments import assess_user_data_priority
from cbt_insights.therapy.content_tier import (
    analyze_content_tier,
    get_content_tier_explanation,
    meets_analysis_threshold,
)
from cbt_insights.therapy.models import CBTStructuredAssessment, ChatMessage, ContentTierAnalysis, Record
from cbt_insights.therapy.normalizers import coerce_message, user_text
from cbt_insights.therapy.parsers import has_cbt_data, parse_all_cbt_data
from cbt_insights.therapy.summary import generate_cbt_summary


class UserDataPriorityView(Record):
    has_user_provided_data: bool
    user_rating_count: int
    user_data_reliability: int
    should_prioritize_user_data: bool
    user_assessment_types: list[str]


class ReportContext(Record):
    """Everything report generation needs from one transcript."""

    has_cbt_data: bool
    data_source: Literal["parsed", "none"]
    cbt_data: Optional[CBTStructuredAssessment] = None
    cbt_summary: str = ""
    content_tier: ContentTierAnalysis
    tier_explanation: str
    meets_analysis_threshold: bool
    user_data_priority: UserDataPriorityView


def ensure_transcript_limits(messages: list[Any], settings: Optional[Settings] = None) -> list[ChatMessage]:
    s = settings or get_settings()
    if len(messages) > s.MAX_MESSAGES:
        raise TranscriptTooLargeError(
            f"Transcript has {len(messages)} messages; the limit is {s.MAX_MESSAGES}",
            limit=s.MAX_MESSAGES,
            actual=len(messages),
        )
    coerced = [coerce_message(m) for m in messages]
    longest = max((len(m.content) for m in coerced), default=0)
    if longest > s.MAX_MESSAGE_CHARS:
        raise TranscriptTooLargeError(
            f"A message has {longest} characters; the limit is {s.MAX_MESSAGE_CHARS}",
            limit=s.MAX_MESSAGE_CHARS,
            actual=longest,
        )
    return coerced


def build_report_context(messages: list[Any]) -> ReportContext:
    found = has_cbt_data(messages)
    cbt_data = parse_all_cbt_data(messages) if found else None
    summary = generate_cbt_summary(cbt_data) if cbt_data is not None else ""

    tier = analyze_content_tier(messages)
    priority = assess_user_data_priority(user_text(messages))

    therapeutic_operation(
        "report_context_built",
        data_source="parsed" if found else "none",
        tier=tier.tier,
        user_ratings=priority.user_rating_count,
    )

    return ReportContext(
        has_cbt_data=found,
        data_source="parsed" if found else "none",
        cbt_data=cbt_data,
        cbt_summary=summary,
        content_tier=tier,
        tier_explanation=get_content_tier_explanation(tier),
        meets_analysis_threshold=meets_analysis_threshold(tier),
        user_data_priority=UserDataPriorityView(
            has_user_provided_data=priority.has_user_provided_data,
            user_rating_count=priority.user_rating_count,
            user_data_reliability=priority.user_data_reliability,
            should_prioritize_user_data=priority.should_prioritize_user_data,
            user_assessment_types=priority.user_assessment_types,
        ),
    )
