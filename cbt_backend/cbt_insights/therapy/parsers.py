from __future__ import annotations

from typing import Any, Optional

from cbt_insights.core.logging_config import therapeutic_operation
from cbt_insights.therapy.card_format import CARD_MARKER, extract_cbt_data_from_card_format
from cbt_insights.therapy.legacy_sections import EMOTIONS, LEGACY_SECTIONS, extract_section
from cbt_insights.therapy.models import CBTStructuredAssessment, ChatMessage
from cbt_insights.therapy.normalizers import conversation_messages

LEGACY_MARKER = "CBT Session -"


def _first_card(messages: list[ChatMessage]) -> Optional[CBTStructuredAssessment]:
    for message in messages:
        card = extract_cbt_data_from_card_format(message.content)
        if card is not None:
            return card
    return None


def parse_all_cbt_data(messages: Any) -> CBTStructuredAssessment:
    """
    Build one assessment from a transcript.

    A summary card anywhere in the user/assistant turns wins outright. Without
    one, the legacy sections are gathered in message order: the first
    extraction of each section is kept, except emotions, where a second
    Emotion Assessment supplies the final ratings.
    """
    conversation = conversation_messages(messages)

    card = _first_card(conversation)
    if card is not None:
        therapeutic_operation("cbt_card_data_extracted", format="unified_card", sections=len(card.sections_present()))
        return card

    therapeutic_operation("cbt_fallback_to_markdown", reason="no_card_format")

    found: dict[str, Any] = {}
    final_emotions: Optional[dict[str, int]] = None
    for message in conversation:
        content = message.content
        for section in LEGACY_SECTIONS:
            if section.header not in content:
                continue
            if section is EMOTIONS:
                if "emotions" in found and final_emotions is not None:
                    continue
            elif section.key in found:
                continue

            record = extract_section(content, section)
            if record is None:
                continue
            if section is EMOTIONS and "emotions" in found:
                final_emotions = record.initial
                therapeutic_operation("cbt_final_emotions_parsed", emotion_count=len(final_emotions))
                continue
            found[section.key] = record
            therapeutic_operation("cbt_section_parsed", section=section.key, message_role=message.role)

    if final_emotions is not None:
        found["emotions"] = found["emotions"].model_copy(update={"final": final_emotions})

    assessment = CBTStructuredAssessment(**found)
    therapeutic_operation(
        "cbt_parsing_completed",
        sections_found=len(found),
        sections=",".join(assessment.sections_present()) or "-",
    )
    return assessment


def has_cbt_data(messages: Any) -> bool:
    """Cheap check for either wire format in any user/assistant turn."""
    conversation = conversation_messages(messages)
    legacy = any(LEGACY_MARKER in m.content for m in conversation)
    card = any(CARD_MARKER in m.content for m in conversation)
    therapeutic_operation(
        "cbt_data_detection_completed",
        found=legacy or card,
        legacy_format=legacy,
        card_format=card,
        messages_checked=len(conversation),
    )
    return legacy or card
