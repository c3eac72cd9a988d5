from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from datetime import date
from typing import Any, Optional

from cbt_insights.core.logging_config import therapeutic_operation
from cbt_insights.exceptions import CardFormatError
from cbt_insights.therapy.models import (
    ActionPlanRecord,
    CBTStructuredAssessment,
    CoreBeliefRecord,
    EmotionsRecord,
    RationalThoughtsRecord,
    SchemaModeRecord,
    SituationRecord,
    ThoughtsRecord,
)
from cbt_insights.therapy.normalizers import clamp_rating, coerce_text, emotion_map_from_entries

logger = logging.getLogger(__name__)

# a payload never spans a second marker, so each character is scanned once
CARD_PATTERN = re.compile(r"<!-- CBT_SUMMARY_CARD:((?:(?!<!-- CBT_SUMMARY_CARD:).)*?) -->")
CARD_MARKER = "<!-- CBT_SUMMARY_CARD:"
CARD_END = "<!-- END_CBT_SUMMARY_CARD -->"


def decode_card_payload(raw: str) -> dict[str, Any]:
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise CardFormatError(f"invalid card JSON: {e}") from e
    if not isinstance(data, dict):
        raise CardFormatError(f"card payload must be an object, got {type(data).__name__}")
    return data


def _text_items(items: Any, key: str) -> list[str]:
    """Pull `item[key]` strings out of a list of objects; bare strings are accepted as-is."""
    if not isinstance(items, list):
        return []
    out: list[str] = []
    for item in items:
        if isinstance(item, str):
            out.append(item)
        elif isinstance(item, Mapping) and isinstance(item.get(key), str):
            out.append(item[key])
    return out


def _situation(card: dict[str, Any]) -> Optional[SituationRecord]:
    situation = card.get("situation")
    if not situation or not isinstance(situation, str):
        return None
    return SituationRecord(
        date=coerce_text(card.get("date"), "Unknown"),
        description=coerce_text(situation, "No description"),
    )


def _emotions(card: dict[str, Any]) -> Optional[EmotionsRecord]:
    initial = emotion_map_from_entries(card.get("initialEmotions"))
    if not initial:
        return None
    final = emotion_map_from_entries(card.get("finalEmotions"))
    return EmotionsRecord(initial=initial, final=final or None)


def _core_belief(card: dict[str, Any]) -> Optional[CoreBeliefRecord]:
    belief = card.get("coreBelief")
    if not isinstance(belief, Mapping):
        return None
    return CoreBeliefRecord(
        belief=coerce_text(belief.get("belief"), "No belief"),
        credibility=clamp_rating(belief.get("credibility")),
    )


def _schema_modes(card: dict[str, Any]) -> Optional[list[SchemaModeRecord]]:
    modes = card.get("schemaModes")
    if not isinstance(modes, list):
        return None
    out = [
        SchemaModeRecord(
            name=mode["name"],
            intensity=clamp_rating(mode.get("intensity")),
            description=mode["name"],
        )
        for mode in modes
        if isinstance(mode, Mapping) and isinstance(mode.get("name"), str) and mode["name"]
    ]
    return out or None


def _action_plan(card: dict[str, Any]) -> Optional[ActionPlanRecord]:
    behaviors = card.get("newBehaviors")
    responses = card.get("alternativeResponses")
    if not isinstance(behaviors, list) and not isinstance(responses, list):
        return None
    return ActionPlanRecord(
        new_behaviors=[b for b in behaviors if isinstance(b, str)] if isinstance(behaviors, list) else [],
        alternative_responses=_text_items(responses, "response") if isinstance(responses, list) else None,
    )


def assessment_from_card(card: dict[str, Any]) -> CBTStructuredAssessment:
    """Map a decoded card object onto the partial assessment. Missing or mistyped fields are left out."""
    automatic = _text_items(card.get("automaticThoughts"), "thought")
    rational = _text_items(card.get("rationalThoughts"), "thought")
    return CBTStructuredAssessment(
        situation=_situation(card),
        emotions=_emotions(card),
        thoughts=ThoughtsRecord(automatic_thoughts=automatic) if automatic else None,
        core_beliefs=_core_belief(card),
        rational_thoughts=RationalThoughtsRecord(thoughts=rational) if rational else None,
        schema_modes=_schema_modes(card),
        action_plan=_action_plan(card),
    )


def extract_cbt_data_from_card_format(content: str) -> Optional[CBTStructuredAssessment]:
    """
    Read a `<!-- CBT_SUMMARY_CARD:<json> -->` comment out of one message body.

    Returns None when there is no card or the payload is not a JSON object, so
    the caller can fall back to the legacy markdown sections.
    """
    if not isinstance(content, str):
        return None
    match = CARD_PATTERN.search(content)
    if match is None:
        return None

    try:
        card = decode_card_payload(match.group(1))
    except CardFormatError as e:
        logger.warning("Failed to parse card format CBT data: %s", e)
        return None

    therapeutic_operation("cbt_card_format_detected", card_fields=len(card))
    return assessment_from_card(card)


# ----------------------------
# Encoding
# ----------------------------
def _emotion_entries(values: Optional[dict[str, int]]) -> list[dict[str, Any]]:
    return [{"emotion": name, "rating": rating} for name, rating in (values or {}).items()]


def card_payload(assessment: CBTStructuredAssessment, today: Optional[date] = None) -> dict[str, Any]:
    """Inverse of `assessment_from_card` for the fields the card format carries."""
    payload: dict[str, Any] = {
        "date": (assessment.situation.date if assessment.situation else (today or date.today()).isoformat()),
    }
    if assessment.situation:
        payload["situation"] = assessment.situation.description
    if assessment.emotions:
        payload["initialEmotions"] = _emotion_entries(assessment.emotions.initial)
        if assessment.emotions.final:
            payload["finalEmotions"] = _emotion_entries(assessment.emotions.final)
    if assessment.thoughts:
        payload["automaticThoughts"] = [{"thought": t} for t in assessment.thoughts.automatic_thoughts]
    if assessment.core_beliefs:
        payload["coreBelief"] = {
            "belief": assessment.core_beliefs.belief,
            "credibility": assessment.core_beliefs.credibility,
        }
    if assessment.rational_thoughts:
        payload["rationalThoughts"] = [{"thought": t} for t in assessment.rational_thoughts.thoughts]
    if assessment.schema_modes:
        payload["schemaModes"] = [{"name": m.name, "intensity": m.intensity} for m in assessment.schema_modes]
    if assessment.action_plan:
        payload["newBehaviors"] = list(assessment.action_plan.new_behaviors)
        if assessment.action_plan.alternative_responses is not None:
            payload["alternativeResponses"] = [
                {"response": r} for r in assessment.action_plan.alternative_responses
            ]
    return payload


def encode_summary_card(assessment: CBTStructuredAssessment, today: Optional[date] = None) -> str:
    body = json.dumps(card_payload(assessment, today), ensure_ascii=False, separators=(",", ":"))
    # '>' only occurs inside JSON strings; escaping it keeps a literal "-->" from closing the comment
    body = body.replace(">", "\\u003e")
    return f"{CARD_MARKER}{body} -->\n{CARD_END}"
