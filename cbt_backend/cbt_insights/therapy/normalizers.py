from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from cbt_insights.therapy.models import (
    CORE_EMOTIONS,
    RATING_MAX,
    RATING_MIN,
    ChatMessage,
    EmotionChange,
    EmotionSet,
)


EMOTION_ALIASES: dict[str, str] = {name: name for name in CORE_EMOTIONS}
EMOTION_ALIASES["happiness"] = "joy"

CONVERSATION_ROLES = frozenset({"user", "assistant"})


def as_number(value: Any) -> Optional[float]:
    """Finite float for ints, floats and numeric strings; None for anything else (bools included)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def clamp_rating(value: Any, default: int = 0) -> int:
    """
    The single clamping policy for every 0-10 rating.
    Numbers round half-up and are clamped to [0, 10]; non-numeric input yields `default`.
    """
    number = as_number(value)
    if number is None:
        return default
    return max(RATING_MIN, min(RATING_MAX, int(math.floor(number + 0.5))))


def coerce_text(value: Any, default: str = "") -> str:
    if not value:
        return default
    if isinstance(value, str):
        return value
    return str(value)


def strip_brackets(text: str) -> str:
    """Trim and drop one leading '[' and one trailing ']' left over from form placeholders."""
    text = text.strip()
    if text.startswith("["):
        text = text[1:]
    if text.endswith("]"):
        text = text[:-1]
    return text


def canonical_emotion(name: str) -> Optional[str]:
    return EMOTION_ALIASES.get(name.strip().lower())


def build_emotion_set(pairs: Iterable[tuple[str, Any]]) -> EmotionSet:
    """Fold (name, rating) pairs into an EmotionSet; unknown names land in `other`, last one wins."""
    values: dict[str, Any] = {}
    for name, rating in pairs:
        key = canonical_emotion(name)
        if key is not None:
            values[key] = clamp_rating(rating)
        else:
            values["other"] = name.strip()
            values["other_intensity"] = clamp_rating(rating)
    return EmotionSet(**values)


def emotion_map_from_entries(entries: Any) -> dict[str, int]:
    """Card-format `[{emotion, rating}]` list to a name -> rating map. Malformed entries are dropped."""
    out: dict[str, int] = {}
    if not isinstance(entries, list):
        return out
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        name = entry.get("emotion")
        rating = entry.get("rating")
        if not isinstance(name, str) or not name.strip():
            continue
        if as_number(rating) is None:
            continue
        out[name] = clamp_rating(rating)
    return out


def build_emotion_change(emotion: str, initial: Any, final: Any) -> EmotionChange:
    start = clamp_rating(initial)
    end = clamp_rating(final)
    return EmotionChange(
        emotion=emotion,
        initial=start,
        final=end,
        direction="increased" if end > start else "decreased",
        change=abs(end - start),
    )


def build_emotion_comparison(initial: EmotionSet, final: EmotionSet) -> list[EmotionChange]:
    """Core emotions that moved by at least one point, in canonical order."""
    changes: list[EmotionChange] = []
    before = initial.core_values()
    after = final.core_values()
    for name in CORE_EMOTIONS:
        if abs(after[name] - before[name]) >= 1:
            changes.append(build_emotion_change(name, before[name], after[name]))
    return changes


def coerce_message(message: Any) -> ChatMessage:
    """Accept a mapping, a ChatMessage or any object exposing `content`/`role`."""
    if isinstance(message, ChatMessage):
        return message
    if isinstance(message, Mapping):
        content, role = message.get("content"), message.get("role")
    else:
        content, role = getattr(message, "content", None), getattr(message, "role", None)
    return ChatMessage(
        content=content if isinstance(content, str) else "",
        role=role if isinstance(role, str) else "",
    )


def conversation_messages(messages: Any) -> list[ChatMessage]:
    """User and assistant turns, in transcript order."""
    if not isinstance(messages, Iterable) or isinstance(messages, (str, bytes, Mapping)):
        return []
    out: list[ChatMessage] = []
    for raw in messages:
        message = coerce_message(raw)
        if message.role in CONVERSATION_ROLES:
            out.append(message)
    return out


def user_text(messages: Any) -> str:
    """Bodies of the user turns joined with single spaces."""
    if not isinstance(messages, Iterable) or isinstance(messages, (str, bytes, Mapping)):
        return ""
    parts = [coerce_message(m) for m in messages]
    return " ".join(m.content for m in parts if m.role == "user")
