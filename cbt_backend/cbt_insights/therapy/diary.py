from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from datetime import date, datetime
from typing import Any, Optional

from cbt_insights.core.logging_config import therapeutic_operation
from cbt_insights.therapy.models import (
    CBTFormData,
    ChallengeQuestionRecord,
    EmotionSet,
    ParsedCBTData,
    RationalThoughtRecord,
    SchemaModeOption,
    SchemaReflection,
    SchemaReflectionQuestion,
    ThoughtRecord,
)
from cbt_insights.therapy.normalizers import build_emotion_set, clamp_rating, strip_brackets
from cbt_insights.therapy.patterns import cue

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_MODES: tuple[SchemaModeOption, ...] = tuple(
    SchemaModeOption(id=name, name=name)
    for name in ("Vulnerable Child", "Angry Child", "Detached Protector", "Healthy Adult")
)

# a section runs until the next heading, a horizontal rule, or the end of the document
_END = r"(?=\n##|\n---|\Z)"

DATE_PATTERNS = (
    re.compile(r"\*\*Date:\*\*\s*([^\n\r]+)", re.I),
    re.compile(r"Date:\s*([^\n\r]+)", re.I),
)
DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%A, %B %d, %Y",
)
_ORDINAL = re.compile(r"(\d)(st|nd|rd|th)\b", re.I)

SITUATION_PATTERNS = (
    re.compile(r"##\s*📍\s*Situation\s+Context[^\n]*\n([\s\S]+?)" + _END, re.I),
    re.compile(r"##\s*Situation\s*Context[^\n]*\n([\s\S]+?)" + _END, re.I),
    re.compile(r"##\s*Situation[^\n]*\n([\s\S]+?)" + _END, re.I),
)

INITIAL_EMOTIONS_SECTION = re.compile(r"##\s*💭\s*(?:Emotional\s+Landscape|Initial\s+Emotions)[\s\S]+?" + _END, re.I)
FINAL_EMOTIONS_SECTION = re.compile(r"###?\s*(?:Updated\s+Feelings|Final\s+Emotions)[\s\S]+?" + _END, re.I)
EMOTION_LINE = re.compile(r"-\s*([^:\n]+):\s*(\d+)/10", re.I)

AUTOMATIC_THOUGHTS_SECTION = re.compile(r"##\s*🧠\s*Automatic\s+Thoughts[\s\S]+?" + _END, re.I)
RATIONAL_THOUGHTS_SECTION = re.compile(r"##\s*(?:🔄)?\s*Rational\s+Thoughts[\s\S]+?" + _END, re.I)
RATED_THOUGHT_LINE = re.compile(r'-\s*"([^"]+)"\s*\*\((\d+)/10\)\*', re.I)

CORE_SCHEMA_SECTION = re.compile(r"##\s*🎯\s*Core\s+Schema\s+Analysis[\s\S]+?" + _END, re.I)
CORE_CREDIBILITY = re.compile(r"\*Credibility:\s*(\d+)/10\*", re.I)
CORE_BELIEF = re.compile(r"\*\*Core\s+Belief:\*\*\s*([^\n\r]+)", re.I)
BEHAVIOR_PATTERNS = {
    "confirming_behaviors": re.compile(r"\*\*Confirming\s+behaviors:\*\*\s*([^\n\r]+)", re.I),
    "avoidant_behaviors": re.compile(r"\*\*Avoidant\s+behaviors:\*\*\s*([^\n\r]+)", re.I),
    "overriding_behaviors": re.compile(r"\*\*Overriding\s+behaviors:\*\*\s*([^\n\r]+)", re.I),
}

SCHEMA_MODES_SECTION = re.compile(r"###?\s*Active\s+Schema\s+Modes[\s\S]+?" + _END, re.I)
CHECKED_MODE_LINE = re.compile(r"-\s*\[x\]\s*([^*\n]+?)\s*\*\(([^)]+)\)\*", re.I)
INTENSITY_IN_NOTE = re.compile(r"(\d+)\s*/\s*10")

REFLECTION_MARKER = cue(r"##\s*🔍\s*SCHEMA\s+REFLECTION.*THERAPEUTIC\s+INSIGHTS")
SELF_ASSESSMENT = re.compile(r'###\s*🌱\s*Personal\s+Self-Assessment[\s\S]*?"([^"]+)"', re.I)
INSIGHTS_SECTION = re.compile(r"###\s*🧭\s*Guided\s+Reflection\s+Insights([\s\S]*?)" + _END, re.I)
INSIGHT_ITEM = re.compile(
    r'\*\*(?:💡|👶|🧠|🛡️?|💭)\s*([^*]+?)\s*Pattern:\*\*[^*]*\*Question:\*\s*"([^"]+)"'
    r'[^*]*\*Insight:\*\s*"([^"]+)"',
    re.I,
)
REFLECTION_CATEGORIES = frozenset({"childhood", "schemas", "coping", "modes"})

CHALLENGE_TABLE = re.compile(r"##\s*Challenge\s+Questions[\s\S]*?\|[^|]+\|[^|]+\|([\s\S]*?)" + _END, re.I)
ADDITIONAL_TABLE = re.compile(r"###\s*Additional\s+Questions[\s\S]*?\|[^|]+\|[^|]+\|([\s\S]*?)" + _END, re.I)
TABLE_ROW = re.compile(r"\|\s*([^|]+)\s*\|\s*([^|]+)\s*\|")
SEPARATOR_CELL = re.compile(r":?-{3,}:?")

ORIGINAL_CREDIBILITY = re.compile(r"\*\*Credibility\s+of\s+Original\s+Thoughts?:\*\*\s*(\d+)/10", re.I)
NEW_BEHAVIORS_PATTERNS = (
    re.compile(r"###\s*New\s+Behaviors[^\n]*\n([\s\S]+?)" + _END, re.I),
    re.compile(r"\*\*New\s+Behaviors?\*\*[^\n]*\n([\s\S]+?)" + _END, re.I),
)


# ----------------------------
# Field extractors (each returns its default on a miss)
# ----------------------------
def parse_diary_date(raw: str) -> Optional[str]:
    text = _ORDINAL.sub(r"\1", raw.strip().strip("*").strip())
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text).date().isoformat()
    except ValueError:
        return None


def extract_date(content: str) -> Optional[str]:
    for pattern in DATE_PATTERNS:
        m = pattern.search(content)
        if m:
            parsed = parse_diary_date(m.group(1))
            if parsed:
                return parsed
    return None


def extract_situation(content: str) -> str:
    for pattern in SITUATION_PATTERNS:
        m = pattern.search(content)
        if m:
            return strip_brackets(m.group(1))
    return ""


def extract_emotion_set(content: str, section: re.Pattern) -> EmotionSet:
    m = section.search(content)
    if m is None:
        return EmotionSet()
    return build_emotion_set((line.group(1), line.group(2)) for line in EMOTION_LINE.finditer(m.group(0)))


def extract_automatic_thoughts(content: str) -> list[ThoughtRecord]:
    m = AUTOMATIC_THOUGHTS_SECTION.search(content)
    if m is None:
        return []
    return [
        ThoughtRecord(thought=line.group(1).strip(), credibility=clamp_rating(line.group(2)))
        for line in RATED_THOUGHT_LINE.finditer(m.group(0))
    ]


def extract_rational_thoughts(content: str) -> list[RationalThoughtRecord]:
    m = RATIONAL_THOUGHTS_SECTION.search(content)
    if m is None:
        return []
    return [
        RationalThoughtRecord(thought=line.group(1).strip(), confidence=clamp_rating(line.group(2)))
        for line in RATED_THOUGHT_LINE.finditer(m.group(0))
    ]


def extract_core_schema(content: str) -> dict[str, Any]:
    out: dict[str, Any] = {
        "core_belief_text": "",
        "core_belief_credibility": 0,
        "confirming_behaviors": "",
        "avoidant_behaviors": "",
        "overriding_behaviors": "",
    }
    m = CORE_SCHEMA_SECTION.search(content)
    if m is None:
        return out
    section = m.group(0)

    credibility = CORE_CREDIBILITY.search(section)
    if credibility:
        out["core_belief_credibility"] = clamp_rating(credibility.group(1))
    belief = CORE_BELIEF.search(section)
    if belief:
        out["core_belief_text"] = strip_brackets(belief.group(1))
    for field, pattern in BEHAVIOR_PATTERNS.items():
        found = pattern.search(section)
        if found:
            out[field] = strip_brackets(found.group(1))
    return out


def extract_schema_modes(content: str, vocabulary: Sequence[SchemaModeOption]) -> list[SchemaModeOption]:
    modes = [mode.model_copy(update={"selected": False}) for mode in vocabulary]
    m = SCHEMA_MODES_SECTION.search(content)
    if m is None:
        return modes

    index = {mode.name.lower(): i for i, mode in enumerate(modes)}
    for line in CHECKED_MODE_LINE.finditer(m.group(0)):
        i = index.get(line.group(1).strip().lower())
        if i is None:
            continue
        update: dict[str, Any] = {"selected": True}
        intensity = INTENSITY_IN_NOTE.search(line.group(2))
        if intensity:
            update["intensity"] = clamp_rating(intensity.group(1))
        modes[i] = modes[i].model_copy(update=update)
    return modes


def extract_schema_reflection(content: str) -> SchemaReflection:
    if not REFLECTION_MARKER.search(content):
        return SchemaReflection()

    assessment = SELF_ASSESSMENT.search(content)
    questions: list[SchemaReflectionQuestion] = []
    section = INSIGHTS_SECTION.search(content)
    if section:
        for item in INSIGHT_ITEM.finditer(section.group(1)):
            category = item.group(1).strip().lower()
            questions.append(
                SchemaReflectionQuestion(
                    question=item.group(2).strip(),
                    answer=item.group(3).strip(),
                    category=category if category in REFLECTION_CATEGORIES else "custom",
                    is_required=False,
                )
            )
    return SchemaReflection(
        enabled=True,
        questions=questions,
        self_assessment=assessment.group(1).strip() if assessment else "",
    )


def _table_rows(body: str) -> list[ChallengeQuestionRecord]:
    rows: list[ChallengeQuestionRecord] = []
    for row in TABLE_ROW.finditer(body):
        question, answer = row.group(1).strip(), row.group(2).strip()
        if question == "Question":
            continue
        if not question and not answer:
            continue
        if SEPARATOR_CELL.fullmatch(question) and SEPARATOR_CELL.fullmatch(answer):
            continue
        rows.append(ChallengeQuestionRecord(question=question, answer=answer))
    return rows


def extract_challenge_table(content: str, table: re.Pattern) -> Optional[list[ChallengeQuestionRecord]]:
    """Rows of a two-column question table, or None when the table is absent."""
    m = table.search(content)
    if m is None:
        return None
    return _table_rows(m.group(1))


def extract_original_thought_credibility(content: str) -> int:
    m = ORIGINAL_CREDIBILITY.search(content)
    return clamp_rating(m.group(1)) if m else 0


def extract_new_behaviors(content: str) -> str:
    for pattern in NEW_BEHAVIORS_PATTERNS:
        m = pattern.search(content)
        if m:
            return strip_brackets(m.group(1))
    return ""


def missing_fields(form: CBTFormData) -> list[str]:
    missing: list[str] = []
    if not form.situation.strip():
        missing.append("situation")
    if not form.initial_emotions.has_any_rating():
        missing.append("initialEmotions")
    return missing


# ----------------------------
# Entry point
# ----------------------------
def parse_cbt_from_markdown(
    content: str,
    *,
    schema_modes: Sequence[SchemaModeOption] = DEFAULT_SCHEMA_MODES,
    today: Optional[date] = None,
) -> ParsedCBTData:
    """
    Rebuild a complete diary form from one exported markdown document.

    Every field starts at its default and each extractor only overwrites the
    fields it found. An unexpected failure stops the remaining steps, is
    recorded in `parsing_errors`, and the fields already extracted are kept.
    """
    text = content if isinstance(content, str) else ""
    fields: dict[str, Any] = {
        "date": (today or date.today()).isoformat(),
        "schema_modes": [mode.model_copy(update={"selected": False}) for mode in schema_modes],
    }
    errors: list[str] = []

    try:
        fields["date"] = extract_date(text) or fields["date"]
        fields["situation"] = extract_situation(text)
        fields["initial_emotions"] = extract_emotion_set(text, INITIAL_EMOTIONS_SECTION)
        fields["final_emotions"] = extract_emotion_set(text, FINAL_EMOTIONS_SECTION)
        fields["automatic_thoughts"] = extract_automatic_thoughts(text)
        fields["rational_thoughts"] = extract_rational_thoughts(text)
        fields.update(extract_core_schema(text))
        fields["schema_modes"] = extract_schema_modes(text, schema_modes)
        fields["schema_reflection"] = extract_schema_reflection(text)

        challenges = extract_challenge_table(text, CHALLENGE_TABLE)
        if challenges is not None:
            fields["challenge_questions"] = challenges
        additional = extract_challenge_table(text, ADDITIONAL_TABLE)
        if additional is not None:
            fields["additional_questions"] = additional

        fields["original_thought_credibility"] = extract_original_thought_credibility(text)
        fields["new_behaviors"] = extract_new_behaviors(text)
    except Exception as e:
        logger.warning("Diary reconstruction stopped early: %s", e)
        errors.append(str(e) or type(e).__name__)

    form = CBTFormData(**fields)
    missing = missing_fields(form)

    therapeutic_operation(
        "cbt_diary_parsed",
        complete=not missing,
        missing_fields=len(missing),
        parsing_errors=len(errors),
    )
    return ParsedCBTData(
        form_data=form,
        is_complete=not missing,
        missing_fields=missing,
        parsing_errors=errors,
    )
