"""
Grammar for the legacy `**CBT Session - <Name>**` chat sections.

Each section is one SectionSpec row: the header substring used for dispatch,
a block pattern whose first group is the section body, an optional line
pattern applied to each chunk of that body, and a builder turning the
matches into a record. `extract_section` is the only routine that runs them.
"""
from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Optional

from cbt_insights.therapy.models import (
    CORE_EMOTIONS,
    ActionPlanRecord,
    ChallengeQuestionRecord,
    CoreBeliefRecord,
    EmotionComparisonRecord,
    EmotionsRecord,
    RationalThoughtsRecord,
    SchemaModeRecord,
    SituationRecord,
    ThoughtsRecord,
)
from cbt_insights.therapy.normalizers import build_emotion_change, clamp_rating

Builder = Callable[[re.Match, list[re.Match]], Any]


def split_lines(body: str) -> list[str]:
    return body.strip().split("\n")


def split_blocks(body: str) -> list[str]:
    return [block.strip() for block in body.split("\n\n")]


@dataclass(frozen=True)
class SectionSpec:
    key: str
    header: str
    block: re.Pattern
    build: Builder
    line: Optional[re.Pattern] = None
    chunks: Callable[[str], list[str]] = split_lines


def extract_section(content: str, section: SectionSpec) -> Any:
    """Run one section grammar over a message body. None means the section is not in this message."""
    if not content:
        return None
    block = section.block.search(content)
    if block is None:
        return None
    lines: list[re.Match] = []
    if section.line is not None:
        for chunk in section.chunks(block.group(1)):
            m = section.line.search(chunk)
            if m is not None:
                lines.append(m)
    return section.build(block, lines)


# ----------------------------
# Builders
# ----------------------------
def _situation(block: re.Match, _lines: list[re.Match]) -> SituationRecord:
    return SituationRecord(date=block.group(1).strip(), description=block.group(2).strip())


def _emotions(_block: re.Match, lines: list[re.Match]) -> EmotionsRecord:
    initial: dict[str, int] = {}
    custom: Optional[str] = None
    for m in lines:
        name = m.group(1)
        key = name.lower()
        if key in CORE_EMOTIONS:
            initial[key] = clamp_rating(m.group(2))
        else:
            initial["other"] = clamp_rating(m.group(2))
            custom = name
    return EmotionsRecord(initial=initial, custom_emotion=custom)


def _thoughts(_block: re.Match, lines: list[re.Match]) -> ThoughtsRecord:
    return ThoughtsRecord(automatic_thoughts=[m.group(1) for m in lines])


def _core_belief(block: re.Match, _lines: list[re.Match]) -> CoreBeliefRecord:
    return CoreBeliefRecord(belief=block.group(1), credibility=clamp_rating(block.group(2)))


def _challenges(_block: re.Match, lines: list[re.Match]) -> list[ChallengeQuestionRecord]:
    return [ChallengeQuestionRecord(question=m.group(1).strip(), answer=m.group(2).strip()) for m in lines]


def _rational(_block: re.Match, lines: list[re.Match]) -> RationalThoughtsRecord:
    return RationalThoughtsRecord(thoughts=[m.group(1) for m in lines])


def _schema_modes(_block: re.Match, lines: list[re.Match]) -> list[SchemaModeRecord]:
    return [
        SchemaModeRecord(name=m.group(1), intensity=clamp_rating(m.group(2)), description=m.group(3).strip())
        for m in lines
    ]


ALTERNATIVE_RESPONSES = re.compile(
    r"🔄 \*\*Alternative Response Strategies\*\*:\n([\s\S]*?)(?:\n😌|\n---|\Z)"
)
NUMBERED_ITEM = re.compile(r"\d+\. (.+)")


def _action_plan(block: re.Match, lines: list[re.Match]) -> ActionPlanRecord:
    alternatives = ALTERNATIVE_RESPONSES.search(block.string, block.end(1))
    responses: Optional[list[str]] = None
    if alternatives is not None:
        responses = [m.group(1).strip() for m in map(NUMBERED_ITEM.search, split_lines(alternatives.group(1))) if m]
    return ActionPlanRecord(new_behaviors=[m.group(1).strip() for m in lines], alternative_responses=responses)


def _comparison(_block: re.Match, lines: list[re.Match]) -> EmotionComparisonRecord:
    # direction and size are recomputed from the two numbers; the prose in parentheses is not trusted
    return EmotionComparisonRecord(
        changes=[build_emotion_change(m.group(2).lower(), m.group(3), m.group(4)) for m in lines]
    )


# ----------------------------
# Section table
# ----------------------------
SITUATION = SectionSpec(
    key="situation",
    header="CBT Session - Situation Analysis",
    block=re.compile(
        r"\*\*CBT Session - Situation Analysis\*\*[\s\S]*?📅 \*\*Date\*\*: (.+?)\n.*?"
        r"📝 \*\*Situation\*\*: ([\s\S]*?)(?:\n---|\Z)"
    ),
    build=_situation,
)

EMOTIONS = SectionSpec(
    key="emotions",
    header="CBT Session - Emotion Assessment",
    block=re.compile(
        r"\*\*CBT Session - Emotion Assessment\*\*[\s\S]*?💭 \*\*Current Emotional State\*\*:\n"
        r"([\s\S]*?)(?:\n\*\*Total Emotions|\Z)"
    ),
    line=re.compile(r"• \*\*(.+?)\*\*: (\d+)/10"),
    build=_emotions,
)

THOUGHTS = SectionSpec(
    key="thoughts",
    header="CBT Session - Automatic Thoughts",
    block=re.compile(
        r"\*\*CBT Session - Automatic Thoughts\*\*[\s\S]*?🧠 \*\*Identified Thoughts\*\*:\n"
        r"([\s\S]*?)(?:\n\*\*Total Thoughts|\Z)"
    ),
    line=re.compile(r'\d+\. "(.+?)"'),
    build=_thoughts,
)

CORE_BELIEF = SectionSpec(
    key="core_beliefs",
    header="CBT Session - Core Belief Exploration",
    block=re.compile(
        r'\*\*CBT Session - Core Belief Exploration\*\*[\s\S]*?🎯 \*\*Identified Core Belief\*\*: "(.+?)"\n'
        r"📊 \*\*Belief Strength\*\*: (\d+)/10"
    ),
    build=_core_belief,
)

CHALLENGES = SectionSpec(
    key="challenge_questions",
    header="CBT Session - Thought Challenging",
    block=re.compile(
        r"\*\*CBT Session - Thought Challenging\*\*[\s\S]*?❓ \*\*Challenge Questions & Responses\*\*:\n\n"
        r"([\s\S]*?)(?:\n\*\*Total Questions|\Z)"
    ),
    line=re.compile(r"\*\*Question \d+\*\*: (.+)\n[^\n]*?\*\*Answer\*\*: (.+)"),
    chunks=split_blocks,
    build=_challenges,
)

RATIONAL = SectionSpec(
    key="rational_thoughts",
    header="CBT Session - Rational Response Development",
    block=re.compile(
        r"\*\*CBT Session - Rational Response Development\*\*[\s\S]*?💡 \*\*Alternative Rational Thoughts\*\*:\n"
        r"([\s\S]*?)(?:\n\*\*Total Rational|\Z)"
    ),
    line=re.compile(r'\d+\. "(.+?)"'),
    build=_rational,
)

SCHEMA_MODES = SectionSpec(
    key="schema_modes",
    header="CBT Session - Schema Mode Analysis",
    block=re.compile(
        r"\*\*CBT Session - Schema Mode Analysis\*\*[\s\S]*?👥 \*\*Active Schema Modes\*\*:\n"
        r"([\s\S]*?)(?:\n\*\*Total Active|\Z)"
    ),
    line=re.compile(r"• \*\*(.+?)\*\* \((\d+)/10\): (.+)"),
    build=_schema_modes,
)

ACTION_PLAN = SectionSpec(
    key="action_plan",
    header="CBT Session - Action Plan & Final Assessment",
    block=re.compile(
        r"\*\*CBT Session - Action Plan & Final Assessment\*\*[\s\S]*?🎯 \*\*New Behaviors to Practice\*\*:\n"
        r"([\s\S]*?)(?:\n\s*🔄|\n😌|\*\*Final|\Z)"
    ),
    line=NUMBERED_ITEM,
    build=_action_plan,
)

EMOTION_COMPARISON = SectionSpec(
    key="emotion_comparison",
    header="Emotional Changes During Session",
    block=re.compile(r"📊 \*\*Emotional Changes During Session\*\*:\n\n([\s\S]*?)(?:\n\*\*Total Changes|\Z)"),
    line=re.compile(r"(↗️|↘️) \*\*(.+?)\*\*: (\d+) → (\d+) \((increased|decreased) by (\d+)\)"),
    build=_comparison,
)

LEGACY_SECTIONS: tuple[SectionSpec, ...] = (
    SITUATION,
    EMOTIONS,
    THOUGHTS,
    CORE_BELIEF,
    CHALLENGES,
    RATIONAL,
    SCHEMA_MODES,
    ACTION_PLAN,
    EMOTION_COMPARISON,
)


def extract_situation_data(content: str) -> Optional[SituationRecord]:
    return extract_section(content, SITUATION)


def extract_emotion_data(content: str) -> Optional[EmotionsRecord]:
    return extract_section(content, EMOTIONS)


def extract_challenge_data(content: str) -> Optional[list[ChallengeQuestionRecord]]:
    return extract_section(content, CHALLENGES)


def extract_emotion_comparison(content: str) -> Optional[EmotionComparisonRecord]:
    return extract_section(content, EMOTION_COMPARISON)
