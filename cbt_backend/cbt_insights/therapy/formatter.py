"""
Renders records in the legacy chat-section layout read by legacy_sections.
"""
from __future__ import annotations

from collections.abc import Sequence

from cbt_insights.therapy.models import (
    ActionPlanRecord,
    ChallengeQuestionRecord,
    CoreBeliefRecord,
    EmotionSet,
    SchemaModeRecord,
    SituationRecord,
)
from cbt_insights.therapy.normalizers import build_emotion_comparison


def _section(title: str, body: str, footer: str) -> str:
    return f"**CBT Session - {title}**\n\n{body}\n\n---\n*{footer}*"


def _numbered(items: Sequence[str], quoted: bool = False) -> str:
    if quoted:
        return "\n".join(f'{i}. "{item}"' for i, item in enumerate(items, start=1))
    return "\n".join(f"{i}. {item}" for i, item in enumerate(items, start=1))


def _rated_emotions(emotions: EmotionSet, bold: bool) -> list[str]:
    lines: list[str] = []
    for name, value in emotions.core_values().items():
        if value > 0:
            label = f"**{name.capitalize()}**" if bold else name.capitalize()
            lines.append(f"• {label}: {value}/10")
    if emotions.other and emotions.other_intensity > 0:
        label = f"**{emotions.other}**" if bold else emotions.other
        lines.append(f"• {label}: {emotions.other_intensity}/10")
    return lines


def format_situation(situation: SituationRecord) -> str:
    return _section(
        "Situation Analysis",
        f"📅 **Date**: {situation.date}\n📝 **Situation**: {situation.description}",
        "This data will be included in your therapeutic session report for analysis and insights.",
    )


def format_emotions(emotions: EmotionSet) -> str:
    lines = _rated_emotions(emotions, bold=True)
    return _section(
        "Emotion Assessment",
        "💭 **Current Emotional State**:\n" + "\n".join(lines) + f"\n\n**Total Emotions Identified**: {len(lines)}",
        "Emotion ratings help track your emotional patterns and therapeutic progress.",
    )


def format_thoughts(thoughts: Sequence[str]) -> str:
    return _section(
        "Automatic Thoughts",
        f"🧠 **Identified Thoughts**:\n{_numbered(thoughts, quoted=True)}\n\n**Total Thoughts Recorded**: {len(thoughts)}",
        "Automatic thoughts are the immediate mental responses that contribute to emotional states.",
    )


def format_core_belief(belief: CoreBeliefRecord) -> str:
    return _section(
        "Core Belief Exploration",
        f'🎯 **Identified Core Belief**: "{belief.belief}"\n📊 **Belief Strength**: {belief.credibility}/10',
        "Core beliefs are fundamental assumptions about yourself, others, and the world "
        "that drive thoughts and emotions.",
    )


def format_challenges(questions: Sequence[ChallengeQuestionRecord]) -> str:
    blocks = "\n\n".join(
        f"**Question {i}**: {qa.question}\n**Answer**: {qa.answer}" for i, qa in enumerate(questions, start=1)
    )
    return _section(
        "Thought Challenging",
        f"❓ **Challenge Questions & Responses**:\n\n{blocks}\n\n**Total Questions Explored**: {len(questions)}",
        "Challenging questions help examine the validity and helpfulness of automatic thoughts.",
    )


def format_rational_thoughts(thoughts: Sequence[str]) -> str:
    return _section(
        "Rational Response Development",
        f"💡 **Alternative Rational Thoughts**:\n{_numbered(thoughts, quoted=True)}"
        f"\n\n**Total Rational Responses**: {len(thoughts)}",
        "Rational thoughts provide balanced, evidence-based alternatives to automatic thinking patterns.",
    )


def format_schema_modes(modes: Sequence[SchemaModeRecord]) -> str:
    lines = "\n".join(f"• **{m.name}** ({m.intensity}/10): {m.description}" for m in modes)
    return _section(
        "Schema Mode Analysis",
        f"👥 **Active Schema Modes**:\n{lines}\n\n**Total Active Modes**: {len(modes)}",
        'Schema modes represent different emotional states or "parts" of yourself that become active in situations.',
    )


def format_action_plan(plan: ActionPlanRecord, final_emotions: EmotionSet) -> str:
    body = (
        f"🎯 **New Behaviors to Practice**:\n{_numbered(plan.new_behaviors)}\n\n"
        f"🔄 **Alternative Response Strategies**:\n{_numbered(plan.alternative_responses or [])}\n\n"
        "😌 **Final Emotional State**:\n" + "\n".join(_rated_emotions(final_emotions, bold=False))
    )
    return _section(
        "Action Plan & Final Assessment",
        body,
        "Action plans translate insights into concrete steps for therapeutic progress.",
    )


def generate_emotion_comparison(initial: EmotionSet, final: EmotionSet) -> str:
    changes = build_emotion_comparison(initial, final)
    if not changes:
        return "📊 **Emotional Stability**: No significant changes in emotion ratings during this session."

    lines = "\n".join(
        f"{'↗️' if c.direction == 'increased' else '↘️'} **{c.emotion.capitalize()}**: "
        f"{c.initial} → {c.final} ({c.direction} by {c.change})"
        for c in changes
    )
    return (
        f"📊 **Emotional Changes During Session**:\n\n{lines}\n\n"
        f"**Total Changes**: {len(changes)} emotions showed significant shifts during this CBT session."
    )
