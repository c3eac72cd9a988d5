from cbt_insights.therapy import formatter
from cbt_insights.therapy.legacy_sections import (
    ACTION_PLAN,
    SCHEMA_MODES,
    THOUGHTS,
    extract_challenge_data,
    extract_emotion_comparison,
    extract_emotion_data,
    extract_section,
    extract_situation_data,
)
from cbt_insights.therapy.models import ActionPlanRecord, EmotionSet, SituationRecord

LEGACY_MARKDOWN = """Let's capture where you are right now.

**CBT Session - Emotion Assessment**

💭 **Current Emotional State**:
• **Fear**: 7/10
• **Curiosity**: 5/10

**Total Emotions Identified**: 2

**CBT Session - Thought Challenging**

❓ **Challenge Questions & Responses**:

**Question 1**: What evidence supports this?
**Answer**: Some teammates offered help.

**Question 2**: What evidence contradicts this?
**Answer**: Deadlines were extended.

---"""


def test_emotions_with_custom_name():
    emotions = extract_emotion_data(LEGACY_MARKDOWN)
    assert emotions.initial == {"fear": 7, "other": 5}
    assert emotions.custom_emotion == "Curiosity"
    assert emotions.final is None


def test_challenge_pairs_in_order():
    challenges = extract_challenge_data(LEGACY_MARKDOWN)
    assert [(c.question, c.answer) for c in challenges] == [
        ("What evidence supports this?", "Some teammates offered help."),
        ("What evidence contradicts this?", "Deadlines were extended."),
    ]


def test_absent_sections_return_none():
    assert extract_situation_data(LEGACY_MARKDOWN) is None
    assert extract_emotion_comparison(LEGACY_MARKDOWN) is None
    assert extract_section("", THOUGHTS) is None


def test_situation_tolerates_surrounding_prose():
    content = "Great, thanks for sharing.\n\n" + formatter.format_situation(
        SituationRecord(date="2024-01-15", description="Argument with my manager")
    )
    assert extract_situation_data(content) == SituationRecord(date="2024-01-15", description="Argument with my manager")


def test_schema_mode_lines():
    content = (
        "**CBT Session - Schema Mode Analysis**\n\n👥 **Active Schema Modes**:\n"
        "• **Vulnerable Child** (6/10): Feeling small\n"
        "• **Punitive Parent** (8/10): Harsh inner voice\n\n**Total Active Modes**: 2"
    )
    modes = extract_section(content, SCHEMA_MODES)
    assert [(m.name, m.intensity, m.description) for m in modes] == [
        ("Vulnerable Child", 6, "Feeling small"),
        ("Punitive Parent", 8, "Harsh inner voice"),
    ]


def test_action_plan_keeps_alternatives_separate():
    content = formatter.format_action_plan(
        ActionPlanRecord(new_behaviors=["Rehearse twice", "Ask for feedback"], alternative_responses=["Breathe"]),
        EmotionSet(anxiety=3),
    )
    plan = extract_section(content, ACTION_PLAN)
    assert plan.new_behaviors == ["Rehearse twice", "Ask for feedback"]
    assert plan.alternative_responses == ["Breathe"]


def test_comparison_recomputes_direction_and_change():
    content = (
        "📊 **Emotional Changes During Session**:\n\n"
        "↗️ **Fear**: 7 → 3 (increased by 9)\n"
        "↘️ **Anxiety**: 2 → 6 (decreased by 1)\n\n"
        "**Total Changes**: 2 emotions showed significant shifts during this CBT session."
    )
    comparison = extract_emotion_comparison(content)
    assert [(c.emotion, c.initial, c.final, c.direction, c.change) for c in comparison.changes] == [
        ("fear", 7, 3, "decreased", 4),
        ("anxiety", 2, 6, "increased", 4),
    ]


def test_generated_comparison_block_parses():
    block = formatter.generate_emotion_comparison(EmotionSet(anxiety=8, joy=1), EmotionSet(anxiety=4, joy=5))
    comparison = extract_emotion_comparison(block)
    assert [(c.emotion, c.direction, c.change) for c in comparison.changes] == [
        ("joy", "increased", 4),
        ("anxiety", "decreased", 4),
    ]


def test_stable_emotions_produce_stability_message():
    block = formatter.generate_emotion_comparison(EmotionSet(fear=3), EmotionSet(fear=3))
    assert "Emotional Stability" in block
    assert extract_emotion_comparison(block) is None
