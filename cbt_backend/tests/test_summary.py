from cbt_insights.therapy.diary import parse_cbt_from_markdown
from cbt_insights.therapy.models import CBTStructuredAssessment, CoreBeliefRecord, EmotionsRecord
from cbt_insights.therapy.parsers import parse_all_cbt_data
from cbt_insights.therapy.summary import generate_cbt_summary, parsed_to_assessment


def test_summary_of_legacy_session(legacy_messages):
    summary = generate_cbt_summary(parse_all_cbt_data(legacy_messages))
    assert summary.split("\n\n") == [
        "**Situation**: Presentation at work (2024-02-01)",
        "**Initial Emotions**: fear: 6/10, anxiety: 8/10",
        "**Automatic Thoughts**: 2 identified",
        '**Core Belief**: "I am not good enough" (7/10 credibility)',
        "**Active Schema Modes**: 1 modes identified",
        "**Emotional Progress**: 2 emotions showed significant changes",
    ]


def test_summary_skips_zero_ratings_and_missing_sections():
    assessment = CBTStructuredAssessment(
        emotions=EmotionsRecord(initial={"anxiety": 5, "fear": 0}),
        core_beliefs=CoreBeliefRecord(belief="I am unlovable", credibility=9),
    )
    assert generate_cbt_summary(assessment) == (
        '**Initial Emotions**: anxiety: 5/10\n\n**Core Belief**: "I am unlovable" (9/10 credibility)'
    )


def test_empty_assessment_gives_empty_summary():
    assert generate_cbt_summary(CBTStructuredAssessment()) == ""


def test_diary_maps_onto_assessment(diary_markdown):
    assessment = parsed_to_assessment(parse_cbt_from_markdown(diary_markdown))

    assert assessment.situation.date == "2024-03-05"
    assert assessment.emotions.initial == {"fear": 4, "joy": 2, "other": 5}
    assert assessment.emotions.final == {"fear": 2, "joy": 6, "other": 7}
    assert assessment.emotions.custom_emotion == "Pride"
    assert assessment.thoughts.automatic_thoughts == ["I will fail", "Nobody supports me"]
    assert assessment.core_beliefs == CoreBeliefRecord(belief="I must be perfect", credibility=6)
    assert [(q.question, q.answer) for q in assessment.challenge_questions] == [("Q1?", "A1"), ("Additional", "Response")]
    assert assessment.rational_thoughts.thoughts == ["I have succeeded before"]
    assert [m.name for m in assessment.schema_modes] == ["Vulnerable Child", "Detached Protector"]
    [behaviors] = assessment.action_plan.new_behaviors
    assert behaviors.startswith("Practice delegating tasks and celebrating small wins.")
    assert [(c.emotion, c.direction, c.change) for c in assessment.emotion_comparison.changes] == [
        ("fear", "decreased", 2),
        ("joy", "increased", 4),
    ]


def test_blank_diary_maps_to_empty_assessment():
    assessment = parsed_to_assessment(parse_cbt_from_markdown(""))
    assert assessment.is_empty()
    assert generate_cbt_summary(assessment) == ""
