import pytest

from cbt_insights.therapy.signature import (
    CBTMessageSignature,
    analyze_cbt_message,
    extract_cbt_date,
    get_cbt_identification_reason,
    has_schema_reflection,
    is_cbt_diary_message,
)


def test_diary_export_is_recognised(diary_markdown):
    signature = analyze_cbt_message(diary_markdown)

    assert signature.has_cbt_header
    assert signature.has_cbt_sections
    assert signature.has_emotion_ratings
    assert signature.has_automatic_thoughts
    assert signature.has_schema_analysis
    assert signature.has_reflection
    assert signature.has_user_provided_ratings
    assert signature.schema_reflection_depth == "minimal"
    assert signature.confidence == 1.0
    assert is_cbt_diary_message(diary_markdown)


@pytest.mark.parametrize("text", ["", "Hello there, how was your weekend?", "Pick up milk and eggs."])
def test_plain_text_scores_zero(text):
    signature = analyze_cbt_message(text)
    assert signature.confidence == 0.0
    assert signature.schema_reflection_depth == "none"
    assert not is_cbt_diary_message(text)
    assert get_cbt_identification_reason(signature) == "No CBT indicators found"


def test_threshold_is_configurable():
    text = "- Anxiety: 7/10\n- Fear: 5/10"
    signature = analyze_cbt_message(text)
    # ratings alone: emotion ratings plus user-provided ratings
    assert signature.confidence == pytest.approx(0.35)
    assert not is_cbt_diary_message(text)
    assert is_cbt_diary_message(text, threshold=0.3)


def test_confidence_never_exceeds_one(diary_markdown):
    padded = diary_markdown + "\nI feel anxious 8/10. On a scale of 1 to 10 it is 9. inner critic voice"
    assert analyze_cbt_message(padded).confidence == 1.0


def test_identification_reason_lists_user_data_first():
    signature = CBTMessageSignature(
        has_cbt_header=True,
        has_user_provided_ratings=True,
        has_schema_reflection_content=True,
        schema_reflection_depth="moderate",
    )
    assert get_cbt_identification_reason(signature) == (
        "Contains user-provided ratings (premium data), schema reflection (moderate depth) and CBT diary header"
    )
    assert get_cbt_identification_reason(CBTMessageSignature(has_emotion_ratings=True)) == (
        "Contains emotion intensity ratings"
    )


def test_extract_cbt_date(diary_markdown):
    assert extract_cbt_date(diary_markdown) == "March 5, 2024"
    assert extract_cbt_date("Date: 2024-01-15\nstuff") == "2024-01-15"
    assert extract_cbt_date("no date here") is None


def test_has_schema_reflection(diary_markdown):
    assert has_schema_reflection(diary_markdown)
    assert has_schema_reflection("My inner critic has a loud voice")
    assert not has_schema_reflection("Went to the shop.")
