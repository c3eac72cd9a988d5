import pytest

from cbt_insights.therapy.models import EmotionChange, EmotionSet
from cbt_insights.therapy.normalizers import (
    build_emotion_change,
    build_emotion_comparison,
    build_emotion_set,
    clamp_rating,
    conversation_messages,
    user_text,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (7, 7),
        (11, 10),
        (-3, 0),
        (2.5, 3),
        (7.49, 7),
        ("6", 6),
        (" 9 ", 9),
        (150, 10),
    ],
)
def test_clamp_rating_numbers(value, expected):
    assert clamp_rating(value) == expected


@pytest.mark.parametrize("value", [None, True, False, "abc", float("nan"), float("inf"), [3], {"rating": 3}])
def test_clamp_rating_non_numbers_use_default(value):
    assert clamp_rating(value) == 0
    assert clamp_rating(value, default=5) == 5


def test_emotion_set_folds_unknown_names_into_other():
    emotions = build_emotion_set([("Fear", 4), ("Happiness", 3), ("Pride", 5), ("Mystery", 12)])
    assert emotions.fear == 4
    assert emotions.joy == 3
    # last unknown name wins, rating clamped
    assert emotions.other == "Mystery"
    assert emotions.other_intensity == 10


def test_emotion_change_direction_is_derived_from_numbers():
    up = build_emotion_change("fear", 2, 9)
    down = build_emotion_change("fear", "9", 2.2)
    assert (up.direction, up.change) == ("increased", 7)
    assert (down.direction, down.change) == ("decreased", 7)


def test_emotion_change_rejects_inconsistent_records():
    with pytest.raises(ValueError):
        EmotionChange(emotion="fear", initial=2, final=9, direction="decreased", change=7)
    with pytest.raises(ValueError):
        EmotionChange(emotion="fear", initial=2, final=9, direction="increased", change=3)


def test_emotion_comparison_invariant_holds_for_every_change():
    initial = EmotionSet(fear=8, anger=1, sadness=5, joy=0, anxiety=10, shame=3, guilt=3)
    final = EmotionSet(fear=2, anger=1, sadness=9, joy=6, anxiety=10, shame=0, guilt=4)
    changes = build_emotion_comparison(initial, final)

    assert [c.emotion for c in changes] == ["fear", "sadness", "joy", "shame", "guilt"]
    for c in changes:
        assert c.direction == ("increased" if c.final > c.initial else "decreased")
        assert c.change == abs(c.final - c.initial)
        assert c.change >= 1


def test_conversation_messages_keeps_user_and_assistant_only():
    messages = [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
        {"role": "tool", "content": "x"},
        {"content": "no role"},
    ]
    assert [m.role for m in conversation_messages(messages)] == ["user", "assistant"]
    assert conversation_messages("not a list") == []
    assert conversation_messages(None) == []


def test_user_text_joins_user_turns_with_spaces():
    messages = [
        {"role": "user", "content": "one"},
        {"role": "assistant", "content": "skip"},
        {"role": "user", "content": "two"},
    ]
    assert user_text(messages) == "one two"
