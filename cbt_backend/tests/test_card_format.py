import logging
from datetime import date

from cbt_insights.therapy.card_format import (
    CARD_END,
    encode_summary_card,
    extract_cbt_data_from_card_format,
)
from cbt_insights.therapy.models import (
    ActionPlanRecord,
    CBTStructuredAssessment,
    CoreBeliefRecord,
    EmotionsRecord,
    SituationRecord,
)


def _card(payload: str) -> str:
    return f"Here is your summary\n<!-- CBT_SUMMARY_CARD:{payload} -->\n<!-- END_CBT_SUMMARY_CARD -->"


def test_situation_and_date():
    result = extract_cbt_data_from_card_format(
        _card('{"situation":"Feeling overwhelmed at work","date":"2024-01-15"}')
    )
    assert result.situation == SituationRecord(date="2024-01-15", description="Feeling overwhelmed at work")


def test_situation_date_defaults_to_unknown():
    result = extract_cbt_data_from_card_format(_card('{"situation":"test"}'))
    assert result.situation.date == "Unknown"


def test_initial_emotions():
    result = extract_cbt_data_from_card_format(_card('{"initialEmotions":[{"emotion":"anxiety","rating":8}]}'))
    assert result.emotions.initial == {"anxiety": 8}
    assert result.emotions.final is None
    assert result.situation is None


def test_emotion_ratings_are_clamped_and_bad_entries_dropped():
    payload = (
        '{"initialEmotions":[{"emotion":"anxiety","rating":14},{"emotion":"fear","rating":-2},'
        '{"emotion":"shame","rating":"high"},{"rating":4},{"emotion":"guilt","rating":6.5}],'
        '"finalEmotions":[{"emotion":"anxiety","rating":3}]}'
    )
    result = extract_cbt_data_from_card_format(_card(payload))
    assert result.emotions.initial == {"anxiety": 10, "fear": 0, "guilt": 7}
    assert result.emotions.final == {"anxiety": 3}


def test_final_emotions_need_initial_emotions():
    result = extract_cbt_data_from_card_format(_card('{"finalEmotions":[{"emotion":"anxiety","rating":3}]}'))
    assert result.emotions is None


def test_full_card_mapping():
    payload = (
        '{"situation":"Team review","date":"2024-03-01",'
        '"automaticThoughts":[{"thought":"I will fail"},{"nope":1}],'
        '"coreBelief":{"belief":"I am inadequate","credibility":7},'
        '"rationalThoughts":[{"thought":"I prepared"}],'
        '"schemaModes":[{"name":"Vulnerable Child","intensity":6},{"name":"Healthy Adult"}],'
        '"newBehaviors":["Ask for help"],'
        '"alternativeResponses":[{"response":"Pause"},"Breathe",{"other":1}]}'
    )
    result = extract_cbt_data_from_card_format(_card(payload))

    assert result.thoughts.automatic_thoughts == ["I will fail"]
    assert result.core_beliefs == CoreBeliefRecord(belief="I am inadequate", credibility=7)
    assert result.rational_thoughts.thoughts == ["I prepared"]
    assert [(m.name, m.intensity, m.description) for m in result.schema_modes] == [
        ("Vulnerable Child", 6, "Vulnerable Child"),
        ("Healthy Adult", 0, "Healthy Adult"),
    ]
    assert result.action_plan == ActionPlanRecord(new_behaviors=["Ask for help"], alternative_responses=["Pause", "Breathe"])
    assert result.challenge_questions is None
    assert result.emotion_comparison is None


def test_core_belief_defaults():
    result = extract_cbt_data_from_card_format(_card('{"coreBelief":{}}'))
    assert result.core_beliefs == CoreBeliefRecord(belief="No belief", credibility=0)


def test_malformed_json_returns_none(caplog):
    with caplog.at_level(logging.WARNING):
        assert extract_cbt_data_from_card_format(_card("{invalid json}")) is None
    assert "Failed to parse card format" in caplog.text


def test_non_object_payloads_return_none():
    assert extract_cbt_data_from_card_format(_card("[1, 2, 3]")) is None
    assert extract_cbt_data_from_card_format(_card('"situation"')) is None
    assert extract_cbt_data_from_card_format("no card here") is None
    assert extract_cbt_data_from_card_format("") is None


def test_encoded_card_reads_back():
    assessment = CBTStructuredAssessment(
        situation=SituationRecord(date="2024-05-02", description="Said -->no<-- to extra shifts"),
        emotions=EmotionsRecord(initial={"anxiety": 6, "guilt": 4}, final={"anxiety": 3}),
        core_beliefs=CoreBeliefRecord(belief="I must please everyone", credibility=8),
        action_plan=ActionPlanRecord(new_behaviors=["Say no kindly"], alternative_responses=["Take a breath"]),
    )
    encoded = encode_summary_card(assessment, today=date(2024, 5, 2))

    assert encoded.endswith(CARD_END)
    assert "-->no" not in encoded
    assert extract_cbt_data_from_card_format(encoded) == assessment
