from __future__ import annotations

from typing import Optional

from cbt_insights.therapy.models import (
    ActionPlanRecord,
    CBTStructuredAssessment,
    ChallengeQuestionRecord,
    CoreBeliefRecord,
    EmotionComparisonRecord,
    EmotionSet,
    EmotionsRecord,
    ParsedCBTData,
    RationalThoughtsRecord,
    SchemaModeRecord,
    SituationRecord,
    ThoughtsRecord,
)
from cbt_insights.therapy.normalizers import build_emotion_comparison


def generate_cbt_summary(assessment: CBTStructuredAssessment) -> str:
    """
    Short markdown digest of an assessment, one bold-labelled line per present
    section. Sections that were not found contribute nothing; an empty
    assessment gives "".
    """
    lines: list[str] = []

    if assessment.situation:
        lines.append(f"**Situation**: {assessment.situation.description} ({assessment.situation.date})")

    if assessment.emotions is not None:
        rated = ", ".join(f"{name}: {value}/10" for name, value in assessment.emotions.initial.items() if value > 0)
        lines.append(f"**Initial Emotions**: {rated}")

    if assessment.thoughts and assessment.thoughts.automatic_thoughts:
        lines.append(f"**Automatic Thoughts**: {len(assessment.thoughts.automatic_thoughts)} identified")

    if assessment.core_beliefs:
        lines.append(
            f'**Core Belief**: "{assessment.core_beliefs.belief}" ({assessment.core_beliefs.credibility}/10 credibility)'
        )

    if assessment.schema_modes:
        lines.append(f"**Active Schema Modes**: {len(assessment.schema_modes)} modes identified")

    if assessment.emotion_comparison and assessment.emotion_comparison.changes:
        lines.append(
            f"**Emotional Progress**: {len(assessment.emotion_comparison.changes)} emotions showed significant changes"
        )

    return "\n\n".join(lines)


def _rated(emotions: EmotionSet) -> dict[str, int]:
    rated = {name: value for name, value in emotions.core_values().items() if value > 0}
    if emotions.other and emotions.other_intensity > 0:
        rated["other"] = emotions.other_intensity
    return rated


def _answered(rows: list[ChallengeQuestionRecord]) -> list[ChallengeQuestionRecord]:
    return [row for row in rows if row.question.strip() or row.answer.strip()]


def parsed_to_assessment(parsed: ParsedCBTData) -> CBTStructuredAssessment:
    """
    Map a reconstructed diary form onto the partial assessment shape.

    Zero ratings and blank text become absent sections, only selected schema
    modes are carried, and the emotion comparison is computed from the
    initial and final emotion sets.
    """
    form = parsed.form_data
    fields: dict[str, object] = {}

    if form.situation.strip():
        fields["situation"] = SituationRecord(date=form.date, description=form.situation)

    initial = _rated(form.initial_emotions)
    if initial:
        final: Optional[dict[str, int]] = _rated(form.final_emotions) or None
        fields["emotions"] = EmotionsRecord(
            initial=initial,
            final=final,
            custom_emotion=form.initial_emotions.other or None,
        )

    thoughts = [t.thought for t in form.automatic_thoughts if t.thought.strip()]
    if thoughts:
        fields["thoughts"] = ThoughtsRecord(automatic_thoughts=thoughts)

    if form.core_belief_text.strip():
        fields["core_beliefs"] = CoreBeliefRecord(belief=form.core_belief_text, credibility=form.core_belief_credibility)

    questions = _answered(form.challenge_questions) + _answered(form.additional_questions)
    if questions:
        fields["challenge_questions"] = questions

    rational = [t.thought for t in form.rational_thoughts if t.thought.strip()]
    if rational:
        fields["rational_thoughts"] = RationalThoughtsRecord(thoughts=rational)

    modes = [
        SchemaModeRecord(name=m.name, intensity=m.intensity, description=m.description)
        for m in form.schema_modes
        if m.selected
    ]
    if modes:
        fields["schema_modes"] = modes

    if form.new_behaviors.strip():
        fields["action_plan"] = ActionPlanRecord(new_behaviors=[form.new_behaviors.strip()])

    if form.final_emotions.has_any_rating():
        changes = build_emotion_comparison(form.initial_emotions, form.final_emotions)
        if changes:
            fields["emotion_comparison"] = EmotionComparisonRecord(changes=changes)

    return CBTStructuredAssessment(**fields)
