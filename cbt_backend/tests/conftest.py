import pytest

from cbt_insights.therapy import formatter
from cbt_insights.therapy.models import (
    ActionPlanRecord,
    ChallengeQuestionRecord,
    CoreBeliefRecord,
    EmotionSet,
    SchemaModeRecord,
    SituationRecord,
)

DIARY_MARKDOWN = """
# 🌟 CBT Diary Entry

**Date:** March 5, 2024

## 📍 Situation Context
Feeling pressure to finish multiple projects.

## 💭 Emotional Landscape
- Fear: 4/10
- Joy: 2/10
- Pride: 5/10

### Updated Feelings
- Fear: 2/10
- Joy: 6/10
- Mystery: 7/10

## 🧠 Automatic Thoughts
- "I will fail" *(8/10)*
- "Nobody supports me" *(6/10)*

## 🔄 Rational Thoughts
- "I have succeeded before" *(7/10)*

## 🎯 Core Schema Analysis
**Core Belief:** I must be perfect
*Credibility: 6/10*
**Confirming behaviors:** Overworking
**Avoidant behaviors:** Procrastination
**Overriding behaviors:** Asking for help

### Active Schema Modes
- [x] Vulnerable Child *(Intensity 6/10)*
- [ ] Angry Child *(Intensity 2/10)*
- [x] Detached Protector *(Intensity 5/10)*

## 🔍 SCHEMA REFLECTION OF THERAPEUTIC INSIGHTS
### 🌱 Personal Self-Assessment
"Learning to accept support."
### 🧭 Guided Reflection Insights
**💡 childhood Pattern:** *Question:* "When do you feel this?" *Insight:* "During deadlines."
**🛡️ coping Pattern:** *Question:* "How do you react?" *Insight:* "I withdraw."
**⭐ custom Pattern:** *Question:* "What else?" *Insight:* "I reach out."

## Challenge Questions
| Question | Answer |
|----------|--------|
| Q1? | A1 |
| Question | Answer |

### Additional Questions
| Question | Answer |
| Additional | Response |
|  |  |

### New Behaviors
Practice delegating tasks and celebrating small wins.

**Credibility of Original Thoughts:** 4/10
"""

CARD_MESSAGE = (
    '<!-- CBT_SUMMARY_CARD:{"situation":"Feeling overwhelmed at work","date":"2024-01-15",'
    '"initialEmotions":[{"emotion":"anxiety","rating":8}]} -->\n<!-- END_CBT_SUMMARY_CARD -->'
)

INITIAL = EmotionSet(anxiety=8, fear=6)
FINAL = EmotionSet(anxiety=4, fear=6, joy=3)


@pytest.fixture
def diary_markdown():
    return DIARY_MARKDOWN


@pytest.fixture
def card_message():
    return {"role": "assistant", "content": CARD_MESSAGE}


@pytest.fixture
def legacy_messages():
    """A full legacy-format session, one section per assistant turn."""
    sections = [
        formatter.format_situation(SituationRecord(date="2024-02-01", description="Presentation at work")),
        formatter.format_emotions(INITIAL),
        formatter.format_thoughts(["I will embarrass myself", "Everyone will judge me"]),
        formatter.format_core_belief(CoreBeliefRecord(belief="I am not good enough", credibility=7)),
        formatter.format_challenges(
            [
                ChallengeQuestionRecord(question="What evidence supports this?", answer="One bad meeting."),
                ChallengeQuestionRecord(question="What would a friend say?", answer="You prepared well."),
            ]
        ),
        formatter.format_rational_thoughts(["I have presented before"]),
        formatter.format_schema_modes([SchemaModeRecord(name="Vulnerable Child", intensity=6, description="Scared")]),
        formatter.format_action_plan(
            ActionPlanRecord(new_behaviors=["Rehearse twice", "Ask for feedback"], alternative_responses=["Breathe"]),
            FINAL,
        ),
        formatter.format_emotions(FINAL),
        formatter.generate_emotion_comparison(INITIAL, FINAL),
    ]
    messages = [{"role": "user", "content": "I want to work through my presentation anxiety."}]
    messages.extend({"role": "assistant", "content": s} for s in sections)
    return messages
