from fastapi import APIRouter, HTTPException

from cbt_insights.api.schemas import DetectResponse, DiaryRequest, SummaryResponse, TranscriptRequest
from cbt_insights.core.config import get_settings
from cbt_insights.exceptions import TranscriptTooLargeError
from cbt_insights.services.report_context import ensure_transcript_limits
from cbt_insights.therapy.diary import parse_cbt_from_markdown
from cbt_insights.therapy.models import CBTStructuredAssessment, ChatMessage, ParsedCBTData
from cbt_insights.therapy.parsers import has_cbt_data, parse_all_cbt_data
from cbt_insights.therapy.signature import is_cbt_diary_message
from cbt_insights.therapy.summary import generate_cbt_summary

router = APIRouter(prefix="/cbt", tags=["cbt"])


def checked_messages(req: TranscriptRequest) -> list[ChatMessage]:
    try:
        return ensure_transcript_limits([m.model_dump() for m in req.messages])
    except TranscriptTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e)) from e


@router.post("/detect", response_model=DetectResponse)
def detect(req: TranscriptRequest):
    messages = checked_messages(req)
    threshold = get_settings().CBT_DIARY_THRESHOLD
    diary = sum(1 for m in messages if m.role == "user" and is_cbt_diary_message(m.content, threshold))
    return DetectResponse(has_cbt_data=has_cbt_data(messages), diary_messages=diary)


@router.post("/parse", response_model=CBTStructuredAssessment)
def parse(req: TranscriptRequest):
    return parse_all_cbt_data(checked_messages(req))


@router.post("/summary", response_model=SummaryResponse)
def summary(req: TranscriptRequest):
    messages = checked_messages(req)
    if not has_cbt_data(messages):
        return SummaryResponse(has_cbt_data=False, summary="")
    return SummaryResponse(has_cbt_data=True, summary=generate_cbt_summary(parse_all_cbt_data(messages)))


@router.post("/diary", response_model=ParsedCBTData)
def diary(req: DiaryRequest):
    limit = get_settings().MAX_MESSAGE_CHARS
    if len(req.content) > limit:
        raise HTTPException(status_code=413, detail=f"Diary has {len(req.content)} characters; the limit is {limit}")
    return parse_cbt_from_markdown(req.content)
