from fastapi import APIRouter

from cbt_insights.api.routes_cbt import checked_messages
from cbt_insights.api.schemas import ContentTierResponse, TranscriptRequest
from cbt_insights.services.report_context import ReportContext, build_report_context
from cbt_insights.therapy.content_tier import (
    analyze_content_tier,
    get_content_tier_explanation,
    meets_analysis_threshold,
)

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("/content-tier", response_model=ContentTierResponse)
def content_tier(req: TranscriptRequest):
    analysis = analyze_content_tier(checked_messages(req))
    return ContentTierResponse(
        analysis=analysis,
        explanation=get_content_tier_explanation(analysis),
        meets_threshold=meets_analysis_threshold(analysis),
    )


@router.post("/context", response_model=ReportContext)
def report_context(req: TranscriptRequest):
    return build_report_context(checked_messages(req))
