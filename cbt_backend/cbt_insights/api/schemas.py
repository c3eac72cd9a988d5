from pydantic import BaseModel, Field

from cbt_insights.therapy.models import ContentTierAnalysis


class ChatMessageIn(BaseModel):
    content: str = ""
    role: str = Field(default="", description="user | assistant | system")


class TranscriptRequest(BaseModel):
    messages: list[ChatMessageIn] = Field(default_factory=list)


class DiaryRequest(BaseModel):
    content: str = Field(description="Markdown diary export")


class DetectResponse(BaseModel):
    has_cbt_data: bool
    diary_messages: int = Field(description="User messages whose signature clears CBT_DIARY_THRESHOLD")


class SummaryResponse(BaseModel):
    has_cbt_data: bool
    summary: str


class ContentTierResponse(BaseModel):
    analysis: ContentTierAnalysis
    explanation: str
    meets_threshold: bool
