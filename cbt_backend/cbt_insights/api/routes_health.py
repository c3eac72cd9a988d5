from fastapi import APIRouter
from cbt_insights.core.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    s = get_settings()
    return {
        "status": "ok",
        "app": s.APP_NAME,
        "env": s.ENV,
        "diary_threshold": s.CBT_DIARY_THRESHOLD,
        "limits": {
            "max_messages": s.MAX_MESSAGES,
            "max_message_chars": s.MAX_MESSAGE_CHARS,
        },
    }
