import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cbt_insights.api.routes_cbt import router as cbt_router
from cbt_insights.api.routes_health import router as health_router
from cbt_insights.api.routes_reports import router as reports_router
from cbt_insights.core.config import get_settings
from cbt_insights.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings)
    logger.info("Starting %s (env=%s)", settings.APP_NAME, settings.ENV)

    yield

    logger.info("Shutting down %s", settings.APP_NAME)


app = FastAPI(title="CBT Insights Backend", lifespan=lifespan)

# Vite dev server origins by default
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(cbt_router)
app.include_router(reports_router)
