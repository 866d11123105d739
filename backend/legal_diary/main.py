"""
FastAPI application entry point
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from legal_diary.api.v1.api import api_router
from legal_diary.core.config import settings
from legal_diary.core.logger import logger
from legal_diary.core.security import TokenCipher
from legal_diary.db.database import SessionLocal, init_db
from legal_diary.middleware.correlation import CorrelationMiddleware
from legal_diary.services.activity_log import ActivityLogger
from legal_diary.services.google_calendar_provider import GoogleCalendarProvider
from legal_diary.services.judicial_calendar import default_calendar
from legal_diary.utils.exceptions import LegalDiaryError


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Process-wide collaborators; handlers reach them through api/v1/deps.py
    if settings.DEBUG:
        init_db()

    app.state.judicial_calendar = default_calendar(strict=settings.CALENDAR_STRICT_YEARS)
    app.state.activity_logger = ActivityLogger(SessionLocal)
    app.state.token_cipher = TokenCipher.from_settings() if settings.TOKEN_ENCRYPTION_KEY else None
    provider = GoogleCalendarProvider.from_settings()
    app.state.google_provider = provider

    if not settings.google_enabled:
        logger.warning("Google Calendar sync disabled: OAuth client not configured")
    elif app.state.token_cipher is None:
        logger.warning("Google Calendar sync disabled: TOKEN_ENCRYPTION_KEY not set")

    logger.info("%s started", settings.APP_NAME)
    try:
        yield
    finally:
        provider.close()
        logger.info("%s stopped", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan,
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(api_router, prefix="/api/v1")

# ── Correlation ID middleware (must be added before CORS) ─────────────────────
app.add_middleware(CorrelationMiddleware)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Correlation-ID"],
)


@app.exception_handler(LegalDiaryError)
async def legal_diary_error_handler(request: Request, exc: LegalDiaryError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    else:
        logger.info("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/")
def read_root():
    return {"message": "Legal Diary API is running", "version": "1.0.0", "docs": "/docs"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}
