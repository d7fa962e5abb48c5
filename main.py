"""Çeviri — news translation & summary service.

FastAPI application entry-point.
Designed to run as an internal service consumed by the Node.js Express backend.
"""

from __future__ import annotations

import logging
import secrets
import sys
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from engine import translator
from services.llm_service import default_model
from schemas.request import SummarizeRequest, TranslateBatchRequest, TranslateRequest
from schemas.response import ErrorResponse, SummaryWithSentiment, TranslateBatchResponse, TranslateResponse

VERSION = "0.1.0"

# ── Logging ────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s | %(name)-30s | %(levelname)-7s | %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger("ceviri")


# ── Internal-token auth dependency ─────────────────────────────────────

async def verify_internal_token(
    x_internal_token: str | None = Header(default=None),
) -> None:
    """Reject requests that don't carry the shared internal token.

    Skipped when ``INTERNAL_TOKEN`` is not configured (dev mode).
    """
    expected = settings.internal_token
    if not expected:
        return  # no token configured → open access (dev only)
    if not x_internal_token or not secrets.compare_digest(x_internal_token, expected):
        raise HTTPException(status_code=401, detail="Invalid or missing internal token.")


# ── Lifespan ───────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: ARG001
    logger.info(
        "Çeviri starting — provider=%s model=%s auth=%s",
        settings.llm_provider,
        default_model(),
        "enabled" if settings.internal_token else "disabled (dev)",
    )
    yield
    logger.info("Çeviri shutting down.")


# ── App ────────────────────────────────────────────────────────────────

app = FastAPI(
    title="Çeviri",
    description="Turkish/English news summaries with sentiment — internal service for the Node.js backend.",
    version=VERSION,
    lifespan=lifespan,
)

_origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_ERRORS = {401: {"model": ErrorResponse}, 422: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


# ── Routes ─────────────────────────────────────────────────────────────

@app.get("/health")
async def health():
    return {"status": "ok", "engine": "ceviri", "version": VERSION}


@app.post(
    "/summarize",
    response_model=SummaryWithSentiment,
    responses=_ERRORS,
    summary="Summarize a news item with sentiment",
    description="Returns a short Turkish (default) or English summary and a positive/negative/neutral label. "
    "Falls back to the title when the model is unavailable.",
    dependencies=[Depends(verify_internal_token)],
)
async def summarize(payload: SummarizeRequest) -> SummaryWithSentiment:
    try:
        if payload.language == "en":
            return await translator.summarize_in_english(payload.title, payload.body)
        return await translator.summarize_and_translate(payload.title, payload.body)
    except Exception as exc:
        logger.exception("Summarize failed")
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@app.post(
    "/translate",
    response_model=TranslateResponse,
    responses=_ERRORS,
    summary="Translate (tr) or clean (en) a piece of text",
    dependencies=[Depends(verify_internal_token)],
)
async def translate(payload: TranslateRequest) -> TranslateResponse:
    try:
        translation = await translator.translate_text(payload.text, payload.target_lang)
    except Exception as exc:
        logger.exception("Translate failed")
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return TranslateResponse(translation=translation)


@app.post(
    "/translate/batch",
    response_model=TranslateBatchResponse,
    responses=_ERRORS,
    summary="Translate several texts to Turkish concurrently",
    dependencies=[Depends(verify_internal_token)],
)
async def translate_batch(payload: TranslateBatchRequest) -> TranslateBatchResponse:
    translations = await translator.translate_batch(payload.texts)
    return TranslateBatchResponse(translations=translations)


# ── Dev runner ─────────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        reload=True,
    )
