"""Response schemas for the Çeviri API."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class SummaryWithSentiment(BaseModel):
    """Canonical output of the summarizers."""

    summary: str = Field(description="Short summary in the requested language, or the title as fallback.")
    sentiment: Sentiment = Field(default=Sentiment.NEUTRAL)


class TranslateResponse(BaseModel):
    translation: str


class TranslateBatchResponse(BaseModel):
    translations: list[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str
    detail: str | None = None
