"""Request schemas for the Çeviri API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

Language = Literal["tr", "en"]


class SummarizeRequest(BaseModel):
    """A news item sent by the Node.js aggregator."""

    title: str = Field(
        ...,
        min_length=1,
        description="Headline of the news item; also the fallback summary.",
    )
    body: str | None = Field(
        default=None,
        max_length=100_000,
        description="Article body or feed description; may contain HTML.",
    )
    language: Language = Field(
        default="tr",
        description="Target language of the summary.",
    )


class TranslateRequest(BaseModel):
    text: str = Field(..., max_length=100_000, description="Text or HTML to translate.")
    target_lang: Language = Field(
        default="tr",
        alias="targetLang",
        description="'tr' translates to Turkish; 'en' only cleans the text.",
    )

    model_config = {"populate_by_name": True}


class TranslateBatchRequest(BaseModel):
    texts: list[str] = Field(..., max_length=100, description="Texts to translate to Turkish.")
