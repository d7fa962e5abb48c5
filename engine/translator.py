"""Translation & summary orchestration around the chat-completion API.

Every public entry point degrades to a title- or input-derived result instead
of raising, so a news item is never dropped because the model misbehaved.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from functools import lru_cache
from typing import Any, Awaitable, Callable, Sequence

from config import settings
from engine.leakage import scrub_english_leakage
from engine.sanitizer import sanitize
from prompts.system_prompt import ENGLISH_SUMMARY_PROMPT, TRANSLATION_PROMPT, TURKISH_SUMMARY_PROMPT
from schemas.completion import ChatMessage, CompletionRequest
from schemas.response import Sentiment, SummaryWithSentiment
from services.llm_service import Sleep, chat_completion, default_model, retry_with_backoff

Complete = Callable[[CompletionRequest], Awaitable[str]]

UNAVAILABLE_SUFFIX = " (Translation unavailable - check API key)"
_MIN_SUMMARY_LENGTH = 10
_CODE_FENCE_RE = re.compile(r"```json\n?|```\n?")


def coerce_sentiment(raw: Any) -> Sentiment:
    """Map the model's sentiment value onto ``Sentiment``; anything else is neutral."""
    if isinstance(raw, str):
        value = raw.strip().lower()
        for s in Sentiment:
            if s.value == value:
                return s
    return Sentiment.NEUTRAL


def parse_json_reply(raw: str) -> dict[str, Any]:
    """Strip markdown code fences and parse *raw* as JSON.

    Raises ``json.JSONDecodeError`` when the reply is not JSON at all.  Valid
    JSON that is not an object (array, string, null) yields ``{}`` so every
    field falls back to its default.
    """
    cleaned = _CODE_FENCE_RE.sub("", raw).strip()
    data = json.loads(cleaned)
    if not isinstance(data, dict):
        return {}
    return data


class Translator:
    """Turns raw news items into clean Turkish/English text via an LLM.

    Parameters
    ----------
    complete : callable, optional
        ``async (CompletionRequest) -> str``; defaults to ``chat_completion``.
    logger : logging.Logger, optional
        Destination for diagnostics.
    sleep : callable, optional
        Awaitable used between retries; defaults to ``asyncio.sleep``.
    model, max_attempts, initial_delay, max_content_chars : optional
        Override the corresponding settings.
    """

    def __init__(
        self,
        complete: Complete | None = None,
        *,
        logger: logging.Logger | None = None,
        sleep: Sleep | None = None,
        model: str | None = None,
        max_attempts: int | None = None,
        initial_delay: float | None = None,
        max_content_chars: int | None = None,
    ) -> None:
        self._complete = complete
        self._logger = logger or logging.getLogger("ceviri.engine.translator")
        self._sleep = sleep or asyncio.sleep
        self.model = model or default_model()
        self.max_attempts = max_attempts if max_attempts is not None else settings.retry_attempts
        self.initial_delay = initial_delay if initial_delay is not None else settings.retry_initial_delay
        self.max_content_chars = max_content_chars or settings.max_content_chars

    # ── Plain translation ──────────────────────────────────────────────

    async def translate_to_turkish(self, text: str) -> str:
        """Translate *text* to Turkish; falls back to the cleaned input."""
        if not text or not text.strip():
            return text

        clean_text = sanitize(text)
        if not clean_text.strip():
            return text

        try:
            request = CompletionRequest(
                model=self.model,
                messages=[
                    ChatMessage(role="system", content=TRANSLATION_PROMPT),
                    ChatMessage(role="user", content=clean_text),
                ],
            )
            translation = await self._call_model(request)
        except Exception:
            self._logger.exception("Translation error; returning cleaned source text.")
            return clean_text

        # The model may echo markup or source links back.
        return sanitize(translation or clean_text) or clean_text

    async def translate_text(self, text: str, target_lang: str) -> str:
        if target_lang == "en":
            return sanitize(text)
        if target_lang == "tr":
            return await self.translate_to_turkish(text)
        raise ValueError(f"Unsupported target language: {target_lang!r}")

    async def translate_batch(self, texts: Sequence[str]) -> list[str]:
        """Translate every element concurrently, preserving input order."""
        try:
            return list(await asyncio.gather(*(self.translate_to_turkish(t) for t in texts)))
        except Exception:
            self._logger.exception("Batch translation error; returning inputs unchanged.")
            return list(texts)

    # ── Summaries ──────────────────────────────────────────────────────

    async def summarize_and_translate(self, title: str, body: str | None = None) -> SummaryWithSentiment:
        """Return a 2-3 sentence Turkish summary of the item plus its sentiment."""
        content = self._build_content(title, body)
        if not content.strip():
            return SummaryWithSentiment(summary=title, sentiment=Sentiment.NEUTRAL)

        try:
            raw = await self._request_summary(TURKISH_SUMMARY_PROMPT, content)
            return self._to_result(raw, title, scrub=True)
        except Exception:
            self._logger.exception("Summarization error; showing original title: %s", title)
            return SummaryWithSentiment(summary=f"{title}{UNAVAILABLE_SUFFIX}", sentiment=Sentiment.NEUTRAL)

    async def summarize_in_english(self, title: str, body: str | None = None) -> SummaryWithSentiment:
        """Return a 2-3 sentence English summary of the item plus its sentiment."""
        content = self._build_content(title, body)
        if not content.strip():
            return SummaryWithSentiment(summary=title, sentiment=Sentiment.NEUTRAL)

        try:
            raw = await self._request_summary(ENGLISH_SUMMARY_PROMPT, content)
            return self._to_result(raw, title, scrub=False)
        except Exception:
            self._logger.exception("Summarization error; falling back to title: %s", title)
            return SummaryWithSentiment(summary=title, sentiment=Sentiment.NEUTRAL)

    # ── Internals ──────────────────────────────────────────────────────

    async def _call_model(self, request: CompletionRequest) -> str:
        complete = self._complete or chat_completion
        return await complete(request)

    def _build_content(self, title: str, body: str | None) -> str:
        content = f"{title}\n\n{body}" if body else title
        if len(content) > self.max_content_chars:
            content = content[: self.max_content_chars] + "..."
        return content

    async def _request_summary(self, system_prompt: str, content: str) -> str:
        request = CompletionRequest(
            model=self.model,
            messages=[
                ChatMessage(role="system", content=system_prompt),
                ChatMessage(role="user", content=content),
            ],
            temperature=settings.summary_temperature,
            max_tokens=settings.summary_max_tokens,
        )

        async def attempt() -> str:
            self._logger.debug("Requesting summary from %s", self.model)
            return await self._call_model(request)

        raw = await retry_with_backoff(
            attempt,
            self.max_attempts,
            self.initial_delay,
            sleep=self._sleep,
            logger=self._logger,
        )
        self._logger.debug("Model reply: %s", raw[:500])
        return raw

    def _to_result(self, raw: str, title: str, *, scrub: bool) -> SummaryWithSentiment:
        try:
            data = parse_json_reply(raw)
        except json.JSONDecodeError:
            if not raw or len(raw) <= _MIN_SUMMARY_LENGTH:
                raise
            self._logger.warning("JSON parsing failed; using raw reply as summary.")
            summary = scrub_english_leakage(raw) if scrub else raw
            if len(summary) <= _MIN_SUMMARY_LENGTH:
                summary = title
            return SummaryWithSentiment(summary=summary, sentiment=Sentiment.NEUTRAL)

        summary = data.get("summary")
        if not isinstance(summary, str) or not summary:
            summary = title
        if scrub:
            summary = scrub_english_leakage(summary)

        return SummaryWithSentiment(
            summary=summary if len(summary) > _MIN_SUMMARY_LENGTH else title,
            sentiment=coerce_sentiment(data.get("sentiment")),
        )


@lru_cache(maxsize=1)
def get_translator() -> Translator:
    """Process-wide translator built from settings."""
    return Translator()


# ── Module-level entry points ─────────────────────────────────────────

async def translate_to_turkish(text: str) -> str:
    return await get_translator().translate_to_turkish(text)


async def translate_text(text: str, target_lang: str) -> str:
    return await get_translator().translate_text(text, target_lang)


async def translate_batch(texts: Sequence[str]) -> list[str]:
    return await get_translator().translate_batch(texts)


async def summarize_and_translate(title: str, body: str | None = None) -> SummaryWithSentiment:
    return await get_translator().summarize_and_translate(title, body)


async def summarize_in_english(title: str, body: str | None = None) -> SummaryWithSentiment:
    return await get_translator().summarize_in_english(title, body)
