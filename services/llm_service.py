"""Thin wrapper around LLM providers (OpenAI / Azure / local-compatible)."""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from typing import Awaitable, Callable, TypeVar

from openai import AsyncAzureOpenAI, AsyncOpenAI
from tenacity import AsyncRetrying, before_sleep_log, retry_if_exception_type, stop_after_attempt, wait_exponential

from config import settings
from schemas.completion import CompletionRequest

logger = logging.getLogger("ceviri.llm")

T = TypeVar("T")
Sleep = Callable[[float], Awaitable[None]]


def _build_client() -> AsyncOpenAI:
    """Return the async client for the configured provider."""
    provider = settings.llm_provider.lower()

    if provider == "azure":
        client = AsyncAzureOpenAI(
            azure_endpoint=settings.azure_openai_endpoint,
            api_key=settings.azure_openai_api_key,
            api_version="2024-12-01-preview",
        )
    elif provider == "local":
        client = AsyncOpenAI(
            base_url=settings.local_llm_base_url,
            api_key="not-needed",
        )
    else:  # default: openai
        client = AsyncOpenAI(api_key=settings.openai_api_key)

    return client


@lru_cache(maxsize=1)
def get_client() -> AsyncOpenAI:
    """Build the provider client on first use and reuse it afterwards."""
    return _build_client()


def default_model() -> str:
    """Model (or Azure deployment) name for the configured provider."""
    provider = settings.llm_provider.lower()
    if provider == "azure":
        return settings.azure_openai_deployment
    if provider == "local":
        return settings.local_llm_model
    return settings.openai_model


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    *,
    sleep: Sleep = asyncio.sleep,
    logger: logging.Logger | None = None,
) -> T:
    """Await ``operation()`` until it succeeds or ``max_attempts`` is spent.

    After the *n*-th failed attempt (zero-based) the call sleeps
    ``initial_delay * 2 ** n`` seconds; there is no sleep after the final
    attempt.  When every attempt fails the last exception is re-raised.

    Parameters
    ----------
    operation : callable
        Zero-argument coroutine function; invoked once per attempt.
    max_attempts : int
        Attempt budget, at least 1.
    initial_delay : float
        Delay in seconds before the second attempt.
    sleep : callable, optional
        Awaitable sleep; swap it out to avoid real waits.
    logger : logging.Logger, optional
        Receives one WARNING per scheduled retry.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=initial_delay, exp_base=2),
        retry=retry_if_exception_type(Exception),
        sleep=sleep,
        before_sleep=before_sleep_log(logger or logging.getLogger("ceviri.llm"), logging.WARNING),
        reraise=True,
    )
    return await retrying(operation)


async def chat_completion(request: CompletionRequest) -> str:
    """Send a chat-completion request and return the first choice's text.

    A reply without choices or without content yields ``""``; callers treat
    that as an unusable answer rather than a transport failure.
    """
    client = get_client()
    try:
        response = await client.chat.completions.create(**request.to_api_kwargs())
    except Exception as exc:
        logger.exception("LLM call failed: %s", exc)
        raise

    if not response.choices:
        logger.warning("LLM returned no choices.")
        return ""
    message = response.choices[0].message
    return (message.content if message is not None else None) or ""
