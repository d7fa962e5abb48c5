"""Shapes exchanged with the chat-completion API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class CompletionRequest(BaseModel):
    """A single chat-completion call.  ``None`` fields are left to the API defaults."""

    model: str
    messages: list[ChatMessage]
    temperature: float | None = None
    max_tokens: int | None = None

    def to_api_kwargs(self) -> dict:
        return self.model_dump(exclude_none=True)
