"""API request models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """One turn of the client's conversation."""

    content: str
    role: Literal["user", "assistant", "system"] = "user"
    parts: list[Any] = Field(default_factory=list)


class ChatRequest(BaseModel):
    """Request body for the chat endpoint."""

    id: str
    messages: list[ChatMessage] = Field(..., min_length=1)

    def latest_message(self) -> str:
        """Text of the last message, stripped; empty when there is nothing to ask."""
        return self.messages[-1].content.strip()
