"""Stream events emitted over the lifetime of one chat request."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from core.models import Source


@dataclass(frozen=True)
class Sources:
    """Citation list for the initial retrieval. Precedes every token."""

    sources: list[Source] = field(default_factory=list)

    event: ClassVar[str] = "sources"
    terminal: ClassVar[bool] = False

    def payload(self) -> Any:
        return [s.model_dump() for s in self.sources]


@dataclass(frozen=True)
class Token:
    text: str

    event: ClassVar[str] = "token"
    terminal: ClassVar[bool] = False

    def payload(self) -> Any:
        return {"token": self.text}


@dataclass(frozen=True)
class ToolContext:
    """Outcome of a mid-answer search_context tool call."""

    found: bool
    sources: list[Source] = field(default_factory=list)

    event: ClassVar[str] = "context"
    terminal: ClassVar[bool] = False

    def payload(self) -> Any:
        return {"found": self.found, "sources": [s.model_dump() for s in self.sources]}


@dataclass(frozen=True)
class End:
    event: ClassVar[str] = "end"
    terminal: ClassVar[bool] = True

    def payload(self) -> Any:
        return {}


@dataclass(frozen=True)
class Error:
    message: str

    event: ClassVar[str] = "error"
    terminal: ClassVar[bool] = True

    def payload(self) -> Any:
        return {"error": self.message}


StreamEvent = Union[Sources, Token, ToolContext, End, Error]
