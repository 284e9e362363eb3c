"""Server-Sent Events session: frames stream events for one response."""

from __future__ import annotations

import enum
import json
import logging
from typing import Any, Iterable, Iterator

from core.errors import SessionStateError
from core.events import Error, StreamEvent

logger = logging.getLogger(__name__)

MEDIA_TYPE = "text/event-stream"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def encode_frame(event: str, data: Any) -> str:
    """Serialize one named SSE frame: label line, JSON data line, blank line."""
    return f"event: {event}\ndata: {json.dumps(data, ensure_ascii=False)}\n\n"


class SessionState(enum.Enum):
    IDLE = "idle"
    OPEN = "open"
    STREAMING = "streaming"
    CLOSED = "closed"


class SSESession:
    """Owns the event-stream side of one HTTP response.

    IDLE -> OPEN (open) -> STREAMING (emit) -> CLOSED (terminal event or close).
    Any out-of-order call raises SessionStateError.
    """

    def __init__(self, request_id: str = ""):
        self.request_id = request_id
        self.state = SessionState.IDLE
        self.frames_sent = 0

    def open(self) -> dict[str, str]:
        """Switch into event-stream mode. Returns the response headers."""
        if self.state is not SessionState.IDLE:
            raise SessionStateError(f"Session already {self.state.value}")
        self.state = SessionState.OPEN
        return {"Content-Type": MEDIA_TYPE, **SSE_HEADERS}

    def emit(self, event: StreamEvent) -> str:
        """Encode an event as a frame; a terminal event closes the session."""
        if self.state is SessionState.IDLE:
            raise SessionStateError("Session must be opened before emitting")
        if self.state is SessionState.CLOSED:
            raise SessionStateError(f"Cannot emit '{event.event}' on a closed session")

        frame = encode_frame(event.event, event.payload())
        self.state = SessionState.STREAMING
        self.frames_sent += 1
        if event.terminal:
            self.close()
        return frame

    def close(self) -> None:
        if self.state is not SessionState.CLOSED:
            self.state = SessionState.CLOSED
            logger.debug("Session %s closed after %d frames", self.request_id, self.frames_sent)

    @property
    def closed(self) -> bool:
        return self.state is SessionState.CLOSED

    def run(self, events: Iterable[StreamEvent]) -> Iterator[str]:
        """Frame a producer's events, always ending with one terminal frame.

        Producer failures become an error frame. Frames after the terminal
        one are dropped. If the consumer stops early (client disconnect)
        the producer is closed too.
        """
        iterator = iter(events)
        try:
            for event in iterator:
                yield self.emit(event)
                if self.closed:
                    return
            logger.warning("Producer ended without a terminal event")
            yield self.emit(Error(message="Stream ended unexpectedly"))
        except SessionStateError:
            raise
        except Exception as e:
            logger.exception("Stream failed: %s", e)
            if not self.closed:
                yield self.emit(Error(message="Internal server error"))
        finally:
            close = getattr(iterator, "close", None)
            if callable(close):
                close()
            self.close()
