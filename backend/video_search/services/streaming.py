"""
Single-producer text streams with explicit terminal states.

A stream is a sequence of "token" events ending in exactly one "done"
event. An upstream failure emits one "error" event right before "done".
The consumer may stop iterating at any point without side effects.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator, AsyncIterator, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class StreamEvent:
    type: str  # "token", "error" or "done"
    content: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_sse(self) -> str:
        """Serialize as one Server-Sent Events data line."""
        payload: Dict[str, Any] = {"type": self.type}
        if self.type != "done":
            payload["content"] = self.content
        payload.update(self.extra)
        return f"data: {json.dumps(payload)}\n\n"


async def guarded_stream(
    tokens: AsyncIterator[str],
    stage: str,
    correlation_id: str = "-",
    error_message: Optional[str] = None
) -> AsyncGenerator[StreamEvent, None]:
    """Wrap a raw token iterator into token/error/done events.

    Nothing is buffered or cached: a failure mid-stream leaves only the
    tokens already delivered to the consumer.
    """
    try:
        async for token in tokens:
            yield StreamEvent(type="token", content=token)
    except Exception as e:
        logger.error(f"[{correlation_id}] {stage} stream failed: {e}")
        yield StreamEvent(type="error", content=error_message or f"Failed to generate {stage}")
        yield StreamEvent(type="done", extra={"status": "error"})
        return
    finally:
        aclose = getattr(tokens, "aclose", None)
        if aclose is not None:
            await aclose()

    yield StreamEvent(type="done", extra={"status": "ok"})


async def collect_text(events: AsyncIterator[StreamEvent]) -> Optional[str]:
    """Drain a stream into one string; None if it ended with an error."""
    parts = []
    try:
        async for event in events:
            if event.type == "token":
                parts.append(event.content)
            elif event.type == "error":
                return None
    finally:
        aclose = getattr(events, "aclose", None)
        if aclose is not None:
            await aclose()
    return "".join(parts)
