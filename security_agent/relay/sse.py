"""Server-sent event encoding and decoding."""

import json
from typing import AsyncIterator, List, Optional, Tuple, Any

from ..models import (
    StreamEvent,
    StartedEvent,
    FindingEvent,
    CompleteEvent,
    ErrorEvent,
    SecurityFinding,
    parse_duration,
)
from ..utils import get_logger


logger = get_logger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}
SSE_MEDIA_TYPE = "text/event-stream"


def encode_event(event: StreamEvent) -> str:
    """Encode one event as an SSE block."""
    data = json.dumps(event.payload(), separators=(",", ":"))
    return f"event: {event.name}\ndata: {data}\n\n"


def decode_event(name: str, data: dict[str, Any]) -> Optional[StreamEvent]:
    """Build a typed event from an SSE block. Unknown names give None."""
    if name == "started":
        return StartedEvent(file_count=int(data.get("fileCount", 0)))
    if name == "finding":
        return FindingEvent(finding=SecurityFinding.from_dict(data))
    if name == "complete":
        return CompleteEvent(
            total_findings=int(data.get("totalFindings", 0)),
            duration=parse_duration(data.get("duration")),
            error_message=data.get("errorMessage"),
        )
    if name == "error":
        return ErrorEvent(message=data.get("errorMessage") or "Unknown error")
    return None


async def iter_sse_blocks(lines: AsyncIterator[str]) -> AsyncIterator[Tuple[str, str]]:
    """
    Group SSE lines into (event name, data) blocks.

    Yields each block as soon as its terminating blank line is read.
    """
    name = "message"
    data: List[str] = []

    async for line in lines:
        line = line.rstrip("\r\n")
        if not line:
            if data:
                yield name, "\n".join(data)
            name, data = "message", []
            continue
        if line.startswith(":"):
            continue  # comment / keep-alive

        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if field == "event":
            name = value
        elif field == "data":
            data.append(value)

    if data:
        yield name, "\n".join(data)


async def iter_sse_events(lines: AsyncIterator[str]) -> AsyncIterator[StreamEvent]:
    """Decode SSE lines into typed stream events, in arrival order."""
    async for name, raw in iter_sse_blocks(lines):
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Skipping SSE block '{name}' with invalid JSON data")
            continue
        if not isinstance(payload, dict):
            logger.warning(f"Skipping SSE block '{name}' with non-object data")
            continue

        try:
            event = decode_event(name, payload)
        except (ValueError, TypeError) as e:
            logger.warning(f"Skipping malformed SSE event '{name}': {e}")
            continue
        if event is None:
            logger.debug(f"Ignoring unknown SSE event '{name}'")
            continue
        yield event
