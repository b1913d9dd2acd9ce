"""Streaming relay: SSE encoding and forward-as-you-go event relays."""

from .sse import (
    SSE_HEADERS,
    SSE_MEDIA_TYPE,
    encode_event,
    decode_event,
    iter_sse_blocks,
    iter_sse_events,
)
from .stream import relay_findings, relay_events

__all__ = [
    "SSE_HEADERS",
    "SSE_MEDIA_TYPE",
    "encode_event",
    "decode_event",
    "iter_sse_blocks",
    "iter_sse_events",
    "relay_findings",
    "relay_events",
]
