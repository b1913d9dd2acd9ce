"""Forward-as-you-go relays for finding streams.

Both hops (analyzer -> gateway, gateway -> client) emit each item as soon as
it is produced and end with exactly one terminal event, unless the consumer
goes away first, in which case no terminal event is sent.
"""

import asyncio
import time
from typing import AsyncIterator, Callable, Optional, Tuple

from ..models import (
    StreamEvent,
    StartedEvent,
    FindingEvent,
    CompleteEvent,
    ErrorEvent,
    SecurityFinding,
    TERMINAL_EVENTS,
)
from ..utils import get_logger


logger = get_logger(__name__)


async def relay_findings(
    findings: AsyncIterator[SecurityFinding],
    file_count: int,
    cancel: Optional[asyncio.Event] = None,
    summary: Optional[Callable[[], Tuple[bool, Optional[str]]]] = None,
) -> AsyncIterator[StreamEvent]:
    """
    Wrap a finding producer as a stream of events.

    Args:
        findings: Producer, usually SecurityAnalyzer.analyze_stream
        file_count: Reported in the started event
        cancel: Set when the consumer stops early
        summary: Called once the producer is exhausted; returns (success,
            error_message). An unsuccessful run ends with error instead of complete

    Yields:
        started, one finding event per finding, then complete or error
    """
    start = time.monotonic()
    count = 0
    finished = False

    try:
        yield StartedEvent(file_count=file_count)

        try:
            async for finding in findings:
                count += 1
                yield FindingEvent(finding=finding)
        except Exception as e:
            logger.exception("Finding production failed")
            finished = True
            yield ErrorEvent(message=str(e) or type(e).__name__)
            return

        success, error_message = summary() if summary is not None else (True, None)
        finished = True
        if not success:
            logger.error(f"Analysis failed: {error_message}")
            yield ErrorEvent(message=error_message or "Analysis failed")
            return

        yield CompleteEvent(
            total_findings=count,
            duration=time.monotonic() - start,
            error_message=error_message,
        )
    finally:
        if not finished:
            logger.info(f"Stream closed by consumer after {count} findings")
            if cancel is not None:
                cancel.set()
        aclose = getattr(findings, "aclose", None)
        if aclose is not None:
            await aclose()


async def relay_events(
    upstream: AsyncIterator[StreamEvent],
    cancel: Optional[asyncio.Event] = None,
) -> AsyncIterator[StreamEvent]:
    """
    Pass events through from an upstream stream as each one arrives.

    Stops after the first terminal event. A failing upstream, or one that
    ends without a terminal event, produces a single error event.
    """
    terminated = False

    try:
        try:
            async for event in upstream:
                if cancel is not None and cancel.is_set():
                    return
                yield event
                if event.name in TERMINAL_EVENTS:
                    terminated = True
                    return
        except Exception as e:
            logger.error(f"Upstream stream failed: {e}")
            terminated = True
            yield ErrorEvent(message=f"Security Agent stream failed: {e}")
            return

        terminated = True
        yield ErrorEvent(message="Security Agent stream ended without a completion event")
    finally:
        if not terminated and cancel is not None:
            cancel.set()
        aclose = getattr(upstream, "aclose", None)
        if aclose is not None:
            await aclose()
