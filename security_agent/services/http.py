"""Shared HTTP helpers for the analyzer and gateway apps."""

from typing import AsyncIterator, Awaitable, Callable, Optional, Union

from starlette.requests import Request
from starlette.responses import JSONResponse, StreamingResponse

from ..models import AnalysisRequest, StreamEvent
from ..relay import SSE_HEADERS, SSE_MEDIA_TYPE, encode_event


async def read_analysis_request(request: Request) -> Union[AnalysisRequest, JSONResponse]:
    """Decode the JSON body, or build a 400 response describing the problem."""
    try:
        body = await request.json()
        return AnalysisRequest.from_dict(body)
    except ValueError as e:
        return JSONResponse({"error": f"Invalid analysis request: {e}"}, status_code=400)


def sse_response(
    events: AsyncIterator[StreamEvent],
    on_close: Optional[Callable[[], Awaitable[None]]] = None,
) -> StreamingResponse:
    """
    Stream events to the client as SSE, writing each one as it is produced.

    If the client disconnects the server cancels the body iterator; the
    event producer is closed and no terminal event is written.
    """

    async def body() -> AsyncIterator[str]:
        try:
            async for event in events:
                yield encode_event(event)
        finally:
            aclose = getattr(events, "aclose", None)
            if aclose is not None:
                await aclose()
            if on_close is not None:
                await on_close()

    return StreamingResponse(body(), media_type=SSE_MEDIA_TYPE, headers=SSE_HEADERS)
