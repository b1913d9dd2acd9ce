"""Starlette ASGI application for the gateway service."""

from datetime import datetime, timezone
from typing import Optional

import httpx
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from ..config import GatewayConfig, DEFAULT_GATEWAY_CONFIG
from ..orchestrator import AgentOrchestrator
from ..utils import get_logger
from .http import read_analysis_request, sse_response


logger = get_logger(__name__)


def create_gateway_app(
    config: Optional[GatewayConfig] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Starlette:
    """Build the gateway application.

    Args:
        config: Service endpoints and timeouts
        client: Shared HTTP client for upstream calls. When omitted each
            request uses its own client, closed when the request finishes.
    """
    config = config or DEFAULT_GATEWAY_CONFIG

    def new_orchestrator() -> AgentOrchestrator:
        return AgentOrchestrator(config=config, client=client)

    async def analyze(request: Request) -> Response:
        parsed = await read_analysis_request(request)
        if isinstance(parsed, Response):
            return parsed

        logger.info(f"Analysis request for {len(parsed.file_paths)} files")
        async with new_orchestrator() as orchestrator:
            results = await orchestrator.analyze(parsed)
        return JSONResponse([r.to_dict() for r in results])

    async def analyze_stream(request: Request) -> Response:
        parsed = await read_analysis_request(request)
        if isinstance(parsed, Response):
            return parsed

        logger.info(f"Streaming analysis request for {len(parsed.file_paths)} files")
        orchestrator = new_orchestrator()
        return sse_response(orchestrator.analyze_stream(parsed), on_close=orchestrator.aclose)

    async def health(request: Request) -> JSONResponse:
        return JSONResponse({
            "status": "healthy",
            "service": "gateway",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    routes = [
        Route("/api/analyze", analyze, methods=["POST"]),
        Route("/api/analyze/stream", analyze_stream, methods=["POST"]),
        Route("/api/health", health, methods=["GET"]),
    ]

    return Starlette(routes=routes)
