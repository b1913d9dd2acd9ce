"""Starlette ASGI application for the Security Agent (analyzer) service."""

import asyncio
import time
from typing import Optional

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from ..config import AnalyzerConfig, DEFAULT_ANALYZER_CONFIG
from ..models import AGENT_TYPE_SECURITY, AnalysisResult, SecurityRulesConfig
from ..pipeline import SecurityAnalyzer
from ..pipeline.session import SessionFactory
from ..relay import relay_findings
from ..utils import get_logger
from .http import read_analysis_request, sse_response


logger = get_logger(__name__)


def create_analyzer_app(
    rules_config: SecurityRulesConfig,
    config: Optional[AnalyzerConfig] = None,
    session_factory: Optional[SessionFactory] = None,
) -> Starlette:
    """Build the analyzer application.

    Args:
        rules_config: Rule configuration, loaded once and shared by all requests
        config: Batching and filtering settings
        session_factory: Backend session factory (Claude Agent SDK by default)
    """
    config = config or DEFAULT_ANALYZER_CONFIG

    def new_analyzer() -> SecurityAnalyzer:
        # Each request owns its analyzer and backend sessions
        return SecurityAnalyzer(rules_config, config=config, session_factory=session_factory)

    async def analyze(request: Request) -> Response:
        parsed = await read_analysis_request(request)
        if isinstance(parsed, Response):
            return parsed

        analyzer = new_analyzer()
        start = time.monotonic()
        try:
            findings = await analyzer.analyze(parsed)
        except Exception as e:
            logger.exception("Security analysis failed")
            return JSONResponse(AnalysisResult.failed(str(e)).to_dict())

        success, error_message = analyzer.summary()
        if error_message:
            logger.warning(error_message)

        result = AnalysisResult(
            agent_type=AGENT_TYPE_SECURITY,
            findings=findings,
            duration=time.monotonic() - start,
            success=success,
            error_message=error_message,
        )
        return JSONResponse(result.to_dict())

    async def analyze_stream(request: Request) -> Response:
        parsed = await read_analysis_request(request)
        if isinstance(parsed, Response):
            return parsed

        cancel = asyncio.Event()
        analyzer = new_analyzer()
        events = relay_findings(
            analyzer.analyze_stream(parsed, cancel),
            file_count=len(parsed.file_paths),
            cancel=cancel,
            summary=analyzer.summary,
        )
        return sse_response(events)

    async def health(request: Request) -> JSONResponse:
        return JSONResponse({"status": "healthy", "service": "security-agent"})

    routes = [
        Route("/api/security/analyze", analyze, methods=["POST"]),
        Route("/api/security/analyze/stream", analyze_stream, methods=["POST"]),
        Route("/api/health", health, methods=["GET"]),
    ]

    return Starlette(routes=routes)
