"""Gateway orchestrator: fetch contents, call agents, assemble results."""

from typing import AsyncIterator, Dict, List, Optional

import httpx

from ..config import GatewayConfig, DEFAULT_GATEWAY_CONFIG
from ..models import (
    AnalysisRequest,
    AnalysisResult,
    StreamEvent,
    ErrorEvent,
)
from ..relay import iter_sse_events, relay_events
from ..utils import get_logger
from .file_client import FileServiceClient, UpstreamError


SECURITY_ANALYZE_PATH = "/api/security/analyze"
SECURITY_STREAM_PATH = "/api/security/analyze/stream"


class AgentOrchestrator:
    """
    Orchestrates analysis requests for the gateway.

    Features:
    - Resolves missing file contents through the file service
    - Calls the Security Agent, buffered or streamed
    - Converts upstream failures into failed results or error events
    """

    def __init__(
        self,
        config: Optional[GatewayConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Gateway configuration (service URLs, timeouts)
            client: HTTP client to use; one is created (and owned) if omitted
        """
        self.config = config or DEFAULT_GATEWAY_CONFIG
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(self.config.request_timeout))
        self.files = FileServiceClient(self.config.endpoints.file_service_url, self.client)
        self.logger = get_logger(__name__)

    async def __aenter__(self) -> "AgentOrchestrator":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    @property
    def security_agent_url(self) -> str:
        return self.config.endpoints.security_agent_url.rstrip("/")

    async def enrich_request(self, request: AnalysisRequest) -> AnalysisRequest:
        """
        Fill in file contents from the file service when none were supplied.

        Paths are treated as file ids. Unknown ids are skipped.

        Raises:
            UpstreamError: If the file service cannot be reached
        """
        if request.file_contents or not request.file_paths:
            return request

        self.logger.info("No file contents provided, fetching from file service")
        contents: Dict[str, str] = {}
        for file_id in request.file_paths:
            content = await self.files.get_file(file_id)
            if content is not None:
                contents[file_id] = content

        self.logger.info(f"Retrieved {len(contents)}/{len(request.file_paths)} files from file service")
        return request.with_contents(contents)

    async def analyze(self, request: AnalysisRequest) -> List[AnalysisResult]:
        """
        Run all agents on a request.

        Returns:
            One AnalysisResult per agent. Failures are reported in the
            result, never raised.
        """
        self.logger.info(f"Starting analysis orchestration for {len(request.file_paths)} files")

        try:
            request = await self.enrich_request(request)
        except UpstreamError as e:
            self.logger.error(str(e))
            return [AnalysisResult.failed(str(e))]

        results = [await self.call_security_agent(request)]

        self.logger.info(f"Analysis orchestration complete. Total agents: {len(results)}")
        return results

    async def call_security_agent(self, request: AnalysisRequest) -> AnalysisResult:
        """POST the request to the Security Agent and decode its result."""
        url = f"{self.security_agent_url}{SECURITY_ANALYZE_PATH}"
        self.logger.info(f"Calling Security Agent at {url}")

        try:
            response = await self.client.post(url, json=request.to_dict())
        except httpx.HTTPError as e:
            self.logger.error(f"Error calling Security Agent: {e}")
            return AnalysisResult.failed(f"Security Agent unavailable: {e}")

        if not response.is_success:
            self.logger.error(f"Security Agent returned {response.status_code}: {response.text}")
            return AnalysisResult.failed(f"Security Agent returned {response.status_code}")

        try:
            result = AnalysisResult.from_dict(response.json())
        except (ValueError, TypeError) as e:
            self.logger.error(f"Failed to decode Security Agent response: {e}")
            return AnalysisResult.failed("Failed to deserialize Security Agent response")

        self.logger.info(
            f"Security Agent returned {len(result.findings)} findings in {result.duration:.1f}s"
        )
        return result

    async def analyze_stream(self, request: AnalysisRequest) -> AsyncIterator[StreamEvent]:
        """
        Stream a request's events from the Security Agent.

        Each event is yielded as soon as it is read from the agent. Exactly one
        terminal event ends the stream unless the consumer stops first.
        """
        try:
            request = await self.enrich_request(request)
        except UpstreamError as e:
            self.logger.error(str(e))
            yield ErrorEvent(message=str(e))
            return

        url = f"{self.security_agent_url}{SECURITY_STREAM_PATH}"
        self.logger.info(f"Streaming from Security Agent at {url}")

        try:
            async with self.client.stream("POST", url, json=request.to_dict()) as response:
                if not response.is_success:
                    await response.aread()
                    self.logger.error(f"Security Agent returned {response.status_code}: {response.text}")
                    yield ErrorEvent(message=f"Security Agent returned {response.status_code}")
                    return

                upstream = iter_sse_events(response.aiter_lines())
                async for event in relay_events(upstream):
                    yield event
        except httpx.HTTPError as e:
            self.logger.error(f"Error streaming from Security Agent: {e}")
            yield ErrorEvent(message=f"Security Agent unavailable: {e}")
