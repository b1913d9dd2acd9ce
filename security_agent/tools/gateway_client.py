"""HTTP client for the gateway API, used by the CLI."""

from typing import AsyncIterator, List, Optional

import httpx

from ..models import AnalysisRequest, AnalysisResult, StreamEvent
from ..relay import iter_sse_events


class GatewayError(Exception):
    """The gateway returned an error or could not be reached."""


class GatewayClient:
    """Client for the gateway's analyze and health endpoints."""

    def __init__(self, base_url: str, timeout: float = 300.0, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def __aenter__(self) -> "GatewayClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def analyze(self, request: AnalysisRequest) -> List[AnalysisResult]:
        """Run a buffered analysis."""
        try:
            response = await self.client.post(f"{self.base_url}/api/analyze", json=request.to_dict())
        except httpx.HTTPError as e:
            raise GatewayError(f"Gateway unavailable: {e}") from e

        if not response.is_success:
            raise GatewayError(f"API request failed with status {response.status_code}: {response.text}")
        try:
            body = response.json()
            if not isinstance(body, list):
                raise ValueError("expected a JSON list of results")
            return [AnalysisResult.from_dict(item) for item in body]
        except (ValueError, TypeError) as e:
            raise GatewayError(f"Invalid gateway response: {e}") from e

    async def analyze_stream(self, request: AnalysisRequest) -> AsyncIterator[StreamEvent]:
        """Run a streamed analysis, yielding events as they arrive."""
        try:
            async with self.client.stream(
                "POST", f"{self.base_url}/api/analyze/stream", json=request.to_dict()
            ) as response:
                if not response.is_success:
                    await response.aread()
                    raise GatewayError(
                        f"API request failed with status {response.status_code}: {response.text}"
                    )
                async for event in iter_sse_events(response.aiter_lines()):
                    yield event
        except httpx.HTTPError as e:
            raise GatewayError(f"Gateway unavailable: {e}") from e

    async def health(self) -> dict:
        try:
            response = await self.client.get(f"{self.base_url}/api/health")
        except httpx.HTTPError as e:
            raise GatewayError(f"Gateway unavailable: {e}") from e
        if not response.is_success:
            raise GatewayError(f"Health check failed with status {response.status_code}")
        return response.json()
