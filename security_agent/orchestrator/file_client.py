"""Client for the file storage service."""

from typing import Optional
from urllib.parse import quote

import httpx

from ..utils import get_logger


class UpstreamError(Exception):
    """An upstream service could not be reached."""


class FileServiceClient:
    """
    Fetches uploaded file contents by id.

    GET {base_url}/api/files/{id} -> {"fileId": ..., "content": ...}
    """

    def __init__(self, base_url: str, client: httpx.AsyncClient):
        # Remove trailing slash to avoid a double slash in URLs
        self.base_url = base_url.rstrip("/")
        self.client = client
        self.logger = get_logger(__name__)

    async def get_file(self, file_id: str) -> Optional[str]:
        """
        Fetch one file's content.

        Returns:
            The content, or None if the file is unknown or the response is unusable

        Raises:
            UpstreamError: If the file service cannot be reached
        """
        url = f"{self.base_url}/api/files/{quote(file_id, safe='')}"
        self.logger.info(f"Fetching file content from {url}")

        try:
            response = await self.client.get(url)
        except httpx.RequestError as e:
            raise UpstreamError(f"File service unavailable: {e}") from e

        if response.status_code == 404:
            self.logger.warning(f"File {file_id} not found in file service")
            return None
        if not response.is_success:
            self.logger.warning(f"Failed to fetch file {file_id} from file service: {response.status_code}")
            return None

        try:
            data = response.json()
        except ValueError:
            self.logger.warning(f"File service returned invalid JSON for {file_id}")
            return None

        content = data.get("content") if isinstance(data, dict) else None
        if not isinstance(content, str):
            self.logger.warning(f"File service returned no content for {file_id}")
            return None

        self.logger.info(f"Retrieved content for file {file_id}")
        return content
