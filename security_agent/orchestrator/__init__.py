"""Gateway-side orchestration.

This module provides:
- AgentOrchestrator: Resolves file contents and calls the Security Agent
- FileServiceClient: Fetches uploaded file contents by id
"""

from .orchestrator import AgentOrchestrator
from .file_client import FileServiceClient, UpstreamError

__all__ = [
    "AgentOrchestrator",
    "FileServiceClient",
    "UpstreamError",
]
