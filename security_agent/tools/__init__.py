"""Tools for collecting files and talking to the gateway."""

from .git_diff import (
    DEFAULT_EXTENSIONS,
    GitDiffResult,
    is_git_repository,
    get_changed_files,
    validate_git_ref,
    filter_analyzable_files,
)
from .github_tool import GitHubTool, format_findings_summary
from .gateway_client import GatewayClient, GatewayError

__all__ = [
    "DEFAULT_EXTENSIONS",
    "GitDiffResult",
    "is_git_repository",
    "get_changed_files",
    "validate_git_ref",
    "filter_analyzable_files",
    "GitHubTool",
    "format_findings_summary",
    "GatewayClient",
    "GatewayError",
]
