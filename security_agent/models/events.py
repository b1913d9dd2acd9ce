"""Stream event models for the server-sent event protocol."""

from dataclasses import dataclass
from typing import Optional, Union, Any

from .finding import SecurityFinding
from .analysis import format_duration


@dataclass(frozen=True)
class StartedEvent:
    """Emitted once, before the first unit begins."""
    file_count: int
    name: str = "started"

    def payload(self) -> dict[str, Any]:
        return {"fileCount": self.file_count}


@dataclass(frozen=True)
class FindingEvent:
    """One finding, in production order."""
    finding: SecurityFinding
    name: str = "finding"

    def payload(self) -> dict[str, Any]:
        return self.finding.to_dict()


@dataclass(frozen=True)
class CompleteEvent:
    """Terminal event on success; error_message lists files that failed along the way."""
    total_findings: int
    duration: float  # seconds
    error_message: Optional[str] = None
    name: str = "complete"

    def payload(self) -> dict[str, Any]:
        data = {
            "totalFindings": self.total_findings,
            "duration": format_duration(self.duration),
            "success": True,
        }
        if self.error_message is not None:
            data["errorMessage"] = self.error_message
        return data


@dataclass(frozen=True)
class ErrorEvent:
    """Terminal event replacing `complete` on unrecoverable failure."""
    message: str
    name: str = "error"

    def payload(self) -> dict[str, Any]:
        return {"success": False, "errorMessage": self.message}


StreamEvent = Union[StartedEvent, FindingEvent, CompleteEvent, ErrorEvent]

TERMINAL_EVENTS = ("complete", "error")
