"""Data models for analysis requests, units and results."""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Any

from .finding import SecurityFinding


AGENT_TYPE_SECURITY = "Security"

_DURATION_RE = re.compile(
    r"^P(?:(?P<days>\d+(?:\.\d+)?)D)?"
    r"(?:T(?:(?P<hours>\d+(?:\.\d+)?)H)?(?:(?P<minutes>\d+(?:\.\d+)?)M)?"
    r"(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$"
)


def format_duration(seconds: float) -> str:
    """Format elapsed seconds as an ISO-8601 duration, e.g. PT1.25S."""
    seconds = max(0.0, seconds)
    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(int(minutes), 60)

    parts = "PT"
    if hours:
        parts += f"{hours}H"
    if minutes:
        parts += f"{minutes}M"
    if secs or parts == "PT":
        parts += f"{secs:.3f}".rstrip("0").rstrip(".") + "S"
    return parts


def parse_duration(value: Any) -> float:
    """Parse an ISO-8601 duration (or a plain number) into seconds."""
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return 0.0

    match = _DURATION_RE.match(value.strip())
    if not match or value.strip() in ("P", "PT"):
        return 0.0

    parts = {k: float(v) for k, v in match.groupdict().items() if v}
    return (
        parts.get("days", 0.0) * 86400
        + parts.get("hours", 0.0) * 3600
        + parts.get("minutes", 0.0) * 60
        + parts.get("seconds", 0.0)
    )


@dataclass(frozen=True)
class AnalysisRequest:
    """A request to analyze a set of files.

    file_contents need not cover every path; uncovered paths are skipped.
    """
    file_paths: Tuple[str, ...]
    file_contents: Dict[str, str] = field(default_factory=dict)
    repository_context: Optional[str] = None

    def __post_init__(self):
        # Accept any sequence for convenience, store a tuple
        object.__setattr__(self, "file_paths", tuple(self.file_paths))

    def with_contents(self, file_contents: Dict[str, str]) -> "AnalysisRequest":
        """Copy of this request with a different contents mapping."""
        return AnalysisRequest(
            file_paths=self.file_paths,
            file_contents=dict(file_contents),
            repository_context=self.repository_context,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalysisRequest":
        """Build a request from its camelCase JSON body.

        Raises:
            ValueError: If the body does not have the expected shape
        """
        if not isinstance(data, dict):
            raise ValueError("Request body must be a JSON object")

        paths = data.get("filePaths") or []
        contents = data.get("fileContents") or {}

        if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
            raise ValueError("filePaths must be a list of strings")
        if not isinstance(contents, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in contents.items()
        ):
            raise ValueError("fileContents must map paths to strings")

        context = data.get("repositoryContext")
        return cls(
            file_paths=tuple(paths),
            file_contents=dict(contents),
            repository_context=context if isinstance(context, str) else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "filePaths": list(self.file_paths),
            "fileContents": dict(self.file_contents),
            "repositoryContext": self.repository_context,
        }


@dataclass(frozen=True)
class AnalysisUnit:
    """A batch of files analyzed together in one backend session."""
    files: Tuple[Tuple[str, str], ...]  # (path, content) pairs, in order
    estimated_tokens: int = 0

    def __post_init__(self):
        if not self.files:
            raise ValueError("An analysis unit must contain at least one file")

    @property
    def paths(self) -> List[str]:
        return [path for path, _ in self.files]

    @property
    def is_single_file(self) -> bool:
        return len(self.files) == 1

    def __len__(self) -> int:
        return len(self.files)


@dataclass
class AnalysisResult:
    """Non-streaming result envelope for one agent."""
    agent_type: str
    findings: List[SecurityFinding] = field(default_factory=list)
    duration: float = 0.0  # seconds
    success: bool = True
    error_message: Optional[str] = None

    @classmethod
    def failed(cls, message: str, agent_type: str = AGENT_TYPE_SECURITY) -> "AnalysisResult":
        """A failed result with no findings."""
        return cls(agent_type=agent_type, findings=[], duration=0.0, success=False, error_message=message)

    def to_dict(self) -> dict[str, Any]:
        data = {
            "agentType": self.agent_type,
            "findings": [f.to_dict() for f in self.findings],
            "duration": format_duration(self.duration),
            "success": self.success,
        }
        if self.error_message is not None:
            data["errorMessage"] = self.error_message
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalysisResult":
        """Rebuild a result from its camelCase JSON body.

        Raises:
            ValueError: If the body or its findings do not have the expected shape
        """
        if not isinstance(data, dict):
            raise ValueError("Analysis result must be a JSON object")

        findings = data.get("findings") or []
        if not isinstance(findings, list):
            raise ValueError("findings must be a list")

        return cls(
            agent_type=data.get("agentType", AGENT_TYPE_SECURITY),
            findings=[SecurityFinding.from_dict(f) for f in findings],
            duration=parse_duration(data.get("duration")),
            success=bool(data.get("success", False)),
            error_message=data.get("errorMessage"),
        )
