"""Data models for security findings."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Any


class Severity(Enum):
    """Finding severity levels."""
    CRITICAL = "Critical"   # Remote exploitation, data loss
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    INFO = "Info"           # Also used for anything unrecognised

    @classmethod
    def parse(cls, text: Optional[str]) -> "Severity":
        """Parse free-text severity. Unknown values resolve to INFO."""
        if not isinstance(text, str):
            return cls.INFO
        normalized = text.strip().lower()
        for level in cls:
            if level.value.lower() == normalized:
                return level
        return cls.INFO


@dataclass
class RawFinding:
    """A finding exactly as decoded from the AI backend's response."""
    rule_id: str = ""
    title: str = ""
    description: str = ""
    severity: str = ""
    line_number: Optional[int] = None
    code_snippet: Optional[str] = None
    remediation: str = ""
    file_path: Optional[str] = None  # Claimed path, multi-file units only

    def to_finding(self, file_path: str) -> "SecurityFinding":
        """Build the typed finding attributed to a known file path."""
        return SecurityFinding(
            id=self.rule_id,
            title=self.title,
            description=self.description,
            severity=Severity.parse(self.severity),
            file_path=file_path,
            line_number=self.line_number,
            code_snippet=self.code_snippet,
            remediation=self.remediation,
        )


@dataclass(frozen=True)
class SecurityFinding:
    """Validated finding, attributed to one submitted file."""
    id: str
    title: str
    description: str
    severity: Severity
    file_path: str
    line_number: Optional[int] = None
    code_snippet: Optional[str] = None
    remediation: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Wire representation (camelCase keys)."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "severityLevel": self.severity.name.capitalize(),
            "filePath": self.file_path,
            "lineNumber": self.line_number,
            "codeSnippet": self.code_snippet,
            "remediation": self.remediation,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SecurityFinding":
        """Rebuild a finding from its wire representation.

        Raises:
            ValueError: If data is not a JSON object
        """
        if not isinstance(data, dict):
            raise ValueError(f"Finding must be a JSON object, got {type(data).__name__}")
        return cls(
            id=data.get("id", ""),
            title=data.get("title", ""),
            description=data.get("description", ""),
            severity=Severity.parse(data.get("severityLevel")),
            file_path=data.get("filePath", ""),
            line_number=data.get("lineNumber"),
            code_snippet=data.get("codeSnippet"),
            remediation=data.get("remediation", ""),
        )
