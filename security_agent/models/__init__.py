"""Data models for security analysis."""

from .finding import Severity, RawFinding, SecurityFinding
from .analysis import (
    AGENT_TYPE_SECURITY,
    AnalysisRequest,
    AnalysisUnit,
    AnalysisResult,
    format_duration,
    parse_duration,
)
from .events import (
    StartedEvent,
    FindingEvent,
    CompleteEvent,
    ErrorEvent,
    StreamEvent,
    TERMINAL_EVENTS,
)
from .rules import SecurityRule, SecurityRulesConfig

__all__ = [
    "Severity",
    "RawFinding",
    "SecurityFinding",
    "AGENT_TYPE_SECURITY",
    "AnalysisRequest",
    "AnalysisUnit",
    "AnalysisResult",
    "format_duration",
    "parse_duration",
    "StartedEvent",
    "FindingEvent",
    "CompleteEvent",
    "ErrorEvent",
    "StreamEvent",
    "TERMINAL_EVENTS",
    "SecurityRule",
    "SecurityRulesConfig",
]
