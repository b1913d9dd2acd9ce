"""Analysis pipeline: batching, backend sessions and response reconciliation."""

from .batching import estimate_tokens, plan_units, single_file_units
from .response_parser import extract_findings
from .reconcile import normalize_path, match_file_path
from .rule_filter import RuleFilter, normalize_text, matches_category
from .prompts import get_language, build_file_prompt, build_batch_prompt, build_prompt
from .session import (
    SessionEventKind,
    SessionEvent,
    SessionState,
    SessionError,
    SessionTranscript,
    AgentSession,
    ClaudeSession,
    run_session,
    claude_session_factory,
)
from .analyzer import SecurityAnalyzer

__all__ = [
    "estimate_tokens",
    "plan_units",
    "single_file_units",
    "extract_findings",
    "normalize_path",
    "match_file_path",
    "RuleFilter",
    "normalize_text",
    "matches_category",
    "get_language",
    "build_file_prompt",
    "build_batch_prompt",
    "build_prompt",
    "SessionEventKind",
    "SessionEvent",
    "SessionState",
    "SessionError",
    "SessionTranscript",
    "AgentSession",
    "ClaudeSession",
    "run_session",
    "claude_session_factory",
    "SecurityAnalyzer",
]
