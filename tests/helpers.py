"""Test doubles and builders.

Only the AI backend and remote services are faked: the backend through a
scripted AgentSession, HTTP services through httpx.MockTransport.
"""

import json
from typing import List, Sequence, Union

from security_agent.models import SecurityFinding, Severity
from security_agent.pipeline import AgentSession, SessionEvent, SessionEventKind


Script = Sequence[Union[SessionEvent, Exception]]


def reply(text: str) -> Script:
    """A session that streams text in two deltas then goes idle."""
    half = len(text) // 2
    return [
        SessionEvent(SessionEventKind.DELTA, text[:half]),
        SessionEvent(SessionEventKind.DELTA, text[half:]),
        SessionEvent(SessionEventKind.IDLE),
    ]


def failure(message: str = "backend exploded") -> Script:
    """A session that reports an error."""
    return [SessionEvent(SessionEventKind.ERROR, message)]


def raising(message: str = "connection reset") -> Script:
    """A session whose stream raises after a partial delta."""
    return [SessionEvent(SessionEventKind.DELTA, "[{\"ti"), RuntimeError(message)]


def findings_json(*findings: dict) -> str:
    return json.dumps(list(findings))


def raw(title: str, rule_id: str = "SEC-001", severity: str = "High", **extra) -> dict:
    """One backend finding object in camelCase."""
    data = {
        "ruleId": rule_id,
        "title": title,
        "description": f"{title} detected",
        "severity": severity,
        "lineNumber": 3,
        "codeSnippet": "x = 1",
        "remediation": "Fix it",
    }
    data.update(extra)
    return data


class FakeSession(AgentSession):
    """Replays a fixed script of session events."""

    def __init__(self, script: Script, backend: "ScriptedBackend"):
        self.script = script
        self.backend = backend

    async def stream(self, prompt: str):
        self.backend.prompts.append(prompt)
        for item in self.script:
            if isinstance(item, Exception):
                raise item
            yield item


class ScriptedBackend:
    """Session factory handing out scripts in the order sessions are opened."""

    def __init__(self, scripts: List[Script]):
        self.scripts = list(scripts)
        self.prompts: List[str] = []

    @property
    def sessions_opened(self) -> int:
        return len(self.prompts)

    def __call__(self) -> AgentSession:
        if not self.scripts:
            raise AssertionError("More sessions opened than scripted")
        return FakeSession(self.scripts.pop(0), self)


def make_finding(
    title: str = "SQL Injection in query builder",
    file_path: str = "src/app.py",
    finding_id: str = "SQL-001",
    description: str = "User input concatenated into SQL",
    severity: Severity = Severity.HIGH,
) -> SecurityFinding:
    return SecurityFinding(
        id=finding_id,
        title=title,
        description=description,
        severity=severity,
        file_path=file_path,
        line_number=10,
        code_snippet="cursor.execute(q + name)",
        remediation="Use parameterized queries",
    )
