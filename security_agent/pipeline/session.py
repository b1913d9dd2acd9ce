"""AI backend sessions.

A session takes one prompt and yields SessionEvents: text deltas, reasoning
and final-message text, terminated by exactly one IDLE or ERROR event.
`run_session` collapses that stream into the complete response text.
"""

from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Callable, List, Optional

from claude_agent_sdk import (
    ClaudeSDKClient,
    ClaudeAgentOptions,
    ClaudeSDKError,
    AssistantMessage,
    TextBlock,
    ThinkingBlock,
    ResultMessage,
)

from ..utils import get_logger


logger = get_logger(__name__)


class SessionEventKind(Enum):
    """Kinds of events a backend session emits."""
    DELTA = "delta"
    FINAL_MESSAGE = "final_message"
    REASONING = "reasoning"
    IDLE = "idle"
    ERROR = "error"


TEXT_EVENTS = (SessionEventKind.DELTA, SessionEventKind.FINAL_MESSAGE, SessionEventKind.REASONING)


@dataclass(frozen=True)
class SessionEvent:
    kind: SessionEventKind
    text: str = ""


class SessionState(Enum):
    """Session lifecycle. DONE and FAILED are final."""
    OPEN = "open"
    STREAMING = "streaming"
    DONE = "done"
    FAILED = "failed"


class SessionError(Exception):
    """The backend session failed or ended without completing."""


class SessionTranscript:
    """Accumulates a session's text and tracks its state."""

    def __init__(self):
        self.state = SessionState.OPEN
        self.error: Optional[str] = None
        self._parts: List[str] = []

    @property
    def text(self) -> str:
        return "".join(self._parts)

    @property
    def finished(self) -> bool:
        return self.state in (SessionState.DONE, SessionState.FAILED)

    def apply(self, event: SessionEvent) -> None:
        if self.finished:
            raise SessionError(f"Event {event.kind.value} received after session {self.state.value}")

        if event.kind in TEXT_EVENTS:
            self.state = SessionState.STREAMING
            if event.text:
                self._parts.append(event.text)
        elif event.kind is SessionEventKind.IDLE:
            self.state = SessionState.DONE
        elif event.kind is SessionEventKind.ERROR:
            self.state = SessionState.FAILED
            self.error = event.text or "Unknown session error"

    def fail(self, message: str) -> None:
        self.state = SessionState.FAILED
        self.error = message


class AgentSession:
    """One conversational session with the AI backend. Used once, never reused."""

    def stream(self, prompt: str) -> AsyncIterator[SessionEvent]:
        raise NotImplementedError


SessionFactory = Callable[[], AgentSession]


async def run_session(session: AgentSession, prompt: str) -> str:
    """
    Send a prompt and wait for the session's terminal signal.

    Returns:
        All text received before IDLE, concatenated in arrival order

    Raises:
        SessionError: On an ERROR event, a backend exception, or a stream that
            ends without IDLE
    """
    transcript = SessionTranscript()
    events = session.stream(prompt)

    try:
        async for event in events:
            transcript.apply(event)
            if transcript.state is SessionState.DONE:
                return transcript.text
            if transcript.state is SessionState.FAILED:
                raise SessionError(transcript.error)
    except SessionError:
        raise
    except Exception as e:
        transcript.fail(str(e))
        raise SessionError(f"Backend session raised: {e}") from e
    finally:
        aclose = getattr(events, "aclose", None)
        if aclose is not None:
            await aclose()

    transcript.fail("Session ended without an idle signal")
    raise SessionError(transcript.error)


class ClaudeSession(AgentSession):
    """
    Session backed by the Claude Agent SDK.

    Assistant text blocks become DELTA events and thinking blocks become
    REASONING events. The ResultMessage ends the session: ERROR when it
    reports an error, otherwise IDLE. Its result text is only forwarded as
    FINAL_MESSAGE when no assistant text was streamed, since it repeats the
    last assistant message.
    """

    def __init__(
        self,
        system_prompt: str,
        model: Optional[str] = None,
        max_turns: int = 1,
    ):
        self.options = ClaudeAgentOptions(
            system_prompt=system_prompt,
            model=model,
            allowed_tools=[],
            max_turns=max_turns,
        )
        self._used = False

    def translate(self, message, text_seen: bool) -> List[SessionEvent]:
        """Map one SDK message to session events."""
        events: List[SessionEvent] = []

        if isinstance(message, AssistantMessage):
            for block in message.content:
                if isinstance(block, TextBlock):
                    events.append(SessionEvent(SessionEventKind.DELTA, block.text))
                elif isinstance(block, ThinkingBlock):
                    events.append(SessionEvent(SessionEventKind.REASONING, block.thinking))

        elif isinstance(message, ResultMessage):
            if message.is_error:
                detail = message.result or message.subtype
                events.append(SessionEvent(SessionEventKind.ERROR, f"Backend reported an error: {detail}"))
            else:
                if message.result and not text_seen:
                    events.append(SessionEvent(SessionEventKind.FINAL_MESSAGE, message.result))
                events.append(SessionEvent(SessionEventKind.IDLE))

        return events

    async def stream(self, prompt: str) -> AsyncIterator[SessionEvent]:
        if self._used:
            raise SessionError("Session already used; open a new one per unit")
        self._used = True

        text_seen = False
        try:
            async with ClaudeSDKClient(options=self.options) as client:
                await client.query(prompt)

                async for message in client.receive_response():
                    for event in self.translate(message, text_seen):
                        if event.kind is SessionEventKind.DELTA:
                            text_seen = True
                        yield event
                        if event.kind in (SessionEventKind.IDLE, SessionEventKind.ERROR):
                            return

        except ClaudeSDKError as e:
            logger.error(f"Claude session failed: {e}")
            yield SessionEvent(SessionEventKind.ERROR, str(e))


def claude_session_factory(
    system_prompt: str,
    model: Optional[str] = None,
    max_turns: int = 1,
) -> SessionFactory:
    """Factory producing a fresh ClaudeSession per call."""
    def factory() -> AgentSession:
        return ClaudeSession(system_prompt=system_prompt, model=model, max_turns=max_turns)
    return factory
