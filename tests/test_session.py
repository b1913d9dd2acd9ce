"""Tests for backend session lifecycle and the Claude Agent SDK adapter."""

import pytest

from claude_agent_sdk import AssistantMessage, ResultMessage, TextBlock, ThinkingBlock

from security_agent.pipeline import (
    ClaudeSession,
    SessionError,
    SessionEvent,
    SessionEventKind,
    SessionState,
    SessionTranscript,
    run_session,
)

from .helpers import ScriptedBackend, failure, raising, reply


def result_message(result="", is_error=False, subtype="success"):
    return ResultMessage(
        subtype=subtype,
        duration_ms=10,
        duration_api_ms=8,
        is_error=is_error,
        num_turns=1,
        session_id="test-session",
        result=result,
    )


class TestSessionTranscript:
    """Tests for the per-session state machine."""

    def test_open_streaming_done(self):
        # Given
        transcript = SessionTranscript()
        assert transcript.state is SessionState.OPEN

        # When
        transcript.apply(SessionEvent(SessionEventKind.DELTA, "[1"))
        transcript.apply(SessionEvent(SessionEventKind.REASONING, ","))
        transcript.apply(SessionEvent(SessionEventKind.FINAL_MESSAGE, "2]"))
        transcript.apply(SessionEvent(SessionEventKind.IDLE))

        # Then
        assert transcript.state is SessionState.DONE
        assert transcript.text == "[1,2]"

    def test_error_fails_session(self):
        transcript = SessionTranscript()
        transcript.apply(SessionEvent(SessionEventKind.ERROR, "quota"))

        assert transcript.state is SessionState.FAILED
        assert transcript.error == "quota"

    def test_no_transition_after_done(self):
        """Given a finished session, any further event should be rejected."""
        transcript = SessionTranscript()
        transcript.apply(SessionEvent(SessionEventKind.IDLE))

        with pytest.raises(SessionError):
            transcript.apply(SessionEvent(SessionEventKind.DELTA, "late"))


class TestRunSession:
    """Tests for run_session."""

    @pytest.mark.asyncio
    async def test_concatenates_deltas_until_idle(self):
        backend = ScriptedBackend([reply('[{"title": "x"}]')])

        text = await run_session(backend(), "prompt")

        assert text == '[{"title": "x"}]'
        assert backend.prompts == ["prompt"]

    @pytest.mark.asyncio
    async def test_error_event_raises(self):
        backend = ScriptedBackend([failure("rate limited")])

        with pytest.raises(SessionError, match="rate limited"):
            await run_session(backend(), "prompt")

    @pytest.mark.asyncio
    async def test_backend_exception_raises_session_error(self):
        backend = ScriptedBackend([raising("connection reset")])

        with pytest.raises(SessionError, match="connection reset"):
            await run_session(backend(), "prompt")

    @pytest.mark.asyncio
    async def test_stream_ending_without_idle_raises(self):
        backend = ScriptedBackend([[SessionEvent(SessionEventKind.DELTA, "[]")]])

        with pytest.raises(SessionError, match="without an idle"):
            await run_session(backend(), "prompt")


class TestClaudeSessionTranslate:
    """Tests for mapping SDK messages to session events."""

    def test_text_and_thinking_blocks(self):
        # Given
        session = ClaudeSession(system_prompt="sys")
        message = AssistantMessage(
            content=[ThinkingBlock(thinking="hmm", signature="sig"), TextBlock(text="[]")],
            model="claude",
        )

        # When
        events = session.translate(message, text_seen=False)

        # Then
        assert events == [
            SessionEvent(SessionEventKind.REASONING, "hmm"),
            SessionEvent(SessionEventKind.DELTA, "[]"),
        ]

    def test_result_after_streamed_text_only_goes_idle(self):
        """Given text already streamed, the result text should not be repeated."""
        session = ClaudeSession(system_prompt="sys")

        events = session.translate(result_message(result="[]"), text_seen=True)

        assert events == [SessionEvent(SessionEventKind.IDLE)]

    def test_result_without_streamed_text_is_final_message(self):
        session = ClaudeSession(system_prompt="sys")

        events = session.translate(result_message(result="[]"), text_seen=False)

        assert events == [
            SessionEvent(SessionEventKind.FINAL_MESSAGE, "[]"),
            SessionEvent(SessionEventKind.IDLE),
        ]

    def test_error_result(self):
        session = ClaudeSession(system_prompt="sys")

        events = session.translate(
            result_message(result=None, is_error=True, subtype="error_max_turns"),
            text_seen=False,
        )

        assert len(events) == 1
        assert events[0].kind is SessionEventKind.ERROR
        assert "error_max_turns" in events[0].text

    def test_options_disable_tools(self):
        session = ClaudeSession(system_prompt="sys", model="claude-test", max_turns=2)

        assert session.options.allowed_tools == []
        assert session.options.max_turns == 2
        assert session.options.model == "claude-test"
