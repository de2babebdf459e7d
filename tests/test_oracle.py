import random

import pytest

from mystic_oracle.chat_store import ChatStore
from mystic_oracle.config_store import LLMConfig, LLMConfigStore
from mystic_oracle.error_handler import ErrorHandler
from mystic_oracle.error_store import ErrorStore
from mystic_oracle.events import ComponentEvent, DoneEvent, ErrorEvent, TextEvent
from mystic_oracle.mock_responder import MockResponder
from mystic_oracle.oracle import OracleSession, TurnErr, TurnOk, build_responder, create_session
from mystic_oracle.real_responder import RealResponder
from mystic_oracle.settings import Settings


async def no_sleep(_seconds):
    return None


def make_session(tmp_path, responder=None):
    errors = ErrorStore()
    config = LLMConfigStore(tmp_path / "c.json")
    responder = responder or MockResponder(0, 0, rng=random.Random(4), sleep=no_sleep)
    return OracleSession(responder, ChatStore(), errors, config)


class ScriptedResponder:
    """Fails `failures` times with a network error, then answers."""

    def __init__(self, failures):
        self.failures = failures
        self.calls = 0
        self.locale = "en"

    async def stream_response(self, user_message):
        self.calls += 1
        yield TextEvent(chunk="Lo", full_text="Lo")
        if self.calls <= self.failures:
            raise ConnectionError("network unreachable")
        yield DoneEvent(full_text="Lo")

    async def send_message(self, user_message):
        return "Lo"


@pytest.mark.asyncio
async def test_text_turn_updates_placeholder(tmp_path):
    session = make_session(tmp_path)
    events = [e async for e in session.stream_turn("love life")]

    assert isinstance(events[-1], DoneEvent)
    user, assistant = session.chat.messages
    assert user.role == "user" and user.content == "love life"
    assert assistant.role == "assistant"
    assert assistant.content == events[-1].full_text


@pytest.mark.asyncio
async def test_component_fills_empty_placeholder(tmp_path):
    session = make_session(tmp_path)
    events = [e async for e in session.stream_turn("/spread")]

    assert isinstance(events[0], ComponentEvent)
    messages = session.chat.messages
    assert len(messages) == 2
    assert messages[1].component_name == "TarotSpread"
    assert len(messages[1].component_data["cards"]) == 3


@pytest.mark.asyncio
async def test_simulated_error_is_recorded_and_terminal(tmp_path):
    session = make_session(tmp_path)
    events = [e async for e in session.stream_turn("/error-stream")]

    last = events[-1]
    assert isinstance(last, ErrorEvent)
    assert last.code == "STREAMING_ERROR"
    assert session.errors.current_error.type == "LLM_STREAMING_ERROR"
    # partial text stays in the assistant message
    assert session.chat.messages[1].content == "The cards reveal..."


@pytest.mark.asyncio
async def test_run_turn_returns_typed_results(tmp_path):
    session = make_session(tmp_path)

    ok = await session.run_turn("hello")
    assert isinstance(ok, TurnOk)
    assert ok.ok
    assert "hello" in ok.full_text

    err = await session.run_turn("/error-timeout")
    assert isinstance(err, TurnErr)
    assert not err.ok
    assert err.error.code == "TIMEOUT"
    assert err.error.type == "LLM_TIMEOUT"


@pytest.mark.asyncio
async def test_run_turn_retry_recovers(tmp_path):
    responder = ScriptedResponder(failures=1)
    session = make_session(tmp_path, responder)

    result = await session.run_turn("again", retry=True, sleep=no_sleep)

    assert isinstance(result, TurnOk)
    assert responder.calls == 2
    assert session.errors.current_error is None
    assert len(session.chat.messages) == 2


@pytest.mark.asyncio
async def test_run_turn_retry_gives_up(tmp_path):
    responder = ScriptedResponder(failures=5)
    session = make_session(tmp_path, responder)

    result = await session.run_turn("again", retry=True, max_attempts=2, sleep=no_sleep)

    assert isinstance(result, TurnErr)
    assert responder.calls == 2
    assert result.error.type == "NETWORK_ERROR"
    assert len(session.errors.recent_errors) == 1
    assert isinstance(result.events[-1], ErrorEvent)


@pytest.mark.asyncio
async def test_real_responder_errors_reported_once(tmp_path):
    errors = ErrorStore()
    config = LLMConfigStore(tmp_path / "c.json")
    handler = ErrorHandler(errors, config)
    responder = RealResponder(LLMConfig(provider="gemini"), on_error=handler.handle_llm_error)
    session = OracleSession(responder, ChatStore(), errors, config, handler)

    events = [e async for e in session.stream_turn("hi")]

    assert events[-1].code == "API_KEY_MISSING"
    assert len(errors.recent_errors) == 1
    assert errors.current_error.type == "API_KEY_MISSING"


@pytest.mark.asyncio
async def test_real_responder_retry_reports_final_failure_once(tmp_path):
    errors = ErrorStore()
    config = LLMConfigStore(tmp_path / "c.json")
    handler = ErrorHandler(errors, config)
    responder = RealResponder(LLMConfig(provider="gemini"), on_error=handler.handle_llm_error)
    session = OracleSession(responder, ChatStore(), errors, config, handler)

    result = await session.run_turn("hi", retry=True, max_attempts=3, sleep=no_sleep)

    assert isinstance(result, TurnErr)
    assert result.error.type == "API_KEY_MISSING"
    assert len(errors.recent_errors) == 1
    assert errors.auto_retry_count == 3
    assert responder.on_error == handler.handle_llm_error


def test_build_responder_picks_mode(tmp_path):
    config = LLMConfigStore(tmp_path / "c.json")
    handler = ErrorHandler(ErrorStore(), config)

    mock = build_responder(Settings(mode="mock", thinking_delay=0, char_delay=0), config, handler)
    assert isinstance(mock, MockResponder)

    real = build_responder(Settings(mode="real"), config, handler)
    assert isinstance(real, RealResponder)
    assert real.on_error is not None


def test_create_session_applies_env_overrides(tmp_path):
    session = create_session(Settings(
        mode="real",
        config_path=tmp_path / "c.json",
        provider="groq",
        api_key="sk-env",
    ))
    assert session.mode == "real"
    assert session.config.provider == "groq"
    assert session.responder.config.api_key == "sk-env"


@pytest.mark.asyncio
async def test_reset_and_apply_config(tmp_path):
    session = make_session(tmp_path)
    [e async for e in session.stream_turn("hi")]
    session.config.set_locale("zh-TW")
    session.apply_config()
    assert session.responder.locale == "zh-TW"

    session.reset()
    assert session.chat.messages == []
