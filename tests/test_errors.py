import asyncio

import httpx
import openai
import pytest

from mystic_oracle.config_store import LLMConfigStore
from mystic_oracle.error_handler import ErrorHandler, classify_error
from mystic_oracle.error_store import ERROR_TYPES, ErrorStore, get_error_type
from mystic_oracle.errors import OracleError, ResponderError, SimulatedError


class SleepRecorder:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


def _request():
    return httpx.Request("POST", "https://example.test/v1/chat/completions")


# --- classification ---

def test_classify_by_code():
    c = classify_error(SimulatedError("boom", "MYSTICAL_ERROR"))
    assert c.type == "MOCK_MYSTICAL_ERROR"
    assert c.code == "MYSTICAL_ERROR"
    assert c.retryable is True


@pytest.mark.parametrize(
    "code,expected",
    [
        ("INVALID_API_KEY", "API_KEY_INVALID"),
        ("RATE_LIMIT", "RATE_LIMIT"),
        ("NETWORK_ERROR", "NETWORK_ERROR"),
        ("TIMEOUT", "LLM_TIMEOUT"),
        ("STREAMING_ERROR", "LLM_STREAMING_ERROR"),
    ],
)
def test_classify_known_codes(code, expected):
    assert classify_error(ResponderError("x", code)).type == expected


def test_classify_by_message_is_case_insensitive():
    assert classify_error(RuntimeError("Invalid API Key supplied")).type == "API_KEY_INVALID"
    assert classify_error(RuntimeError("RATE LIMIT hit")).type == "RATE_LIMIT"
    assert classify_error(RuntimeError("request TIMEOUT")).type == "LLM_TIMEOUT"


def test_classify_code_wins_over_message():
    err = OracleError("network timeout while streaming", "RATE_LIMIT")
    assert classify_error(err).type == "RATE_LIMIT"


def test_classify_openai_exceptions():
    assert classify_error(openai.APITimeoutError(request=_request())).type == "LLM_TIMEOUT"
    assert classify_error(openai.APIConnectionError(request=_request())).type == "NETWORK_ERROR"


def test_classify_unknown():
    c = classify_error(ValueError("something odd"))
    assert c.type == "UNKNOWN_ERROR"
    assert c.retryable is False
    assert c.metadata["name"] == "ValueError"


def test_unknown_type_falls_back():
    assert get_error_type("NOPE") is ERROR_TYPES["UNKNOWN_ERROR"]


# --- store ---

def test_history_keeps_ten_most_recent_first():
    store = ErrorStore()
    for i in range(11):
        store.show_error("NETWORK_ERROR", f"e{i}")
    recent = store.recent_errors
    assert len(recent) == 10
    assert recent[0].message == "e10"
    assert recent[-1].message == "e1"


def test_show_and_dismiss():
    store = ErrorStore()
    record = store.show_error("RATE_LIMIT", metadata={"retry_after": 60})
    assert store.has_active_error
    assert store.is_modal_open
    assert record.message == ERROR_TYPES["RATE_LIMIT"].default_message
    assert store.error_config.show_cooldown is True

    store.increment_retry_count()
    store.dismiss_error()
    assert store.current_error is None
    assert not store.is_modal_open
    assert store.auto_retry_count == 0
    assert len(store.recent_errors) == 1

    store.clear_history()
    assert store.recent_errors == []


def test_can_retry_respects_limit():
    store = ErrorStore(max_auto_retries=2)
    store.show_error("NETWORK_ERROR")
    assert store.can_retry
    store.increment_retry_count()
    store.increment_retry_count()
    assert not store.can_retry

    store.show_error("API_KEY_INVALID")
    store.reset_retry_count()
    assert not store.can_retry


# --- handler ---

def test_handle_llm_error_records_code_and_provider(tmp_path):
    store = ErrorStore()
    config = LLMConfigStore(tmp_path / "c.json", provider="groq")
    handler = ErrorHandler(store, config)

    record = handler.handle_llm_error(ResponderError("bad key", "INVALID_API_KEY"))

    assert record.type == "API_KEY_INVALID"
    assert record.metadata["code"] == "INVALID_API_KEY"
    assert record.metadata["provider"] == "groq"


def test_mystical_error_keeps_raw_message():
    store = ErrorStore()
    record = ErrorHandler(store).handle_llm_error(SimulatedError("The cosmos wobbles", "MYSTICAL_ERROR"))
    assert record.message == "The cosmos wobbles"


@pytest.mark.asyncio
async def test_retry_with_backoff_recovers():
    store = ErrorStore()
    handler = ErrorHandler(store)
    sleep = SleepRecorder()
    calls = []

    async def flaky():
        calls.append(1)
        if len(calls) == 1:
            raise ConnectionError("network down")
        return "ok"

    assert await handler.retry_with_backoff(flaky, 3, sleep) == "ok"
    assert len(calls) == 2
    assert sleep.calls == [1]
    assert store.auto_retry_count == 0


@pytest.mark.asyncio
async def test_retry_with_backoff_reraises_last_error():
    store = ErrorStore()
    handler = ErrorHandler(store)
    sleep = SleepRecorder()
    attempts = []

    async def always_fails():
        attempts.append(1)
        raise ResponderError(f"fail {len(attempts)}", "NETWORK_ERROR")

    with pytest.raises(ResponderError) as info:
        await handler.retry_with_backoff(always_fails, 3, sleep)
    assert info.value.message == "fail 3"
    assert sleep.calls == [1, 2]
    assert store.auto_retry_count == 3


@pytest.mark.asyncio
async def test_retry_requires_an_attempt():
    handler = ErrorHandler(ErrorStore())

    async def op():
        return 1

    with pytest.raises(ValueError):
        await handler.retry_with_backoff(op, 0)


@pytest.mark.asyncio
async def test_with_error_handling_reports_and_raises():
    store = ErrorStore()
    handler = ErrorHandler(store)

    async def op():
        raise asyncio.TimeoutError()

    with pytest.raises(asyncio.TimeoutError):
        await handler.with_error_handling(op)
    assert store.current_error.type == "LLM_TIMEOUT"


@pytest.mark.asyncio
async def test_with_error_handling_silent():
    store = ErrorStore()

    async def op():
        raise RuntimeError("quiet")

    with pytest.raises(RuntimeError):
        await ErrorHandler(store).with_error_handling(op, silent=True)
    assert store.current_error is None


@pytest.mark.asyncio
async def test_retry_succeeds_on_third_attempt():
    store = ErrorStore()
    handler = ErrorHandler(store)
    sleep = SleepRecorder()
    calls = []

    async def op():
        calls.append(1)
        if len(calls) < 3:
            raise ConnectionError("network down")
        return "third time"

    assert await handler.retry_with_backoff(op, 3, sleep) == "third time"
    assert sleep.calls == [1, 2]
    assert store.auto_retry_count == 0


@pytest.mark.asyncio
async def test_retry_two_attempts_waits_one_second():
    handler = ErrorHandler(ErrorStore())
    sleep = SleepRecorder()
    calls = []

    async def op():
        calls.append(1)
        raise ConnectionError("network down")

    with pytest.raises(ConnectionError):
        await handler.retry_with_backoff(op, 2, sleep)
    assert len(calls) == 2
    assert sleep.calls == [1]
