"""Error classification, reporting and retry helpers.

Maps raw failures from either responder to an ERROR_TYPES key and records
them in the ErrorStore. retry_with_backoff is the only place failed
operations are retried.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, TypeVar

import openai
from pydantic import BaseModel, Field
from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt, wait_exponential

from .config_store import LLMConfigStore
from .error_store import ErrorRecord, ErrorStore, get_error_type

log = logging.getLogger("oracle.error_handler")

T = TypeVar("T")
Sleep = Callable[[float], Awaitable[Any]]

# error `code` -> ERROR_TYPES key
CODE_TO_TYPE: Dict[str, str] = {
    "INVALID_API_KEY": "API_KEY_INVALID",
    "API_KEY_MISSING": "API_KEY_MISSING",
    "RATE_LIMIT": "RATE_LIMIT",
    "NETWORK_ERROR": "NETWORK_ERROR",
    "TIMEOUT": "LLM_TIMEOUT",
    "STREAMING_ERROR": "LLM_STREAMING_ERROR",
    "INVALID_RESPONSE": "LLM_INVALID_RESPONSE",
    "VALIDATION_ERROR": "VALIDATION_ERROR",
    "COMPONENT_LOAD_ERROR": "COMPONENT_LOAD_ERROR",
    "TAROT_DRAW_ERROR": "TAROT_DRAW_ERROR",
    "MYSTICAL_ERROR": "MOCK_MYSTICAL_ERROR",
}

# checked in order against the lowercased message
MESSAGE_PATTERNS: Tuple[Tuple[str, str], ...] = (
    ("api key", "API_KEY_INVALID"),
    ("rate limit", "RATE_LIMIT"),
    ("network", "NETWORK_ERROR"),
    ("timeout", "LLM_TIMEOUT"),
    ("streaming", "LLM_STREAMING_ERROR"),
    ("mystical", "MOCK_MYSTICAL_ERROR"),
)

# subclasses before their bases (APITimeoutError is an APIConnectionError)
EXCEPTION_TYPES: Tuple[Tuple[type, str], ...] = (
    (openai.AuthenticationError, "API_KEY_INVALID"),
    (openai.RateLimitError, "RATE_LIMIT"),
    (openai.APITimeoutError, "LLM_TIMEOUT"),
    (openai.APIConnectionError, "NETWORK_ERROR"),
    (asyncio.TimeoutError, "LLM_TIMEOUT"),
    (ConnectionError, "NETWORK_ERROR"),
)

# types whose record keeps the raw message instead of the default text
_KEEP_RAW_MESSAGE = {"MOCK_MYSTICAL_ERROR", "UNKNOWN_ERROR"}


class ClassifiedError(BaseModel):
    type: str
    code: Optional[str] = None
    message: str
    retryable: bool = False
    metadata: Dict[str, Any] = Field(default_factory=dict)


def _error_message(error: BaseException) -> str:
    return getattr(error, "message", None) or str(error) or type(error).__name__


def classify_error(error: BaseException) -> ClassifiedError:
    """Classify by explicit code, then exception type, then message text."""
    code = getattr(error, "code", None)
    message = _error_message(error)
    metadata: Dict[str, Any] = dict(getattr(error, "metadata", None) or {})
    metadata.setdefault("name", type(error).__name__)

    error_type = None
    if isinstance(code, str):
        error_type = CODE_TO_TYPE.get(code)
    if error_type is None:
        for exc_type, mapped in EXCEPTION_TYPES:
            if isinstance(error, exc_type):
                error_type = mapped
                break
    if error_type is None:
        lowered = message.lower()
        for needle, mapped in MESSAGE_PATTERNS:
            if needle in lowered:
                error_type = mapped
                break
    if error_type is None:
        error_type = "UNKNOWN_ERROR"

    return ClassifiedError(
        type=error_type,
        code=code if isinstance(code, str) else None,
        message=message,
        retryable=get_error_type(error_type).retryable,
        metadata=metadata,
    )


class ErrorHandler:
    def __init__(self, store: ErrorStore, config: Optional[LLMConfigStore] = None):
        self.store = store
        self.config = config

    def report(self, classified: ClassifiedError) -> ErrorRecord:
        metadata = dict(classified.metadata)
        if classified.code:
            metadata["code"] = classified.code
        if classified.type == "API_KEY_INVALID" and self.config is not None:
            metadata["provider"] = self.config.provider
        custom = classified.message if classified.type in _KEEP_RAW_MESSAGE else None
        return self.store.show_error(classified.type, custom, metadata)

    def handle_llm_error(self, error: BaseException) -> ErrorRecord:
        log.error("LLM error: %r", error)
        return self.report(classify_error(error))

    def handle_api_key_missing(self) -> ErrorRecord:
        return self.store.show_error("API_KEY_MISSING")

    async def retry_with_backoff(
        self,
        operation: Callable[[], Awaitable[T]],
        max_attempts: int = 3,
        sleep: Sleep = asyncio.sleep,
    ) -> T:
        """Run `operation` up to `max_attempts` times.

        Waits 2**i seconds after failed attempt i (1s, 2s, 4s, ...). The last
        failure is re-raised unchanged.
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

        def count_failure(state: RetryCallState) -> None:
            if state.outcome is not None and state.outcome.failed:
                self.store.increment_retry_count()

        def log_retry(state: RetryCallState) -> None:
            delay = state.next_action.sleep if state.next_action else 0
            log.info("retry %d/%d after %ss", state.attempt_number, max_attempts, delay)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=1, exp_base=2),
            sleep=sleep,
            reraise=True,
            after=count_failure,
            before_sleep=log_retry,
        )
        result = await retrying(operation)
        self.store.reset_retry_count()
        return result

    async def with_error_handling(
        self,
        operation: Callable[[], Awaitable[T]],
        silent: bool = False,
        retry: bool = False,
        max_retries: int = 3,
        sleep: Sleep = asyncio.sleep,
    ) -> T:
        try:
            if retry:
                return await self.retry_with_backoff(operation, max_retries, sleep)
            return await operation()
        except Exception as e:
            if not silent:
                self.handle_llm_error(e)
            raise
