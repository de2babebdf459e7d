"""Error modal state: error type table, current error, bounded history.

Each error type defines its severity, presentation and available actions.
The store holds the error currently shown to the user plus the last
HISTORY_LIMIT errors, most recent first.
"""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger("oracle.errors")

Severity = Literal["warning", "error"]

HISTORY_LIMIT = 10
MAX_AUTO_RETRIES = 2


class ErrorType(BaseModel):
    model_config = ConfigDict(frozen=True)

    severity: Severity
    icon: str
    title: str
    default_message: str
    actions: Tuple[str, ...]
    primary_action: str
    retryable: bool = False
    show_cooldown: bool = False
    show_partial_content: bool = False
    developer_focused: bool = False
    is_mock_error: bool = False
    tone: Optional[str] = None
    suggestions: Tuple[str, ...] = ()
    provider_list: Tuple[str, ...] = ()


ERROR_TYPES: Dict[str, ErrorType] = {
    # API & network
    "API_KEY_INVALID": ErrorType(
        severity="error",
        icon="🔑",
        title="Invalid API Key",
        default_message="Your API key appears to be invalid or expired.",
        actions=("reconfigure", "dismiss"),
        primary_action="reconfigure",
        suggestions=(
            "Verify key format matches your provider",
            "Check expiration date in provider console",
            "Try regenerating your API key",
        ),
    ),
    "API_KEY_MISSING": ErrorType(
        severity="warning",
        icon="🔮",
        title="API Key Required",
        default_message=(
            "Welcome, Seeker! To begin your journey with the Mystic Oracle, "
            "please configure your LLM provider."
        ),
        actions=("configure", "dismiss"),
        primary_action="configure",
        tone="welcoming",
        provider_list=("Google Gemini", "Groq", "OpenRouter", "Hugging Face", "OpenAI"),
    ),
    "NETWORK_ERROR": ErrorType(
        severity="error",
        icon="🌐",
        title="Connection Failed",
        default_message="Unable to reach the server. Please check your internet connection.",
        actions=("retry", "dismiss"),
        primary_action="retry",
        retryable=True,
        suggestions=(
            "Check your internet connection",
            "Try disabling VPN or proxy",
            "Check firewall settings",
        ),
    ),
    "RATE_LIMIT": ErrorType(
        severity="warning",
        icon="⏱️",
        title="Rate Limit Exceeded",
        default_message="You've exceeded the API rate limit. Please wait before trying again.",
        actions=("wait", "dismiss"),
        primary_action="wait",
        show_cooldown=True,
    ),
    # LLM service
    "LLM_TIMEOUT": ErrorType(
        severity="error",
        icon="⏰",
        title="Request Timeout",
        default_message="The request took too long to complete. Please try again.",
        actions=("retry", "dismiss"),
        primary_action="retry",
        retryable=True,
        suggestions=(
            "Your query may be too complex",
            "Try breaking it into smaller parts",
            "Server might be under heavy load",
        ),
    ),
    "LLM_STREAMING_ERROR": ErrorType(
        severity="error",
        icon="📡",
        title="Streaming Interrupted",
        default_message="Connection lost while streaming the response.",
        actions=("retry", "dismiss"),
        primary_action="retry",
        retryable=True,
        show_partial_content=True,
    ),
    "LLM_INVALID_RESPONSE": ErrorType(
        severity="error",
        icon="❌",
        title="Invalid Response",
        default_message="The LLM returned an unexpected response format.",
        actions=("retry", "report", "dismiss"),
        primary_action="retry",
        developer_focused=True,
    ),
    # validation & user input
    "VALIDATION_ERROR": ErrorType(
        severity="warning",
        icon="⚠️",
        title="Validation Failed",
        default_message="Please check your input and try again.",
        actions=("dismiss",),
        primary_action="dismiss",
        tone="friendly",
    ),
    # system & components
    "COMPONENT_LOAD_ERROR": ErrorType(
        severity="error",
        icon="🔧",
        title="Component Failed to Load",
        default_message="A required component failed to load. Please refresh the page.",
        actions=("refresh", "dismiss"),
        primary_action="refresh",
        suggestions=(
            "Refresh the page",
            "Clear browser cache",
            "Check browser console for details",
        ),
    ),
    "TAROT_DRAW_ERROR": ErrorType(
        severity="error",
        icon="🃏",
        title="Tarot Draw Failed",
        default_message="The cards resist being drawn... The cosmic energies are misaligned.",
        actions=("retry", "dismiss"),
        primary_action="retry",
        retryable=True,
        tone="mystical",
    ),
    # mock service (testing)
    "MOCK_MYSTICAL_ERROR": ErrorType(
        severity="error",
        icon="🌙",
        title="Mystical Connection Disrupted",
        default_message="The cosmic energies are in flux. The oracle cannot divine at this moment.",
        actions=("retry", "dismiss"),
        primary_action="retry",
        retryable=True,
        tone="mystical",
        is_mock_error=True,
    ),
    "UNKNOWN_ERROR": ErrorType(
        severity="error",
        icon="❓",
        title="Unexpected Error",
        default_message="An unexpected error occurred. Please try again.",
        actions=("retry", "report", "dismiss"),
        primary_action="retry",
    ),
}


def get_error_type(error_type: str) -> ErrorType:
    return ERROR_TYPES.get(error_type) or ERROR_TYPES["UNKNOWN_ERROR"]


class ErrorRecord(BaseModel):
    type: str
    severity: Severity
    title: str
    message: str
    timestamp: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ErrorStore:
    def __init__(self, history_limit: int = HISTORY_LIMIT, max_auto_retries: int = MAX_AUTO_RETRIES):
        self.current_error: Optional[ErrorRecord] = None
        self.is_modal_open = False
        self.auto_retry_count = 0
        self.max_auto_retries = max_auto_retries
        self._history: Deque[ErrorRecord] = deque(maxlen=history_limit)

    @property
    def has_active_error(self) -> bool:
        return self.current_error is not None

    @property
    def error_config(self) -> Optional[ErrorType]:
        if self.current_error is None:
            return None
        return get_error_type(self.current_error.type)

    @property
    def can_retry(self) -> bool:
        config = self.error_config
        if config is None:
            return False
        return config.retryable and self.auto_retry_count < self.max_auto_retries

    @property
    def recent_errors(self) -> List[ErrorRecord]:
        return list(self._history)

    def show_error(
        self,
        error_type: str,
        custom_message: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ErrorRecord:
        config = get_error_type(error_type)
        record = ErrorRecord(
            type=error_type,
            severity=config.severity,
            title=config.title,
            message=custom_message or config.default_message,
            timestamp=datetime.now(timezone.utc).isoformat(),
            metadata=metadata or {},
        )
        self.current_error = record
        self._history.appendleft(record)
        self.is_modal_open = True
        log.warning("error shown type=%s message=%s", error_type, record.message)
        return record

    def dismiss_error(self) -> None:
        self.current_error = None
        self.is_modal_open = False
        self.auto_retry_count = 0

    def increment_retry_count(self) -> None:
        self.auto_retry_count += 1

    def reset_retry_count(self) -> None:
        self.auto_retry_count = 0

    def clear_history(self) -> None:
        self._history.clear()
