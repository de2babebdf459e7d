"""LLM-backed responder with card-drawing tools.

Same streaming contract as MockResponder. A pydantic-ai Agent drives the
model -> tools -> model loop against any OpenAI-compatible provider; this
module only translates the agent's stream into response events and keeps
the conversation history. Failures never escape the stream: they are
reported to `on_error` and surface as a terminal ErrorEvent.
"""

from __future__ import annotations

import logging
import random
from typing import Any, AsyncIterator, Callable, List, Optional

import openai
from pydantic_ai import Agent, AgentRunResultEvent
from pydantic_ai.exceptions import ModelHTTPError, UnexpectedModelBehavior, UsageLimitExceeded
from pydantic_ai.messages import (
    FunctionToolResultEvent,
    ModelMessage,
    PartDeltaEvent,
    PartStartEvent,
    TextPart,
    TextPartDelta,
    ToolReturnPart,
)
from pydantic_ai.models import Model
from pydantic_ai.usage import UsageLimits

from .config_store import LLMConfig
from .errors import OracleError, ResponderError
from .events import DoneEvent, ErrorEvent, ResponseEvent, TextEvent, collect_text
from .i18n import t
from .prompts import system_prompt
from .providers import create_model
from .tools import OracleDeps, register_tools, tool_result_to_event

log = logging.getLogger("oracle.real")

# model requests per turn, tool round trips included
MAX_MODEL_REQUESTS = 6

ModelFactory = Callable[[str, Optional[str], Optional[str]], Model]

# HTTP status -> error code, for provider errors surfaced by the agent
_STATUS_CODES = {
    401: "INVALID_API_KEY",
    403: "INVALID_API_KEY",
    408: "TIMEOUT",
    429: "RATE_LIMIT",
    504: "TIMEOUT",
}


def _retry_after(response: Any) -> int:
    value = response.headers.get("retry-after", "60") if response is not None else "60"
    return int(value) if value.isdigit() else 60


def _from_openai(error: Optional[BaseException]) -> Optional[OracleError]:
    if error is None:
        return None
    message = getattr(error, "message", None) or str(error) or type(error).__name__
    if isinstance(error, openai.AuthenticationError):
        return ResponderError(message, "INVALID_API_KEY")
    if isinstance(error, openai.RateLimitError):
        return ResponderError(message, "RATE_LIMIT", {"retry_after": _retry_after(error.response)})
    if isinstance(error, openai.APITimeoutError):
        return ResponderError(message, "TIMEOUT")
    if isinstance(error, openai.APIConnectionError):
        return ResponderError(message, "NETWORK_ERROR")
    if isinstance(error, openai.APIStatusError):
        return ResponderError(message, "INVALID_RESPONSE", {"status": error.status_code})
    return None


def to_responder_error(error: BaseException) -> OracleError:
    """Map SDK, agent and runtime exceptions onto coded oracle errors."""
    if isinstance(error, OracleError):
        return error
    mapped = _from_openai(error) or _from_openai(error.__cause__)
    if mapped is not None:
        return mapped
    message = getattr(error, "message", None) or str(error) or type(error).__name__
    if isinstance(error, ModelHTTPError):
        code = _STATUS_CODES.get(error.status_code, "INVALID_RESPONSE")
        metadata = {"status": error.status_code}
        if code == "RATE_LIMIT":
            metadata["retry_after"] = 60
        return ResponderError(message, code, metadata)
    if isinstance(error, (UnexpectedModelBehavior, UsageLimitExceeded)):
        return ResponderError(message, "INVALID_RESPONSE")
    return ResponderError(message, "UNKNOWN_ERROR", {"name": type(error).__name__})


class RealResponder:
    def __init__(
        self,
        config: LLMConfig,
        locale: str = "en",
        on_error: Optional[Callable[[BaseException], Any]] = None,
        model_factory: ModelFactory = create_model,
        rng: Optional[random.Random] = None,
    ):
        self.config = config
        self.locale = locale
        self.on_error = on_error
        self.history: List[ModelMessage] = []
        self._model_factory = model_factory
        self._rng = rng

    def update_config(self, **fields: Any) -> None:
        self.config = self.config.model_copy(update=fields)

    def clear_history(self) -> None:
        self.history = []

    def build_agent(self) -> Agent[OracleDeps, str]:
        model = self._model_factory(self.config.provider, self.config.api_key, self.config.model_name)
        agent: Agent[OracleDeps, str] = Agent(
            model,
            deps_type=OracleDeps,
            output_type=str,
            instructions=system_prompt(self.locale),
        )
        register_tools(agent)
        return agent

    async def send_message(self, user_message: str) -> str:
        return await collect_text(self.stream_response(user_message))

    async def stream_response(self, user_message: str) -> AsyncIterator[ResponseEvent]:
        try:
            if not self.config.api_key:
                raise ResponderError(t("config.apiKeyMissing", self.locale), "API_KEY_MISSING")

            agent = self.build_agent()
            log.info("real turn provider=%s model=%s history=%d", self.config.provider, self.config.model_name, len(self.history))

            full_text = ""
            run_result = None
            async for event in agent.run_stream_events(
                user_message,
                deps=OracleDeps(rng=self._rng),
                message_history=self.history,
                usage_limits=UsageLimits(request_limit=MAX_MODEL_REQUESTS),
            ):
                chunk = ""
                if isinstance(event, PartStartEvent) and isinstance(event.part, TextPart):
                    chunk = event.part.content
                elif isinstance(event, PartDeltaEvent) and isinstance(event.delta, TextPartDelta):
                    chunk = event.delta.content_delta
                elif isinstance(event, FunctionToolResultEvent) and isinstance(event.result, ToolReturnPart):
                    component = tool_result_to_event(event.result.content)
                    if component is not None:
                        yield component
                elif isinstance(event, AgentRunResultEvent):
                    run_result = event.result

                if chunk:
                    full_text += chunk
                    yield TextEvent(chunk=chunk, full_text=full_text)

            if run_result is not None:
                self.history = run_result.all_messages()

            yield DoneEvent(full_text=full_text)

        except Exception as e:
            log.exception("real responder failed")
            error = to_responder_error(e)
            if self.on_error is not None:
                try:
                    self.on_error(error)
                except Exception:
                    log.warning("failed to notify error handler", exc_info=True)
            yield ErrorEvent(message=error.message, code=error.code)
