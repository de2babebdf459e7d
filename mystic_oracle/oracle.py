"""Oracle session: wires a responder to the chat, config and error stores.

One OracleSession is the whole mutable state of a running oracle. The HTTP
layer holds it on `app.state` and every route goes through it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, List, Optional, Union

from .chat_store import ChatMessage, ChatStore
from .components import create_component_message
from .config_store import LLMConfigStore
from .error_handler import ClassifiedError, ErrorHandler, Sleep, classify_error
from .error_store import ErrorStore
from .errors import ResponderError
from .events import ComponentEvent, DoneEvent, ErrorEvent, ResponseEvent, Responder, TextEvent, is_terminal
from .mock_responder import MockResponder
from .real_responder import RealResponder
from .settings import Settings, load_settings
from .utils.rng import seeded_random

log = logging.getLogger("oracle.session")


@dataclass
class TurnOk:
    events: List[ResponseEvent]
    full_text: str
    ok: bool = field(default=True, init=False)


@dataclass
class TurnErr:
    events: List[ResponseEvent]
    error: ClassifiedError
    ok: bool = field(default=False, init=False)

    @property
    def full_text(self) -> str:
        return _text_of(self.events)


TurnResult = Union[TurnOk, TurnErr]


def _text_of(events: List[ResponseEvent]) -> str:
    text = ""
    for event in events:
        if isinstance(event, DoneEvent):
            return event.full_text
        if isinstance(event, TextEvent):
            text = event.full_text
    return text


class OracleSession:
    def __init__(
        self,
        responder: Responder,
        chat: ChatStore,
        errors: ErrorStore,
        config: LLMConfigStore,
        handler: Optional[ErrorHandler] = None,
        settings: Optional[Settings] = None,
    ):
        self.responder = responder
        self.chat = chat
        self.errors = errors
        self.config = config
        self.handler = handler or ErrorHandler(errors, config)
        self.settings = settings

    @property
    def mode(self) -> str:
        return "real" if isinstance(self.responder, RealResponder) else "mock"

    def _reports_in_band(self) -> bool:
        # RealResponder hands its own failures to on_error before yielding ErrorEvent
        return getattr(self.responder, "on_error", None) is not None

    def _begin_turn(self, text: str) -> str:
        self.chat.append(ChatMessage(role="user", content=text))
        placeholder = self.chat.append(ChatMessage(role="assistant", content=""))
        log.info("turn start mode=%s chars=%d", self.mode, len(text))
        return placeholder.id

    def _store_component(self, placeholder_id: str, event: ComponentEvent) -> None:
        message = create_component_message(event.component_name, event.data)
        if message is None:
            self.errors.show_error(
                "COMPONENT_LOAD_ERROR",
                metadata={"component": event.component_name},
            )
            return
        placeholder = self.chat.get(placeholder_id)
        if placeholder is not None and not placeholder.content and placeholder.component_name is None:
            self.chat.update_by_id(
                placeholder_id,
                component_name=message.component_name,
                component_data=message.component_data,
            )
        else:
            self.chat.append(message)

    async def _drive(self, text: str, placeholder_id: str) -> AsyncIterator[ResponseEvent]:
        async for event in self.responder.stream_response(text):
            if isinstance(event, TextEvent):
                self.chat.update_by_id(placeholder_id, content=event.full_text)
            elif isinstance(event, ComponentEvent):
                self._store_component(placeholder_id, event)
            yield event
            if is_terminal(event):
                return

    def _classify_event(self, event: ErrorEvent) -> ClassifiedError:
        classified = classify_error(ResponderError(event.message, event.code or "UNKNOWN_ERROR"))
        if not self._reports_in_band():
            self.handler.report(classified)
        return classified

    def _fail(self, error: BaseException) -> ClassifiedError:
        log.exception("turn failed")
        classified = classify_error(error)
        self.handler.report(classified)
        return classified

    async def stream_turn(self, text: str) -> AsyncIterator[ResponseEvent]:
        """Run one user turn, keeping the chat store in step with the events.

        Never raises for responder failures: they are recorded in the error
        store and end the stream with an ErrorEvent. Partial text stays in
        the assistant message.
        """
        placeholder_id = self._begin_turn(text)
        try:
            async for event in self._drive(text, placeholder_id):
                if isinstance(event, ErrorEvent):
                    self._classify_event(event)
                yield event
        except Exception as e:
            classified = self._fail(e)
            yield ErrorEvent(message=classified.message, code=classified.code)

    async def run_turn(
        self,
        text: str,
        retry: bool = False,
        max_attempts: int = 3,
        sleep: Sleep = asyncio.sleep,
    ) -> TurnResult:
        """Collect a whole turn into TurnOk / TurnErr.

        With `retry`, the responder is re-run with exponential backoff and
        only the final failure is recorded.
        """
        if not retry:
            events = [event async for event in self.stream_turn(text)]
            last = events[-1] if events else None
            if isinstance(last, ErrorEvent):
                return TurnErr(events, classify_error(ResponderError(last.message, last.code or "UNKNOWN_ERROR")))
            return TurnOk(events, _text_of(events))

        placeholder_id = self._begin_turn(text)
        events: List[ResponseEvent] = []

        async def attempt() -> List[ResponseEvent]:
            events.clear()
            self.chat.update_by_id(placeholder_id, content="")
            async for event in self._drive(text, placeholder_id):
                events.append(event)
                if isinstance(event, ErrorEvent):
                    raise ResponderError(event.message, event.code or "UNKNOWN_ERROR")
            return list(events)

        # attempts stay quiet; the final failure is reported once below
        on_error = getattr(self.responder, "on_error", None)
        if on_error is not None:
            self.responder.on_error = None
        try:
            done = await self.handler.retry_with_backoff(attempt, max_attempts, sleep)
        except ResponderError as e:
            classified = classify_error(e)
            self.handler.report(classified)
            return TurnErr(list(events), classified)
        except Exception as e:
            classified = self._fail(e)
            events.append(ErrorEvent(message=classified.message, code=classified.code))
            return TurnErr(list(events), classified)
        finally:
            if on_error is not None:
                self.responder.on_error = on_error
        return TurnOk(done, _text_of(done))

    def apply_config(self) -> None:
        """Push config store changes (key, provider, model, locale) to the responder."""
        self.responder.locale = self.config.locale
        if isinstance(self.responder, RealResponder):
            self.responder.config = self.config.as_llm_config()

    def reset(self) -> None:
        self.chat.clear()
        if isinstance(self.responder, RealResponder):
            self.responder.clear_history()
        log.info("session reset")


def build_responder(settings: Settings, config: LLMConfigStore, handler: ErrorHandler) -> Responder:
    rng = seeded_random(settings.seed, "oracle") if settings.seed else None
    if settings.mode == "real":
        return RealResponder(
            config.as_llm_config(),
            locale=config.locale,
            on_error=handler.handle_llm_error,
            rng=rng,
        )
    return MockResponder(
        thinking_delay=settings.thinking_delay,
        char_delay=settings.char_delay,
        locale=config.locale,
        rng=rng,
    )


def create_session(settings: Optional[Settings] = None) -> OracleSession:
    settings = settings or load_settings()

    config = LLMConfigStore(settings.config_path, locale=settings.locale)
    config.load_from_storage()
    # environment wins over the stored preferences
    if settings.provider:
        config.set_provider(settings.provider)
    if settings.api_key:
        config.set_api_key(settings.api_key)
    if settings.model_name:
        config.model_name = settings.model_name

    errors = ErrorStore()
    handler = ErrorHandler(errors, config)
    responder = build_responder(settings, config, handler)
    log.info("session created mode=%s provider=%s locale=%s", settings.mode, config.provider, config.locale)
    return OracleSession(responder, ChatStore(), errors, config, handler, settings)
