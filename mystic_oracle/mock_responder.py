"""Mock responder for development and UI testing.

Simulates LLM streaming without any network call:
- a thinking delay before the first event
- character-by-character text streaming
- slash commands that emit card components or simulated failures
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional

from .deck import (
    Orientation,
    draw_forced_orientation,
    draw_multiple,
    draw_single,
    get_deck,
    spread_type_for,
)
from .errors import SimulatedError
from .events import ComponentEvent, DoneEvent, ResponseEvent, TextEvent, collect_text
from .i18n import t

log = logging.getLogger("oracle.mock")

Sleep = Callable[[float], Awaitable[Any]]


class Action(Enum):
    CARD = "card"
    SPREAD = "spread"
    DECK = "deck"
    LITERAL = "literal"
    ERROR = "error"
    STREAM_ERROR = "stream_error"


@dataclass(frozen=True)
class Command:
    action: Action
    deck_type: str = "full"
    count: int = 1
    orientation: Optional[Orientation] = None
    mode: str = "single"
    text_key: str = ""
    code: str = ""
    metadata: Optional[Dict[str, Any]] = None


COMMANDS: Dict[str, Command] = {
    "/draw": Command(Action.CARD),
    "/card": Command(Action.CARD),
    "/draw-reversed": Command(Action.CARD, orientation="reversed"),
    "/draw-major": Command(Action.CARD, deck_type="major"),
    "/spread": Command(Action.SPREAD, count=3),
    "/spread-major": Command(Action.SPREAD, deck_type="major", count=3),
    "/celtic-cross": Command(Action.SPREAD, count=10),
    "/celtic-major": Command(Action.SPREAD, deck_type="major", count=10),
    "/deck": Command(Action.DECK, mode="single", count=1),
    "/deck-multiple": Command(Action.DECK, mode="multiple", count=3),
    "/help": Command(Action.LITERAL, text_key="mock.help"),
    "/markdown": Command(Action.LITERAL, text_key="mock.markdownDemo"),
    "/md": Command(Action.LITERAL, text_key="mock.markdownDemo"),
    "/error": Command(Action.ERROR, text_key="mock.errors.mystical", code="MYSTICAL_ERROR"),
    "/error-network": Command(Action.ERROR, text_key="mock.errors.network", code="NETWORK_ERROR"),
    "/error-timeout": Command(
        Action.ERROR, text_key="mock.errors.timeout", code="TIMEOUT", metadata={"timeout": 30}
    ),
    "/error-stream": Command(Action.STREAM_ERROR, text_key="mock.errors.streaming", code="STREAMING_ERROR"),
    "/error-rate-limit": Command(
        Action.ERROR,
        text_key="mock.errors.rateLimit",
        code="RATE_LIMIT",
        metadata={"retry_after": 60, "requests_remaining": 0},
    ),
}


def parse_command(message: str) -> Optional[Command]:
    return COMMANDS.get(message.strip().lower())


class MockResponder:
    def __init__(
        self,
        thinking_delay: float = 1.0,
        char_delay: float = 0.03,
        locale: str = "en",
        rng: Optional[random.Random] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.thinking_delay = thinking_delay
        self.char_delay = char_delay
        self.locale = locale
        self.rng = rng or random.Random()
        self._sleep = sleep

    async def stream_response(self, user_message: str) -> AsyncIterator[ResponseEvent]:
        await self._sleep(self.thinking_delay)

        command = parse_command(user_message)
        if command is None:
            async for event in self._stream_text(self.generate_mock_response(user_message)):
                yield event
            return

        log.info("mock command action=%s", command.action.value)

        if command.action is Action.CARD:
            yield self._card_event(command)
        elif command.action is Action.SPREAD:
            yield self._spread_event(command)
        elif command.action is Action.DECK:
            yield ComponentEvent(component_name="TarotDeck", data={"mode": command.mode, "count": command.count})
        elif command.action is Action.LITERAL:
            async for event in self._stream_text(t(command.text_key, self.locale)):
                yield event
        elif command.action is Action.STREAM_ERROR:
            buffer = ""
            for char in t("mock.streamPrefix", self.locale):
                buffer += char
                yield TextEvent(chunk=char, full_text=buffer)
                await self._sleep(self.char_delay)
            raise SimulatedError(t(command.text_key, self.locale), command.code, {"partial_text": buffer})
        else:
            raise SimulatedError(t(command.text_key, self.locale), command.code, dict(command.metadata or {}))

    async def send_message(self, user_message: str) -> str:
        return await collect_text(self.stream_response(user_message))

    def generate_mock_response(self, user_message: str) -> str:
        templates = t("mock.responses", self.locale)
        template = templates[self.rng.randrange(len(templates))]
        return template.replace("{query}", user_message)

    async def _stream_text(self, text: str) -> AsyncIterator[ResponseEvent]:
        buffer = ""
        for char in text:
            buffer += char
            yield TextEvent(chunk=char, full_text=buffer)
            await self._sleep(self.char_delay)
        yield DoneEvent(full_text=buffer)

    def _card_event(self, command: Command) -> ComponentEvent:
        deck = get_deck(command.deck_type)
        if command.orientation:
            card = draw_forced_orientation(deck, command.orientation, self.rng)
        else:
            card = draw_single(deck, self.rng)
        data = card.to_payload()
        data["isRevealed"] = True
        return ComponentEvent(component_name="TarotCard", data=data)

    def _spread_event(self, command: Command) -> ComponentEvent:
        cards = draw_multiple(get_deck(command.deck_type), command.count, self.rng)
        return ComponentEvent(
            component_name="TarotSpread",
            data={
                "spreadType": spread_type_for(len(cards)),
                "deckType": command.deck_type,
                "cards": [c.to_payload() for c in cards],
                "autoReveal": True,
                "revealDelay": 500,
            },
        )
