"""Tools exposed to the LLM agent, and translation of their results.

The draw functions are plain Python backed by the deck module and return
JSON strings, so the model sees exactly what the chat component receives.
`register_tools` binds them to a pydantic-ai Agent; the agent derives each
tool's schema from the signature and docstring.
"""

from __future__ import annotations

import json
import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Dict, Literal, Optional

from pydantic_ai import Agent, RunContext

from .deck import draw_multiple, draw_single, get_deck, spread_type_for
from .errors import ResponderError
from .events import ComponentEvent

log = logging.getLogger("oracle.tools")

DeckType = Literal["full", "major"]
DeckMode = Literal["single", "multiple"]

# pydantic-ai retries for bad tool arguments
TOOL_CALL_RETRIES = 2


@dataclass
class OracleDeps:
    rng: Optional[random.Random] = None


def _deck_type(args: Dict[str, Any]) -> str:
    deck_type = args.get("deckType") or "full"
    if deck_type not in ("full", "major"):
        raise ResponderError(f"Invalid deckType: {deck_type}", "INVALID_RESPONSE")
    return deck_type


def _draw(args: Dict[str, Any], count: int, rng: Optional[random.Random]) -> str:
    deck_type = _deck_type(args)
    deck = get_deck(deck_type)
    cards = [draw_single(deck, rng)] if count == 1 else draw_multiple(deck, count, rng)
    return json.dumps({"deckType": deck_type, "cards": [c.to_payload() for c in cards]})


def draw_single_card(args: Dict[str, Any], rng: Optional[random.Random] = None) -> str:
    return _draw(args, 1, rng)


def draw_three_card_spread(args: Dict[str, Any], rng: Optional[random.Random] = None) -> str:
    return _draw(args, 3, rng)


def draw_celtic_cross_spread(args: Dict[str, Any], rng: Optional[random.Random] = None) -> str:
    return _draw(args, 10, rng)


def show_interactive_deck(args: Dict[str, Any], rng: Optional[random.Random] = None) -> str:
    mode = args.get("mode") or "single"
    if mode not in ("single", "multiple"):
        raise ResponderError(f"Invalid mode: {mode}", "INVALID_RESPONSE")
    count = args.get("count") or 1
    return json.dumps({"mode": mode, "count": count, "componentType": "TarotDeck"})


TOOLS: Dict[str, Callable[..., str]] = {
    "draw_single_card": draw_single_card,
    "draw_three_card_spread": draw_three_card_spread,
    "draw_celtic_cross_spread": draw_celtic_cross_spread,
    "show_interactive_deck": show_interactive_deck,
}


def run_tool(name: str, arguments: str | Dict[str, Any] | None, rng: Optional[random.Random] = None) -> str:
    fn = TOOLS.get(name)
    if fn is None:
        raise ResponderError(f"Unknown tool: {name}", "INVALID_RESPONSE")
    if isinstance(arguments, dict):
        args = arguments
    else:
        try:
            args = json.loads(arguments) if arguments else {}
        except json.JSONDecodeError as e:
            raise ResponderError(f"Invalid arguments for {name}: {e}", "INVALID_RESPONSE") from e
    if not isinstance(args, dict):
        raise ResponderError(f"Invalid arguments for {name}", "INVALID_RESPONSE")
    log.info("tool call name=%s args=%s", name, args)
    return fn(args, rng)


# --- agent bindings ---

def tool_draw_single_card(ctx: RunContext[OracleDeps], deckType: DeckType = "full") -> str:
    """Draws a single tarot card for a quick reading or answer to a specific question.

    Use 'full' for comprehensive readings, 'major' for archetypal insights.

    Args:
        deckType: 'full' for all 78 cards (major + minor arcana), 'major' for only the 22 major arcana.
    """
    return run_tool("draw_single_card", {"deckType": deckType}, ctx.deps.rng)


def tool_draw_three_card_spread(ctx: RunContext[OracleDeps], deckType: DeckType = "full") -> str:
    """Draws a three-card spread, typically representing past, present, and future.

    Args:
        deckType: 'full' for all 78 cards (major + minor arcana), 'major' for only the 22 major arcana.
    """
    return run_tool("draw_three_card_spread", {"deckType": deckType}, ctx.deps.rng)


def tool_draw_celtic_cross_spread(ctx: RunContext[OracleDeps], deckType: DeckType = "full") -> str:
    """Draws a Celtic Cross spread (10 cards) for a comprehensive, in-depth reading.

    Args:
        deckType: 'full' for all 78 cards (major + minor arcana), 'major' for only the 22 major arcana.
    """
    return run_tool("draw_celtic_cross_spread", {"deckType": deckType}, ctx.deps.rng)


def tool_show_interactive_deck(ctx: RunContext[OracleDeps], mode: DeckMode, count: int = 1) -> str:
    """Shows an interactive tarot deck where the user can select their own cards.

    Use this when the user wants to be more involved in the card selection process.

    Args:
        mode: Whether to draw a single card or multiple cards.
        count: Number of cards to draw (for 'multiple' mode).
    """
    return run_tool("show_interactive_deck", {"mode": mode, "count": count}, ctx.deps.rng)


def register_tools(agent: Agent[OracleDeps, str]) -> None:
    agent.tool(name="draw_single_card", retries=TOOL_CALL_RETRIES)(tool_draw_single_card)
    agent.tool(name="draw_three_card_spread", retries=TOOL_CALL_RETRIES)(tool_draw_three_card_spread)
    agent.tool(name="draw_celtic_cross_spread", retries=TOOL_CALL_RETRIES)(tool_draw_celtic_cross_spread)
    agent.tool(name="show_interactive_deck", retries=TOOL_CALL_RETRIES)(tool_show_interactive_deck)


def tool_result_to_event(result: Any) -> Optional[ComponentEvent]:
    """Turn a tool's JSON result into the chat component it should render."""
    if isinstance(result, str):
        try:
            payload = json.loads(result)
        except json.JSONDecodeError:
            log.exception("failed to parse tool result")
            return None
    else:
        payload = result

    if not isinstance(payload, dict):
        return None

    if payload.get("componentType") == "TarotDeck":
        return ComponentEvent(
            component_name="TarotDeck",
            data={"mode": payload.get("mode"), "count": payload.get("count")},
        )

    cards = payload.get("cards")
    if not isinstance(cards, list) or not cards:
        return None

    if len(cards) == 1:
        data = dict(cards[0])
        data["isRevealed"] = True
        return ComponentEvent(component_name="TarotCard", data=data)

    return ComponentEvent(
        component_name="TarotSpread",
        data={
            "spreadType": spread_type_for(len(cards)),
            "deckType": payload.get("deckType") or "full",
            "cards": cards,
            "autoReveal": True,
            "revealDelay": 500,
        },
    )
