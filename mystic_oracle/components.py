"""Registry of the tarot components the chat client knows how to render."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .chat_store import ChatMessage

log = logging.getLogger("oracle.components")

COMPONENTS = ("TarotCard", "TarotSpread", "TarotDeck")

SPREAD_TYPES = ("three-card", "celtic-cross", "single-card")


def is_valid_component(component_name: str) -> bool:
    return component_name in COMPONENTS


def validate_component_data(component_name: str, data: Dict[str, Any]) -> List[str]:
    """Return a list of problems; empty when the payload is renderable."""
    errors: List[str] = []

    if component_name == "TarotCard":
        if not data.get("cardName"):
            errors.append("TarotCard requires cardName")
        if data.get("orientation") and data["orientation"] not in ("upright", "reversed"):
            errors.append('TarotCard orientation must be "upright" or "reversed"')
    elif component_name == "TarotSpread":
        if not isinstance(data.get("cards"), list):
            errors.append("TarotSpread requires cards array")
        if data.get("spreadType") and data["spreadType"] not in SPREAD_TYPES:
            errors.append('TarotSpread spreadType must be "three-card", "celtic-cross", or "single-card"')
    elif component_name == "TarotDeck":
        if data.get("mode") and data["mode"] not in ("single", "multiple"):
            errors.append('TarotDeck mode must be "single" or "multiple"')
    else:
        errors.append(f"Unknown component: {component_name}")

    return errors


def create_component_message(component_name: str, data: Dict[str, Any]) -> Optional[ChatMessage]:
    errors = validate_component_data(component_name, data)
    if errors:
        log.error("invalid component data name=%s errors=%s", component_name, errors)
        return None
    return ChatMessage(role="assistant", component_name=component_name, component_data=data)
