"""Rider-Waite tarot deck (78 cards) + draw helpers.

- Major arcana: 22 archetypes, no suit/rank
- Minor arcana: 4 suits x 14 ranks, named "<rank> of <suit>"
- Provides: get_deck(), draw_single(), draw_forced_orientation(), draw_multiple()

Decks are immutable tuples built at import time. Every draw helper takes an
optional random.Random so draws can be reproduced from a seed.
"""

from __future__ import annotations

import random
from typing import Dict, List, Literal, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .utils.rng import fisher_yates_shuffle


Orientation = Literal["upright", "reversed"]
Arcana = Literal["major", "minor"]
DeckType = Literal["full", "major"]


_RNG = random.Random()


class DeckError(RuntimeError):
    pass


class Card(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    arcana: Arcana
    suit: Optional[str] = None
    rank: Optional[str] = None


class DrawnCard(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    card_name: str = Field(..., alias="cardName")
    orientation: Orientation
    arcana: Optional[Arcana] = None
    suit: Optional[str] = None
    rank: Optional[str] = None

    def to_payload(self) -> Dict[str, str]:
        return self.model_dump(by_alias=True, exclude_none=True)


MAJOR_ARCANA_NAMES: Tuple[str, ...] = (
    "The Fool",
    "The Magician",
    "The High Priestess",
    "The Empress",
    "The Emperor",
    "The Hierophant",
    "The Lovers",
    "The Chariot",
    "Strength",
    "The Hermit",
    "Wheel of Fortune",
    "Justice",
    "The Hanged Man",
    "Death",
    "Temperance",
    "The Devil",
    "The Tower",
    "The Star",
    "The Moon",
    "The Sun",
    "Judgement",
    "The World",
)

MINOR_ARCANA_SUITS: Tuple[str, ...] = ("Cups", "Pentacles", "Wands", "Swords")

MINOR_ARCANA_RANKS: Tuple[str, ...] = (
    "Ace", "2", "3", "4", "5", "6", "7", "8", "9", "10",
    "Page", "Knight", "Queen", "King",
)


def _build_minor_arcana() -> Tuple[Card, ...]:
    cards: List[Card] = []
    for suit in MINOR_ARCANA_SUITS:
        for rank in MINOR_ARCANA_RANKS:
            cards.append(Card(name=f"{rank} of {suit}", arcana="minor", suit=suit, rank=rank))
    return tuple(cards)


MAJOR_ARCANA: Tuple[Card, ...] = tuple(Card(name=n, arcana="major") for n in MAJOR_ARCANA_NAMES)
MINOR_ARCANA: Tuple[Card, ...] = _build_minor_arcana()
FULL_DECK: Tuple[Card, ...] = MAJOR_ARCANA + MINOR_ARCANA

DECKS: Dict[str, Tuple[Card, ...]] = {
    "full": FULL_DECK,
    "major": MAJOR_ARCANA,
}

# spread type -> card count
SPREADS: Dict[str, int] = {
    "single-card": 1,
    "three-card": 3,
    "celtic-cross": 10,
}


def get_deck(deck_type: str = "full") -> Tuple[Card, ...]:
    try:
        return DECKS[deck_type]
    except KeyError:
        raise DeckError(f"Unknown deck type: {deck_type}") from None


def validate_deck(deck: Sequence[Card]) -> None:
    names = [c.name for c in deck]
    if len(names) != len(set(names)):
        raise DeckError("Duplicate card names detected.")
    for c in deck:
        if c.arcana == "minor" and (c.suit not in MINOR_ARCANA_SUITS or c.rank not in MINOR_ARCANA_RANKS):
            raise DeckError(f"Card {c.name} has invalid suit/rank {c.suit}/{c.rank}")


def spread_type_for(count: int) -> str:
    """Spread label used by the chat components for a multi-card draw."""
    if count == 1:
        return "single-card"
    return "three-card" if count == 3 else "celtic-cross"


def _random_orientation(rng: random.Random) -> Orientation:
    return "reversed" if rng.random() < 0.5 else "upright"


def _drawn(card: Card, orientation: Orientation) -> DrawnCard:
    return DrawnCard(
        card_name=card.name,
        orientation=orientation,
        arcana=card.arcana,
        suit=card.suit,
        rank=card.rank,
    )


def _pick(deck: Sequence[Card], rng: random.Random) -> Card:
    if not deck:
        raise DeckError("Cannot draw from an empty deck.")
    return deck[rng.randrange(len(deck))]


def draw_single(deck: Sequence[Card], rng: Optional[random.Random] = None) -> DrawnCard:
    rng = rng or _RNG
    card = _pick(deck, rng)
    return _drawn(card, _random_orientation(rng))


def draw_forced_orientation(
    deck: Sequence[Card],
    orientation: Orientation,
    rng: Optional[random.Random] = None,
) -> DrawnCard:
    """Draw one card with a fixed orientation.

    Card selection consumes exactly the same single random call as
    draw_single(); only the orientation call is skipped.
    """
    if orientation not in ("upright", "reversed"):
        raise DeckError(f"Invalid orientation: {orientation}")
    rng = rng or _RNG
    return _drawn(_pick(deck, rng), orientation)


def draw_multiple(
    deck: Sequence[Card],
    count: int,
    rng: Optional[random.Random] = None,
    orientation: Optional[Orientation] = None,
) -> List[DrawnCard]:
    """Draw up to `count` distinct cards.

    Negative counts are rejected; counts above the deck size are clamped.
    A forced `orientation` skips the per-card orientation call, so the
    same seed selects the same cards either way.
    """
    if count < 0:
        raise DeckError(f"Card count must be >= 0, got {count}")
    if orientation is not None and orientation not in ("upright", "reversed"):
        raise DeckError(f"Invalid orientation: {orientation}")
    rng = rng or _RNG
    shuffled = fisher_yates_shuffle(deck, rng)
    return [_drawn(card, orientation or _random_orientation(rng)) for card in shuffled[:count]]
