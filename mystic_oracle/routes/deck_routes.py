from __future__ import annotations

from typing import Any, Dict, Literal

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from ..deck import DeckError, draw_forced_orientation, draw_multiple, get_deck, spread_type_for

router = APIRouter(prefix="/deck", tags=["deck"])


class DrawRequest(BaseModel):
    deckType: Literal["full", "major"] = "full"
    count: int = Field(1, ge=0, le=78)
    reversed: bool = Field(False, description="If true, every drawn card is reversed.")


@router.get("")
def deck(type: str = Query("full")) -> Dict[str, Any]:
    try:
        cards = get_deck(type)
    except DeckError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {
        "type": type,
        "count": len(cards),
        "cards": [c.model_dump(exclude_none=True) for c in cards],
    }


@router.post("/draw")
def draw(req: DrawRequest) -> Dict[str, Any]:
    deck = get_deck(req.deckType)
    try:
        if req.reversed and req.count == 1:
            drawn = [draw_forced_orientation(deck, "reversed")]
        else:
            drawn = draw_multiple(deck, req.count, orientation="reversed" if req.reversed else None)
    except DeckError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "deckType": req.deckType,
        "spreadType": spread_type_for(len(drawn)),
        "cards": [d.to_payload() for d in drawn],
    }
