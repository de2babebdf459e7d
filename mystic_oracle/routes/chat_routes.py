from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from ..events import event_payload, to_sse
from ..oracle import OracleSession, TurnErr
from .deps import get_session

log = logging.getLogger("oracle.routes.chat")
router = APIRouter(prefix="/chat", tags=["chat"])


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=4000)
    retry: bool = False


class ChatResponse(BaseModel):
    ok: bool
    events: List[Dict[str, Any]]
    fullText: str
    error: Optional[Dict[str, Any]] = None


@router.post("/stream")
async def chat_stream(req: ChatRequest, session: OracleSession = Depends(get_session)):
    log.info("chat/stream mode=%s", session.mode)

    async def sse() -> AsyncIterator[str]:
        async for event in session.stream_turn(req.message):
            yield to_sse(event)

    return StreamingResponse(
        sse(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.post("", response_model=ChatResponse)
async def chat(req: ChatRequest, session: OracleSession = Depends(get_session)):
    result = await session.run_turn(req.message, retry=req.retry)
    return ChatResponse(
        ok=result.ok,
        events=[event_payload(e) for e in result.events],
        fullText=result.full_text,
        error=result.error.model_dump() if isinstance(result, TurnErr) else None,
    )


@router.get("/messages")
def messages(session: OracleSession = Depends(get_session)) -> Dict[str, Any]:
    return {"messages": [m.model_dump(by_alias=True, exclude_none=True) for m in session.chat.messages]}


@router.post("/clear")
def clear(session: OracleSession = Depends(get_session)) -> Dict[str, Any]:
    session.reset()
    return {"ok": True}
