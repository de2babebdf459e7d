from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..oracle import OracleSession
from .deps import get_session

router = APIRouter(prefix="/errors", tags=["errors"])


def _snapshot(session: OracleSession) -> Dict[str, Any]:
    store = session.errors
    config = store.error_config
    return {
        "current": store.current_error.model_dump() if store.current_error else None,
        "config": config.model_dump() if config else None,
        "isModalOpen": store.is_modal_open,
        "canRetry": store.can_retry,
        "autoRetryCount": store.auto_retry_count,
        "history": [r.model_dump() for r in store.recent_errors],
    }


@router.get("")
def errors(session: OracleSession = Depends(get_session)) -> Dict[str, Any]:
    return _snapshot(session)


@router.post("/dismiss")
def dismiss(session: OracleSession = Depends(get_session)) -> Dict[str, Any]:
    session.errors.dismiss_error()
    return _snapshot(session)


@router.delete("/history")
def clear_history(session: OracleSession = Depends(get_session)) -> Dict[str, Any]:
    session.errors.clear_history()
    return _snapshot(session)
