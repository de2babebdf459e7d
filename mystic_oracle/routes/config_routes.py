from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from ..errors import ConfigError
from ..oracle import OracleSession
from ..providers import PROVIDERS, fetch_available_models
from .deps import get_session

log = logging.getLogger("oracle.routes.config")
router = APIRouter(prefix="/config", tags=["config"])


class ConfigUpdate(BaseModel):
    provider: str = Field(..., min_length=1)
    apiKey: str = ""
    modelName: Optional[str] = None
    persist: bool = False


class LocaleUpdate(BaseModel):
    locale: str = Field(..., min_length=1)


@router.get("")
def get_config(session: OracleSession = Depends(get_session)) -> Dict[str, Any]:
    out = session.config.public_view()
    out["mode"] = session.mode
    out["providers"] = [{"id": p.id, "name": p.name, "requiresKey": p.requires_key} for p in PROVIDERS.values()]
    return out


@router.put("")
def update_config(req: ConfigUpdate, session: OracleSession = Depends(get_session)) -> Dict[str, Any]:
    try:
        session.config.update_config(req.provider, req.apiKey, req.persist, req.modelName)
    except ConfigError as e:
        raise HTTPException(status_code=400, detail=e.message)
    session.apply_config()
    return session.config.public_view()


@router.delete("")
def clear_config(session: OracleSession = Depends(get_session)) -> Dict[str, Any]:
    session.config.clear_config()
    session.apply_config()
    return session.config.public_view()


@router.get("/models")
async def list_models(
    provider: Optional[str] = Query(None),
    session: OracleSession = Depends(get_session),
) -> Dict[str, Any]:
    provider_id = provider or session.config.provider
    try:
        models = await fetch_available_models(provider_id, session.config.api_key)
    except ConfigError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except Exception as e:
        log.warning("model listing failed provider=%s", provider_id)
        raise HTTPException(status_code=502, detail=f"Failed to fetch models: {e}")
    return {"provider": provider_id, "models": [m.model_dump() for m in models]}


@router.put("/locale")
def set_locale(req: LocaleUpdate, session: OracleSession = Depends(get_session)) -> Dict[str, Any]:
    locale = session.config.set_locale(req.locale)
    session.apply_config()
    return {"locale": locale}
