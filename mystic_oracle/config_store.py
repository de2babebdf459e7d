"""Persisted LLM configuration: provider, API key, model and locale.

Backed by a small JSON file; see LLMConfigStore for what is written.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel

from .i18n import normalize_locale
from .providers import get_provider, provider_display_name

log = logging.getLogger("oracle.config")

DEFAULT_PROVIDER = "gemini"


class LLMConfig(BaseModel):
    provider: str
    api_key: str = ""
    model_name: Optional[str] = None


def _mkdir(p: Path) -> None:
    os.makedirs(p, exist_ok=True)


class LLMConfigStore:
    """Provider/API key/model/locale settings backed by a JSON file.

    The API key is written to disk only when `persist_keys` is enabled;
    otherwise just the provider, model and locale preferences are kept.
    """

    def __init__(self, path: Path, provider: str = DEFAULT_PROVIDER, locale: str = "en"):
        self.path = Path(path)
        self.provider = provider
        self.api_key = ""
        self.model_name: Optional[str] = None
        self.persist_keys = False
        self.locale = normalize_locale(locale)

    @property
    def provider_name(self) -> str:
        return provider_display_name(self.provider)

    @property
    def is_configured(self) -> bool:
        return len(self.api_key) > 0

    @property
    def has_valid_config(self) -> bool:
        return bool(self.provider) and len(self.api_key) > 0

    def as_llm_config(self) -> LLMConfig:
        return LLMConfig(provider=self.provider, api_key=self.api_key, model_name=self.model_name)

    def public_view(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "providerName": self.provider_name,
            "modelName": self.model_name,
            "isConfigured": self.is_configured,
            "persistKeys": self.persist_keys,
            "locale": self.locale,
        }

    def set_provider(self, provider: str) -> None:
        get_provider(provider)
        self.provider = provider

    def set_api_key(self, api_key: str) -> None:
        self.api_key = api_key

    def update_config(
        self,
        provider: str,
        api_key: str,
        persist: bool = False,
        model_name: Optional[str] = None,
    ) -> None:
        self.set_provider(provider)
        self.api_key = api_key
        self.model_name = model_name
        self.persist_keys = persist
        self._save()
        log.info("llm config updated provider=%s model=%s persist=%s", provider, model_name, persist)

    def set_locale(self, locale: str) -> str:
        self.locale = normalize_locale(locale)
        self._save()
        return self.locale

    def toggle_persistence(self, enable: bool) -> None:
        self.update_config(self.provider, self.api_key, enable, self.model_name)

    def clear_config(self) -> None:
        self.api_key = ""
        self.persist_keys = False
        if self.path.exists():
            self.path.unlink()

    def load_from_storage(self) -> None:
        if not self.path.exists():
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError):
            log.exception("failed to load llm config path=%s", self.path)
            return

        self.provider = data.get("provider") or DEFAULT_PROVIDER
        self.model_name = data.get("modelName")
        self.persist_keys = bool(data.get("persistKeys"))
        self.locale = normalize_locale(data.get("locale") or self.locale)
        # only restore the key if persistence was enabled
        if self.persist_keys and data.get("apiKey"):
            self.api_key = data["apiKey"]

    def _save(self) -> None:
        _mkdir(self.path.parent)
        data: Dict[str, Any] = {
            "provider": self.provider,
            "modelName": self.model_name,
            "persistKeys": self.persist_keys,
            "locale": self.locale,
        }
        if self.persist_keys:
            data["apiKey"] = self.api_key
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
