"""Locale string tables (en, zh-TW).

Tables live in mystic_oracle/data/locales/<locale>.json and are loaded on
first use. Lookups fall back to English, then to the key itself.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Tuple

LOCALES_DIR = Path(__file__).resolve().parent / "data" / "locales"
DEFAULT_LOCALE = "en"
SUPPORTED_LOCALES: Tuple[str, ...] = ("en", "zh-TW")

log = logging.getLogger("oracle.i18n")


class LocaleError(RuntimeError):
    pass


_CACHE: Dict[str, Dict[str, Any]] = {}


def _load_json(locale: str) -> Dict[str, Any]:
    path = LOCALES_DIR / f"{locale}.json"
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise LocaleError(f"Locale file not found at: {path}") from e

    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise LocaleError(f"Invalid JSON in {path}: {e}") from e


def normalize_locale(locale: str | None) -> str:
    if not locale:
        return DEFAULT_LOCALE
    if locale in SUPPORTED_LOCALES:
        return locale
    if locale.lower().startswith("zh"):
        return "zh-TW"
    return DEFAULT_LOCALE


def get_messages(locale: str) -> Dict[str, Any]:
    locale = normalize_locale(locale)
    if locale not in _CACHE:
        _CACHE[locale] = _load_json(locale)
    return _CACHE[locale]


def _resolve(messages: Dict[str, Any], key: str) -> Any:
    node: Any = messages
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def t(key: str, locale: str = DEFAULT_LOCALE, **params: Any) -> Any:
    """Translate a dotted key.

    Strings are interpolated with `{name}` placeholders when params are
    given; lists and nested tables are returned as-is.
    """
    value = _resolve(get_messages(locale), key)
    if value is None and normalize_locale(locale) != DEFAULT_LOCALE:
        value = _resolve(get_messages(DEFAULT_LOCALE), key)
    if value is None:
        log.warning("missing translation key=%s locale=%s", key, locale)
        return key
    if isinstance(value, str) and params:
        for name, replacement in params.items():
            value = value.replace("{" + name + "}", str(replacement))
    return value
