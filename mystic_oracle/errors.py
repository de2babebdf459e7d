"""
Mystic Oracle exception hierarchy.

All custom exceptions live here to avoid circular imports.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class OracleError(Exception):
    """Base error carrying a machine-readable `code`.

    The code is what the error classifier looks at first, so every raise
    site must set one.
    """

    def __init__(self, message: str, code: str, metadata: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.metadata = metadata or {}


class SimulatedError(OracleError):
    """Raised only by the mock responder's /error* commands."""


class ResponderError(OracleError):
    """Real LLM backend failure (auth, quota, transport, bad tool payload)."""


class ConfigError(OracleError):
    def __init__(self, message: str, code: str = "VALIDATION_ERROR", metadata: Optional[Dict[str, Any]] = None):
        super().__init__(message, code, metadata)
