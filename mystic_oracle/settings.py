"""Runtime settings read from the environment (and a repo-root .env file)."""

import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from .errors import ConfigError

REPO_ROOT = Path(__file__).resolve().parents[1]

# Load environment variables from .env file
load_dotenv(REPO_ROOT / ".env")


class Settings(BaseModel):
    mode: Literal["mock", "real"] = "mock"
    thinking_delay: float = 1.0
    char_delay: float = 0.03
    config_path: Path = REPO_ROOT / "data" / "llm_config.json"
    seed: Optional[str] = None
    locale: str = "en"
    provider: Optional[str] = None
    api_key: Optional[str] = None
    model_name: Optional[str] = None


def _ms(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw) / 1000.0
    except ValueError:
        raise ConfigError(f"{name} must be a number of milliseconds, got {raw!r}") from None


def load_settings() -> Settings:
    config_path = Path(os.getenv("ORACLE_CONFIG_PATH", str(REPO_ROOT / "data" / "llm_config.json")))
    if not config_path.is_absolute():
        config_path = REPO_ROOT / config_path
    return Settings(
        mode=os.getenv("ORACLE_MODE", "mock").strip().lower(),
        thinking_delay=_ms("ORACLE_THINKING_DELAY_MS", "1000"),
        char_delay=_ms("ORACLE_CHAR_DELAY_MS", "30"),
        config_path=config_path,
        seed=os.getenv("ORACLE_SEED") or None,
        locale=os.getenv("ORACLE_LOCALE", "en"),
        provider=os.getenv("ORACLE_PROVIDER") or None,
        api_key=os.getenv("ORACLE_API_KEY") or None,
        model_name=os.getenv("ORACLE_MODEL") or None,
    )
