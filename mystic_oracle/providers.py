"""LLM provider registry.

Every supported provider exposes an OpenAI-compatible chat completions API,
so one AsyncOpenAI client covers all of them with a different base URL.
The agent talks to it through pydantic-ai's OpenAI chat model.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from openai import AsyncOpenAI
from pydantic import BaseModel
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from .errors import ConfigError

log = logging.getLogger("oracle.providers")


class Provider(BaseModel):
    id: str
    name: str
    base_url: Optional[str]
    default_model: str
    requires_key: bool = True
    default_headers: Dict[str, str] = {}


PROVIDERS: Dict[str, Provider] = {
    "gemini": Provider(
        id="gemini",
        name="Google Gemini",
        base_url="https://generativelanguage.googleapis.com/v1beta/openai/",
        default_model="gemini-1.5-flash",
    ),
    "groq": Provider(
        id="groq",
        name="Groq",
        base_url="https://api.groq.com/openai/v1",
        default_model="llama3-groq-70b-8192-tool-use-preview",
    ),
    "openrouter": Provider(
        id="openrouter",
        name="OpenRouter",
        base_url="https://openrouter.ai/api/v1",
        default_model="anthropic/claude-3-opus",
        requires_key=False,
        default_headers={"HTTP-Referer": "https://tarot-app.com", "X-Title": "Tarot Reader"},
    ),
    "huggingface": Provider(
        id="huggingface",
        name="Hugging Face",
        base_url="https://router.huggingface.co/v1",
        default_model="meta-llama/Meta-Llama-3-8B-Instruct",
    ),
    "openai": Provider(
        id="openai",
        name="OpenAI",
        base_url=None,
        default_model="gpt-4o-mini",
    ),
}


class ModelInfo(BaseModel):
    id: str
    name: str


def get_provider(provider_id: str) -> Provider:
    try:
        return PROVIDERS[provider_id]
    except KeyError:
        raise ConfigError(f"Unsupported provider: {provider_id}") from None


def provider_display_name(provider_id: Optional[str]) -> str:
    p = PROVIDERS.get(provider_id or "")
    return p.name if p else "Unknown"


def create_client(provider_id: str, api_key: Optional[str]) -> AsyncOpenAI:
    p = get_provider(provider_id)
    return AsyncOpenAI(
        api_key=api_key or "unused",
        base_url=p.base_url,
        default_headers=p.default_headers or None,
    )


def create_model(provider_id: str, api_key: Optional[str], model_name: Optional[str] = None) -> Model:
    """pydantic-ai chat model for the provider, defaulting to its default_model."""
    p = get_provider(provider_id)
    provider = OpenAIProvider(openai_client=create_client(provider_id, api_key))
    return OpenAIChatModel(model_name or p.default_model, provider=provider)


async def fetch_available_models(
    provider_id: str,
    api_key: Optional[str],
    client: Optional[AsyncOpenAI] = None,
) -> List[ModelInfo]:
    """List the provider's models, sorted by display name."""
    p = get_provider(provider_id)
    if not api_key and p.requires_key:
        raise ConfigError("API Key is required to fetch models.", code="API_KEY_MISSING")

    client = client or create_client(provider_id, api_key)
    models: List[ModelInfo] = []
    try:
        async for m in client.models.list():
            model_id = m.id
            if model_id.startswith("models/"):
                model_id = model_id[len("models/"):]
            models.append(ModelInfo(id=model_id, name=getattr(m, "display_name", None) or model_id))
    except Exception:
        log.exception("failed to fetch models provider=%s", provider_id)
        raise

    models.sort(key=lambda m: m.name)
    return models
