import json

import pytest

from mystic_oracle.config_store import LLMConfigStore
from mystic_oracle.errors import ConfigError
from mystic_oracle.i18n import normalize_locale, t
from mystic_oracle.providers import PROVIDERS, get_provider, provider_display_name
from mystic_oracle.settings import load_settings


def test_api_key_not_written_unless_persisted(tmp_path):
    path = tmp_path / "llm_config.json"
    store = LLMConfigStore(path)
    store.update_config("groq", "sk-secret", persist=False, model_name="llama")

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["provider"] == "groq"
    assert data["modelName"] == "llama"
    assert "apiKey" not in data

    fresh = LLMConfigStore(path)
    fresh.load_from_storage()
    assert fresh.provider == "groq"
    assert fresh.api_key == ""
    assert not fresh.is_configured


def test_persisted_key_is_restored(tmp_path):
    path = tmp_path / "llm_config.json"
    LLMConfigStore(path).update_config("openrouter", "sk-keep", persist=True)

    fresh = LLMConfigStore(path)
    fresh.load_from_storage()
    assert fresh.api_key == "sk-keep"
    assert fresh.has_valid_config
    assert fresh.provider_name == "OpenRouter"


def test_clear_config_removes_file(tmp_path):
    path = tmp_path / "llm_config.json"
    store = LLMConfigStore(path)
    store.update_config("gemini", "k", persist=True)
    store.clear_config()
    assert not path.exists()
    assert store.api_key == ""


def test_bad_json_is_ignored(tmp_path):
    path = tmp_path / "llm_config.json"
    path.write_text("{not json", encoding="utf-8")
    store = LLMConfigStore(path)
    store.load_from_storage()
    assert store.provider == "gemini"


def test_unknown_provider_rejected(tmp_path):
    store = LLMConfigStore(tmp_path / "c.json")
    with pytest.raises(ConfigError):
        store.update_config("skynet", "k")
    assert store.provider == "gemini"


def test_locale_is_normalized_and_saved(tmp_path):
    path = tmp_path / "c.json"
    store = LLMConfigStore(path)
    assert store.set_locale("zh-Hant") == "zh-TW"
    assert json.loads(path.read_text(encoding="utf-8"))["locale"] == "zh-TW"
    assert store.set_locale("fr") == "en"


def test_providers_table():
    assert set(PROVIDERS) == {"gemini", "groq", "openrouter", "huggingface", "openai"}
    assert get_provider("openrouter").requires_key is False
    assert provider_display_name(None) == "Unknown"


def test_translation_fallbacks():
    assert normalize_locale(None) == "en"
    assert t("mock.streamPrefix", "zh-TW") == "牌面揭示..."
    assert t("config.unsupportedProvider", "en", provider="x") == "Unsupported provider: x"
    assert t("no.such.key", "zh-TW") == "no.such.key"
    assert isinstance(t("mock.responses"), list)


def test_load_settings_from_env(monkeypatch):
    monkeypatch.setenv("ORACLE_MODE", "REAL")
    monkeypatch.setenv("ORACLE_THINKING_DELAY_MS", "250")
    monkeypatch.setenv("ORACLE_CHAR_DELAY_MS", "0")
    monkeypatch.setenv("ORACLE_SEED", "abc")
    monkeypatch.delenv("ORACLE_API_KEY", raising=False)

    s = load_settings()
    assert s.mode == "real"
    assert s.thinking_delay == 0.25
    assert s.char_delay == 0
    assert s.seed == "abc"
    assert s.api_key is None


def test_fractional_delay_is_accepted(monkeypatch):
    monkeypatch.setenv("ORACLE_CHAR_DELAY_MS", "30.5")
    assert load_settings().char_delay == pytest.approx(0.0305)


def test_bad_delay_names_the_variable(monkeypatch):
    monkeypatch.setenv("ORACLE_THINKING_DELAY_MS", "soon")
    with pytest.raises(ConfigError, match="ORACLE_THINKING_DELAY_MS"):
        load_settings()
