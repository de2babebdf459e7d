import pytest
from fastapi.testclient import TestClient

from mystic_oracle.main import create_app
from mystic_oracle.settings import Settings


@pytest.fixture
def settings(tmp_path):
    return Settings(
        mode="mock",
        thinking_delay=0,
        char_delay=0,
        config_path=tmp_path / "llm_config.json",
        seed="test-seed",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app)
