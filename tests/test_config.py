"""Tests for configuration and repository selection."""

from app import build_repository
from infrastructure.config import AppConfig, load_config
from infrastructure.db import SqliteRepository
from infrastructure.remote import RestRepository


def test_defaults():
    config = load_config({})
    assert config == AppConfig()
    assert config.use_backend is False


def test_backend_settings():
    config = load_config({
        "BACKEND_URL": "https://backend.example.com/",
        "BACKEND_API_KEY": "anon-key",
        "TRAINING_USER_ID": "user-a",
        "LOG_LEVEL": "debug",
    })
    assert config.backend_url == "https://backend.example.com"
    assert config.use_backend is True
    assert config.user_id == "user-a"
    assert config.log_level == "DEBUG"


def test_build_repository_picks_storage(tmp_path):
    local = build_repository(AppConfig(db_path=str(tmp_path / "t.db")))
    assert isinstance(local, SqliteRepository)

    remote = build_repository(AppConfig(backend_url="https://backend.example.com", backend_api_key="k"))
    assert isinstance(remote, RestRepository)
