import pytest

from config import DEFAULT_REGION, OFFLINE_DATABASE_URL, OFFLINE_REGION, load_settings
from database import _mask


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("DATABASE_URL", "IS_OFFLINE", "LOCAL_DATABASE_URL", "REGION", "CORS_ORIGINS", "DATABASE_ECHO"):
        monkeypatch.delenv(name, raising=False)


def test_database_url_required_online():
    with pytest.raises(ValueError):
        load_settings()


def test_online_settings(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://app:secret@db:5432/tasks")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,")

    settings = load_settings()

    assert settings.database_url == "postgresql://app:secret@db:5432/tasks"
    assert settings.region == DEFAULT_REGION
    assert settings.offline is False
    assert settings.cors_origins == ("http://a.test", "http://b.test")


def test_offline_uses_local_endpoint(monkeypatch):
    monkeypatch.setenv("IS_OFFLINE", "true")
    monkeypatch.setenv("DATABASE_URL", "postgresql://ignored")
    monkeypatch.setenv("REGION", "eu-west-1")

    settings = load_settings()

    assert settings.offline is True
    assert settings.database_url == OFFLINE_DATABASE_URL
    assert settings.region == OFFLINE_REGION


def test_offline_endpoint_override(monkeypatch):
    monkeypatch.setenv("IS_OFFLINE", "1")
    monkeypatch.setenv("LOCAL_DATABASE_URL", "sqlite:///./dev.db")

    assert load_settings().database_url == "sqlite:///./dev.db"


def test_mask_hides_password():
    assert _mask("postgresql://app:secret@db:5432/tasks") == "postgresql://app:***@db:5432/tasks"
