import pytest

from todo_api.auth import DEFAULT_PBKDF2_ITERS
from todo_api.config import DEV_JWT_SECRET, Settings, load_settings


def test_dev_falls_back_to_built_in_secret(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.delenv("APP_ENV", raising=False)
    assert load_settings().jwt_secret == DEV_JWT_SECRET


def test_secret_is_required_outside_dev(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.delenv("JWT_SECRET", raising=False)
    with pytest.raises(RuntimeError):
        load_settings()


def test_database_url_is_required(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(RuntimeError):
        load_settings()


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://todo@db/todo")
    monkeypatch.setenv("JWT_SECRET", "s" * 40)
    monkeypatch.setenv("PBKDF2_ITERS", "5000")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    s = load_settings()
    assert s.database_url == "postgresql://todo@db/todo"
    assert s.jwt_secret == "s" * 40
    assert s.pbkdf2_iters == 5000
    assert s.cors_origins == ("http://a.test", "http://b.test")
    assert s.log_level == "DEBUG"


def test_iterations_default_matches_hasher(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("PBKDF2_ITERS", raising=False)
    assert load_settings().pbkdf2_iters == DEFAULT_PBKDF2_ITERS
    assert Settings(database_url="sqlite://", jwt_secret="s").pbkdf2_iters == DEFAULT_PBKDF2_ITERS
