from __future__ import annotations

import os
from dataclasses import dataclass

from .auth import DEFAULT_PBKDF2_ITERS

DEV_JWT_SECRET = "dev-secret-change-me-not-for-production-use"


@dataclass(frozen=True)
class Settings:
    database_url: str
    jwt_secret: str
    jwt_alg: str = "HS256"
    pbkdf2_iters: int = DEFAULT_PBKDF2_ITERS
    app_env: str = "dev"
    redis_url: str = "redis://localhost:6379/0"
    cors_origins: tuple[str, ...] = ("*",)
    log_level: str = "INFO"
    db_connect_retries: int = 30


def load_settings() -> Settings:
    """Read settings from the environment. Called once per process."""
    app_env = os.environ.get("APP_ENV", "dev").strip()

    url = os.environ.get("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is required")

    secret = os.environ.get("JWT_SECRET", "").strip()
    if not secret:
        if app_env != "dev":
            raise RuntimeError("JWT_SECRET is required outside dev")
        secret = DEV_JWT_SECRET

    origins = tuple(o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip())

    return Settings(
        database_url=url,
        jwt_secret=secret,
        jwt_alg=os.environ.get("JWT_ALG", "HS256"),
        pbkdf2_iters=int(os.environ.get("PBKDF2_ITERS", str(DEFAULT_PBKDF2_ITERS))),
        app_env=app_env,
        redis_url=os.environ.get("REDIS_URL", "redis://localhost:6379/0"),
        cors_origins=origins or ("*",),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        db_connect_retries=int(os.environ.get("DB_CONNECT_RETRIES", "30")),
    )
