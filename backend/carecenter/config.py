# backend/carecenter/config.py
from __future__ import annotations
import os


def engine_options_for(database_uri: str) -> dict:
    # Bounded wait on the SQLite write lock; other backends use their own lock timeout
    if database_uri.startswith("sqlite"):
        timeout = float(os.environ.get("SQLITE_BUSY_TIMEOUT", "5"))
        return {"connect_args": {"timeout": timeout}}
    return {}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/carecenter.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///carecenter.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = engine_options_for(SQLALCHEMY_DATABASE_URI)

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Caller-side retry of whole operations that failed with a retryable conflict.
    # 0 means the HTTP layer surfaces the conflict immediately.
    CONFLICT_RETRY_ATTEMPTS = int(os.environ.get("CONFLICT_RETRY_ATTEMPTS", "0"))
    CONFLICT_RETRY_BACKOFF = float(os.environ.get("CONFLICT_RETRY_BACKOFF", "0.1"))
