from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

DERANGEMENT_FALLBACKS = ("raise", "rotate", "accept")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    secret_key: str
    database_url: str
    log_level: str
    log_path: str | None
    admin_password_hash: str
    multi_tenant: bool
    derangement_fallback: str
    max_shuffle_attempts: int
    token_max_age: int
    cors_origins: tuple[str, ...]

    def to_flask_config(self) -> dict:
        return {
            "SECRET_KEY": self.secret_key,
            "SQLALCHEMY_DATABASE_URI": self.database_url,
            "SQLALCHEMY_TRACK_MODIFICATIONS": False,
            "LOG_LEVEL": self.log_level,
            "LOG_PATH": self.log_path,
            "SANTA_ADMIN_PASSWORD_HASH": self.admin_password_hash,
            "SANTA_MULTI_TENANT": self.multi_tenant,
            "SANTA_DERANGEMENT_FALLBACK": self.derangement_fallback,
            "SANTA_MAX_SHUFFLE_ATTEMPTS": self.max_shuffle_attempts,
            "SANTA_TOKEN_MAX_AGE": self.token_max_age,
            "CORS_ORIGINS": list(self.cors_origins),
        }


def validate_fallback(value) -> str:
    fallback = str(value or "").strip().lower()
    if fallback not in DERANGEMENT_FALLBACKS:
        raise ValueError(
            f"SANTA_DERANGEMENT_FALLBACK must be one of {', '.join(DERANGEMENT_FALLBACKS)}."
        )
    return fallback


def load_settings() -> Settings:
    fallback = validate_fallback(os.getenv("SANTA_DERANGEMENT_FALLBACK", "raise"))

    origins = os.getenv("CORS_ORIGINS", "http://localhost:3000")

    return Settings(
        secret_key=os.getenv("SECRET_KEY", "dev-secret-change-me"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///santapairs.db"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_path=os.getenv("LOG_PATH") or None,
        admin_password_hash=os.getenv("SANTA_ADMIN_PASSWORD_HASH", "").strip(),
        multi_tenant=_env_bool("SANTA_MULTI_TENANT", True),
        derangement_fallback=fallback,
        max_shuffle_attempts=int(os.getenv("SANTA_MAX_SHUFFLE_ATTEMPTS", "100")),
        token_max_age=int(os.getenv("SANTA_TOKEN_MAX_AGE", str(7 * 24 * 3600))),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
    )
