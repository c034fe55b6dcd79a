# backend/carniceria/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/carniceria.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location (PostgreSQL in production)
        "sqlite:///carniceria.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # "Today" for the end-of-day report is the shop's local calendar day
    STORE_TIMEZONE = os.environ.get("STORE_TIMEZONE", "America/Argentina/Buenos_Aires")

    # Narrative summarizer (OpenAI-compatible chat completions endpoint)
    AI_INTEGRATIONS_OPENAI_API_KEY = os.environ.get("AI_INTEGRATIONS_OPENAI_API_KEY")
    AI_INTEGRATIONS_OPENAI_BASE_URL = os.environ.get(
        "AI_INTEGRATIONS_OPENAI_BASE_URL",
        "https://api.openai.com/v1",
    )
    SUMMARIZER_MODEL = os.environ.get("SUMMARIZER_MODEL", "gpt-5.1")
    SUMMARIZER_TIMEOUT_SECONDS = float(os.environ.get("SUMMARIZER_TIMEOUT_SECONDS", "30"))

    # One-shot demo catalog, skipped when products already exist
    SEED_ON_STARTUP = _env_flag("SEED_ON_STARTUP")
    SEED_DELAY_SECONDS = float(os.environ.get("SEED_DELAY_SECONDS", "2"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    CORS_ALLOWED_ORIGINS = {
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:4173",
        "http://127.0.0.1:4173",
    }
