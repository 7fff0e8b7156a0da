"""
Task Board — Centralized configuration.

Loads all settings from .env and validates required keys.
Every other module reads its knobs from the ``settings`` singleton below.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (one level up from taskboard/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Google OAuth client (used for refresh-token exchange)
    GOOGLE_CLIENT_ID: str
    GOOGLE_CLIENT_SECRET: str

    # Key-value store backing the board ("tasks" / "calendarTasks")
    DATABASE_PATH: str = "data/taskboard.db"

    # Calendar sync
    TIMEZONE: str = "UTC"
    CALENDAR_WINDOW_DAYS: int = 1
    RECENCY_THRESHOLD_MINUTES: int = 120
    DEFAULT_EVENT_BACKGROUND: str = "#265073"
    DEFAULT_EVENT_FOREGROUND: str = "#FFFFFF"

    # Outbound HTTP
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # Web server
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    @field_validator(
        "CALENDAR_WINDOW_DAYS", "RECENCY_THRESHOLD_MINUTES", "PORT", mode="before"
    )
    @classmethod
    def parse_int(cls, v: str | int) -> int:
        return int(v)

    @field_validator("CALENDAR_WINDOW_DAYS")
    @classmethod
    def window_at_least_one_day(cls, v: int) -> int:
        if v < 1:
            raise ValueError("CALENDAR_WINDOW_DAYS must be >= 1")
        return v

    @field_validator("HTTP_TIMEOUT_SECONDS", mode="before")
    @classmethod
    def parse_timeout(cls, v: str | float) -> float:
        return float(v)


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    client_id = os.getenv("GOOGLE_CLIENT_ID", "")
    client_secret = os.getenv("GOOGLE_CLIENT_SECRET", "")

    if not client_id or client_id.startswith("your-"):
        print("ERROR: GOOGLE_CLIENT_ID is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    if not client_secret or client_secret.startswith("your-"):
        print("ERROR: GOOGLE_CLIENT_SECRET is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    return Settings(
        GOOGLE_CLIENT_ID=client_id,
        GOOGLE_CLIENT_SECRET=client_secret,
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/taskboard.db"),
        TIMEZONE=os.getenv("TIMEZONE", "UTC"),
        CALENDAR_WINDOW_DAYS=os.getenv("CALENDAR_WINDOW_DAYS", "1"),
        RECENCY_THRESHOLD_MINUTES=os.getenv("RECENCY_THRESHOLD_MINUTES", "120"),
        DEFAULT_EVENT_BACKGROUND=os.getenv("DEFAULT_EVENT_BACKGROUND", "#265073"),
        DEFAULT_EVENT_FOREGROUND=os.getenv("DEFAULT_EVENT_FOREGROUND", "#FFFFFF"),
        HTTP_TIMEOUT_SECONDS=os.getenv("HTTP_TIMEOUT_SECONDS", "10"),
        HOST=os.getenv("HOST", "127.0.0.1"),
        PORT=os.getenv("PORT", "8000"),
    )


# Singleton — imported by all other modules as:
#   from taskboard.config import settings
settings = _load_settings()
