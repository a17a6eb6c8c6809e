"""
Application Configuration — Environment & Settings
Centralizes all config from .env with Pydantic Settings for validation.
"""
from pathlib import Path
from functools import lru_cache
from pydantic_settings import BaseSettings

# Resolve paths relative to backend/ directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # --- Core ---
    APP_NAME: str = "Duofu Intake Bot"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # --- Intake ledger ---
    DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'data' / 'intake_ledger.db'}"

    # --- LINE Messaging API ---
    LINE_CHANNEL_ACCESS_TOKEN: str = ""
    LINE_CHANNEL_SECRET: str = ""
    LINE_API_BASE: str = "https://api.line.me"
    REPLY_TIMEOUT_SECONDS: float = 10.0

    # --- AI assistant ---
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-1.5-flash"
    ASSISTANT_MAX_TOKENS: int = 300
    FALLBACK_TIMEOUT_SECONDS: float = 15.0

    # --- Conversation ---
    AUTOMATED_MODE_PHRASE: str = "AI模式"
    HUMAN_MODE_PHRASE: str = "真人模式"
    SHUTTLE_PRICE_RANGE: str = "800 - 1200"
    HUMAN_HOTLINE: str = "02-8663-xxxx"

    # --- Completion notifications ---
    NOTIFY_EMAIL: str = "service@duofu.example"
    SINK_TIMEOUT_SECONDS: float = 10.0

    # --- Security ---
    CORS_ORIGINS: list[str] = ["*"]

    # --- Logging ---
    LOG_DIR: str = str(BASE_DIR / "logs")

    class Config:
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
