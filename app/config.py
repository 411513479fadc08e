"""
Application settings for the receipt tracker.
"""
from datetime import date
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Persistent store (unset -> in-memory store)
    DATABASE_URL: Optional[str] = None

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Fixed "today" for aging (unset -> current UTC day)
    REFERENCE_DATE: Optional[date] = None

    # Extraction model (OpenAI-compatible endpoint)
    EXTRACTION_API_KEY: str = ""
    EXTRACTION_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    EXTRACTION_MODEL: str = "gemini-2.5-flash"
    EXTRACTION_TIMEOUT_SECONDS: float = 60.0
    EXTRACTION_YEAR_HINT: Optional[int] = None

    # Uploads
    MAX_UPLOAD_MB: int = 25

    # Alert delivery (optional)
    TELEGRAM_BOT_TOKEN: str = ""
    TELEGRAM_CHAT_ID: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
