"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./data/woundreport.db"
    DATA_DIR: str = "./data"

    # Single session user; the role flag is the only access control.
    USER_NAME: str = "Clinical Administrator"
    USER_USERNAME: str = "admin"
    USER_ROLE: str = "ADMIN"

    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_API_KEY: str = ""
    MOCK_ASSISTANT: bool = False

    HOST: str = "127.0.0.1"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    model_config = {"env_prefix": "WOUNDREPORT_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
