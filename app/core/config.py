"""
Configuration settings for the dashboard
"""

import os
from typing import List, Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings"""

    # Upstream REST API
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:5000")
    API_TIMEOUT_SECONDS: float = 10.0

    # Credentials
    TOKEN_COOKIE_NAME: str = "token"
    # When set, credentials are signature-checked; otherwise only their claims are read
    TOKEN_SECRET: Optional[str] = os.getenv("TOKEN_SECRET")
    TOKEN_ALGORITHM: str = "HS256"
    COOKIE_SECURE: bool = os.getenv("COOKIE_SECURE", "false").lower() in ("1", "true", "yes")

    # Application
    BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    UPCOMING_EVENTS_LIMIT: int = 5

    # CORS
    ALLOW_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5000",
        "http://localhost:8000",
    ]

    class Config:
        env_file = ".env"

settings = Settings()
