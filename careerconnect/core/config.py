"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.

A Settings instance is built once at startup and handed to create_app();
nothing reads the environment after that.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "career_connect"

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    # None = tokens carry no exp claim and stay valid until the secret rotates
    jwt_expire_minutes: Optional[int] = None

    # Password hashing
    bcrypt_rounds: int = 12

    # Server
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: List[str] = ["*"]

    # App
    debug: bool = False
    log_level: str = "INFO"

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_prefix="CAREERCONNECT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
