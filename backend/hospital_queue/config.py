"""
Application configuration using Pydantic Settings.
Loads from environment variables with sensible defaults.
"""

from typing import List
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Hospital Patient Queue Tracker"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: List[str] = ["*"]

    # Snapshot storage: json, mongo or memory
    STORAGE_BACKEND: str = "json"
    SNAPSHOT_PATH: str = "./data/queue_snapshot.json"

    # MongoDB
    MONGODB_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "hospital_queue"
    SNAPSHOT_COLLECTION: str = "snapshots"

    # Queue
    AVERAGE_SERVICE_MINUTES: int = 15  # fixed per-patient estimate

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
