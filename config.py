"""
config.py
Application settings (env prefix DATASWIFT_, optional .env file).
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DATASWIFT_", env_file=".env", extra="ignore")

    app_title: str = "DataSwift"
    db_file: Path = Path(__file__).with_name("dataswift.db")
    log_level: str = "INFO"

    # Reserved root administrator. Identified by email, never by id.
    root_admin_email: str = "admin@dataswift.com"
    root_admin_name: str = "dev team"
    root_admin_password: str = "admin123"

    min_password_length: int = 6
    min_phone_length: int = 10
    payment_delay_seconds: float = 1.5

    avatar_url: str = "https://i.pravatar.cc/150?u={seed}"
    currency_symbol: str = "GH₵"


@lru_cache
def get_settings() -> Settings:
    return Settings()
