from __future__ import annotations

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_name: str = "Clinic Scheduling Backend"
    database_url: str = Field(
        default="sqlite:///./clinic_scheduling.db",
        description="SQLModel compatible database URI",
    )
    jwt_secret_key: str = Field(default="change-me", description="JWT signing secret")
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    first_superuser: str = "admin"
    first_superuser_password: str = "admin123"
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: str = Field(default="console", description="'console' or 'json'")
    default_page_size: int = 10
    max_page_size: int = 100


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
