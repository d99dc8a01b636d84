"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    admin_token: str
    environment: str = _ENVIRONMENT
    plan_freshness_days: int = 7
    calorie_change_threshold: int = 50
    protein_change_threshold: int = 10
    plan_generation_target_ms: int = 300
    metrics_target_ms: int = 200

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
