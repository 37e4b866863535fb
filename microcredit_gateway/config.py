"""Configuration management using Pydantic Settings"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./microcredit.db"

    # External Services
    score_service_base: str = "http://localhost:8080/api/score"
    classifier_base: str = "http://localhost:5001"
    utility_bill_service_base: str = "http://localhost:8080/api/utility-bill"

    # Scoring
    scoring_strategy: Literal["weighted", "classifier"] = "weighted"
    score_sync_enabled: bool = True

    # Service
    service_name: str = "microcredit-gateway"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0

    # Document verification
    verification_delay_seconds: float = 0.0  # Simulated analysis time, 0 disables
    max_upload_bytes: int = 5_242_880  # 5 MiB


settings = Settings()
