"""Configuration management using Pydantic Settings"""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (storage credentials: URL + privileged key)
    database_url: str = "postgresql+psycopg2://postgres@localhost:5432/lendscore"
    database_service_key: Optional[str] = None

    # AI gateway (OpenAI-compatible chat completions)
    ai_gateway_url: str = "http://localhost:8003/v1/chat/completions"
    ai_gateway_api_key: Optional[str] = None
    ai_model: str = "google/gemini-2.5-flash"
    ai_gateway_timeout_seconds: float = 30.0

    # Scoring inputs
    transaction_window: int = 10
    history_limit: int = 20

    # Service
    service_name: str = "lendscore-gateway"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000
    cors_allow_origins: List[str] = ["*"]

    @property
    def sqlalchemy_url(self) -> str:
        """Database URL with the service key applied as the password"""
        if not self.database_service_key:
            return self.database_url
        url = make_url(self.database_url).set(password=self.database_service_key)
        return url.render_as_string(hide_password=False)


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process"""
    return Settings()
