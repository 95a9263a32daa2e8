from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="API_MANAGER_", case_sensitive=False, extra="ignore")

    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")

    database_url: str = Field(default="sqlite:///./api_manager.db")

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000, ge=1, le=65535)

    dth22_cors_enabled: bool = Field(default=True)
    dth22_cors_allow_origin: str = Field(default="*")

    client_timeout_sec: float = Field(default=5.0, gt=0.0, le=300.0)
    console_max_sessions: int = Field(default=100, ge=1, le=10000)

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    @staticmethod
    def _contains_placeholder(value: str) -> bool:
        return "replace-with" in value.strip().lower()

    def production_safety_errors(self) -> list[str]:
        if not self.is_production():
            return []

        errors: list[str] = []

        if self.database_url.strip().lower().startswith("sqlite"):
            errors.append("API_MANAGER_DATABASE_URL must not use sqlite in production")

        if self._contains_placeholder(self.database_url):
            errors.append("API_MANAGER_DATABASE_URL must not use placeholder values in production")

        if not self.dth22_cors_allow_origin.strip():
            errors.append("API_MANAGER_DTH22_CORS_ALLOW_ORIGIN must not be empty")

        return errors


def get_settings() -> Settings:
    return Settings()
