import os
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    service_name: str = "notification-relay-service"
    worker_secret: str = os.getenv("WORKER_SECRET", "")

    # Push gateway
    apn_team_id: str = os.getenv("APN_TEAM_ID", "")
    apn_key_id: str = os.getenv("APN_KEY_ID", "")
    apn_private_key: str = os.getenv("APN_PRIVATE_KEY", "")
    apn_bundle_id: str = os.getenv("APN_BUNDLE_ID", "")
    apn_host: str = os.getenv("APN_HOST", "api.push.apple.com")
    apn_request_timeout: float = 30.0
    push_concurrency: int = 100

    # Email
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_start_tls: bool = True
    smtp_timeout: float = 30.0
    template_dir: str = os.getenv("TEMPLATE_DIR", "templates")
    app_name: str = "Cordy"
    calendar_base_url: str = "https://coordy-prod.vercel.app/api/calendar"

    host: str = "0.0.0.0"
    port: int = int(os.getenv("PORT", "3000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @field_validator("apn_private_key")
    @classmethod
    def normalize_private_key(cls, v: str) -> str:
        """Keys stored in env files keep their newlines escaped"""
        return v.replace("\\n", "\n")

    @field_validator("push_concurrency")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("push_concurrency must be at least 1")
        return v

    @field_validator("calendar_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


settings = Settings()
