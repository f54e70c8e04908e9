from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    mailgun_api_key: str | None = None
    mailgun_domain: str | None = None
    mailgun_api_base: str = "https://api.mailgun.net/v3"
    notify_to: str | None = None
    from_email: str | None = None
    thank_you_url: str | None = None
    forms_config_path: Path | None = None
    forms_config: str | None = None
    redis_url: str | None = None
    database_url: str | None = None
    turnstile_secret_key: str | None = None
    turnstile_verify_url: str = "https://challenges.cloudflare.com/turnstile/v0/siteverify"
    enable_rate_limit: bool = False
    enable_turnstile: bool = False
    enable_persistence: bool = False
    rate_limit_max_requests: int = 5
    rate_limit_window_seconds: int = 600
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def default_recipients(self) -> list[str]:
        if not self.notify_to:
            return []
        return [address.strip() for address in self.notify_to.split(",") if address.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
