"""Application settings loaded from environment variables."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """TaskFlow configuration. All values come from environment variables."""

    # Database
    database_path: Path = Field(default=Path("data/taskflow.db"))

    # Turso (hosted libSQL): when set, overrides local database_path
    turso_database_url: str = Field(default="")
    turso_auth_token: str = Field(default="")

    # App
    app_url: str = Field(default="http://localhost:3000")
    default_timezone: str = Field(default="America/Los_Angeles")

    # Mail
    dev_mail: bool = Field(default=False)
    resend_api_key: str = Field(default="")
    resend_api_url: str = Field(default="https://api.resend.com")
    email_from: str = Field(default="TaskFlow <noreply@taskflow.app>")
    mail_timeout_seconds: float = Field(default=15.0)

    # Trigger endpoint
    cron_secret: str = Field(default="")
    web_host: str = Field(default="0.0.0.0")
    web_port: int = Field(default=8080)

    # Scheduler
    scheduler_interval_seconds: int = Field(default=300)
    scheduler_start_delay_seconds: int = Field(default=0)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_file=_env_file(), env_file_encoding="utf-8")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    def use_dev_mail(self) -> bool:
        """True when outbound mail should only be logged locally."""
        return self.dev_mail or not self.resend_api_key.strip()


settings = Settings()
