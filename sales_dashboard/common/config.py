"""
Application configuration loaded from environment variables (and a local .env file).
"""
import os
from functools import lru_cache
from typing import Optional

import pytz
from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

DEFAULT_APP_ID = "business-manager"
DEFAULT_EXCHANGE_RATE = 6.0  # PLN -> CZK
DEFAULT_TIMEZONE = "Europe/Prague"


class Settings(BaseModel):
    """
    Runtime settings for the dashboard service.
    """
    app_id: str = DEFAULT_APP_ID
    firebase_credentials_json: Optional[str] = None
    firebase_credentials_file: str = "serviceAccountKey.json"
    firebase_project_id: Optional[str] = None
    default_exchange_rate: float = DEFAULT_EXCHANGE_RATE
    timezone: str = DEFAULT_TIMEZONE
    log_level: str = "INFO"
    port: int = 8000

    @field_validator('app_id', mode='before')
    @classmethod
    def default_app_id(cls, value):
        """An empty namespace identifier falls back to the default one."""
        return value or DEFAULT_APP_ID

    @field_validator('timezone')
    @classmethod
    def known_timezone(cls, value):
        if value not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {value}")
        return value

    @property
    def tz(self):
        return pytz.timezone(self.timezone)

    @classmethod
    def from_env(cls) -> 'Settings':
        """
        Build settings from the process environment.

        Priority: FIREBASE_CREDENTIALS_JSON_CONTENT (for production hosting),
        falling back to the local credentials file for development.
        """
        load_dotenv()
        values = {
            "app_id": os.environ.get("APP_ID"),
            "firebase_credentials_json": os.environ.get("FIREBASE_CREDENTIALS_JSON_CONTENT"),
            "firebase_credentials_file": os.environ.get("FIREBASE_CREDENTIALS_FILE"),
            "firebase_project_id": os.environ.get("FIREBASE_PROJECT_ID"),
            "default_exchange_rate": os.environ.get("DEFAULT_EXCHANGE_RATE"),
            "timezone": os.environ.get("APP_TIMEZONE"),
            "log_level": os.environ.get("LOG_LEVEL"),
            "port": os.environ.get("PORT"),
        }
        # Unset variables keep the model defaults
        return cls(**{key: value for key, value in values.items() if value is not None})


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
