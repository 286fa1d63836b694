"""Application settings and configuration management."""

from datetime import date
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from voterportal.config.constants import DEFAULT_REFERENCE_DATE


class Config(BaseSettings):
    """Application configuration with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Remote store
    store_url: str = Field(
        default="http://127.0.0.1:8765/exec",
        description="HTTP query endpoint of the spreadsheet-backed store",
    )
    request_timeout_seconds: int = Field(default=20, ge=1, le=120)
    reference_date: date = Field(
        default=DEFAULT_REFERENCE_DATE,
        description="Date against which calculated age is computed",
    )

    # Reference store server
    store_db_path: str = Field(
        default="~/.voterportal/voter_sheet.db",
        description="SQLite file backing the reference store",
    )
    store_host: str = Field(default="127.0.0.1")
    store_port: int = Field(default=8765, ge=1, le=65535)

    # UI
    ui_port: int = Field(default=8080, ge=1, le=65535)
    native_mode: bool = Field(default=False, description="Run in a native window")

    # Aadhaar photo extraction (OpenAI-compatible vision endpoint)
    ocr_api_key: str | None = Field(default=None, description="Vision API key")
    ocr_base_url: str = Field(default="https://openrouter.ai/api/v1")
    ocr_model: str = Field(default="google/gemini-2.0-flash-001")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str = Field(default="logs/voterportal.log", description="Main log file")

    @field_validator("store_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the endpoint so query strings attach cleanly."""
        return v.strip().rstrip("/")

    @field_validator("store_db_path")
    @classmethod
    def expand_user_path(cls, v: str) -> str:
        """Expand user home directory in paths."""
        return str(Path(v).expanduser())

    @property
    def ocr_enabled(self) -> bool:
        """Whether Aadhaar photo extraction is configured."""
        return bool(self.ocr_api_key)


# Global configuration instance
_config: Config | None = None


def get_config() -> Config:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
