"""Configuration tests."""

from datetime import date
from pathlib import Path

import pytest
from pydantic import ValidationError

from voterportal.config import Config


class TestConfig:
    """Test settings defaults, environment overrides and validation."""

    def test_defaults(self, monkeypatch):
        """Verify defaults when nothing is configured."""
        for name in ("STORE_URL", "OCR_API_KEY", "REFERENCE_DATE", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        config = Config(_env_file=None)

        assert config.store_url == "http://127.0.0.1:8765/exec"
        assert config.request_timeout_seconds == 20
        assert config.reference_date == date(2026, 1, 1)
        assert config.ocr_enabled is False
        assert config.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        """Verify values are read from the environment."""
        monkeypatch.setenv("STORE_URL", "https://script.google.com/macros/s/abc/exec/")
        monkeypatch.setenv("REFERENCE_DATE", "2025-06-30")
        monkeypatch.setenv("OCR_API_KEY", "sk-test")

        config = Config(_env_file=None)

        # Trailing slash removed so query strings attach cleanly
        assert config.store_url == "https://script.google.com/macros/s/abc/exec"
        assert config.reference_date == date(2025, 6, 30)
        assert config.ocr_enabled is True

    def test_store_db_path_expands_home(self):
        config = Config(_env_file=None, store_db_path="~/voters.db")
        assert config.store_db_path == str(Path.home() / "voters.db")

    def test_timeout_bounds(self):
        with pytest.raises(ValidationError):
            Config(_env_file=None, request_timeout_seconds=0)
