"""Tests for the config module."""

import pytest

from csvbridge.config import Settings, _parse_cors_origins, _parse_optional_int


class TestParseCorsOrigins:
    """Test CORS origins parsing."""

    def test_parse_cors_origins_with_value(self, monkeypatch):
        """Test parsing CORS origins from environment variable."""
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://localhost:3000,http://localhost:8080")
        result = _parse_cors_origins()
        assert result == ["http://localhost:3000", "http://localhost:8080"]

    def test_parse_cors_origins_without_value(self, monkeypatch):
        """Test default CORS origins when not set."""
        monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)
        assert _parse_cors_origins() == ["*"]

    def test_parse_cors_origins_empty_string(self, monkeypatch):
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "")
        assert _parse_cors_origins() == ["*"]


class TestParseOptionalInt:
    """Test optional integer parsing."""

    def test_unset(self, monkeypatch):
        monkeypatch.delenv("DEFAULT_MAX_RECORDS", raising=False)
        assert _parse_optional_int("DEFAULT_MAX_RECORDS") is None

    def test_blank(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_MAX_RECORDS", "  ")
        assert _parse_optional_int("DEFAULT_MAX_RECORDS") is None

    def test_value(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_MAX_RECORDS", "250")
        assert _parse_optional_int("DEFAULT_MAX_RECORDS") == 250

    def test_invalid_value_raises(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_MAX_RECORDS", "lots")
        with pytest.raises(ValueError):
            _parse_optional_int("DEFAULT_MAX_RECORDS")


class TestSettings:
    """Test Settings configuration."""

    def test_settings_explicit_values(self, mock_settings):
        assert mock_settings.import_service_url == "http://import.test/api"
        assert mock_settings.import_service_token == "test-token"
        assert mock_settings.import_service_timeout == 5.0
        assert mock_settings.max_file_size == 10485760
        assert mock_settings.default_max_records is None
        assert mock_settings.cors_allow_origins == ["*"]

    def test_settings_overrides(self):
        settings = Settings(
            import_service_url="https://imports.example.com/api",
            default_max_records=1000,
            host="0.0.0.0",
            port=9000,
            debug=True,
            log_level="DEBUG",
        )

        assert settings.import_service_url == "https://imports.example.com/api"
        assert settings.default_max_records == 1000
        assert settings.host == "0.0.0.0"
        assert settings.port == 9000
        assert settings.debug is True
        assert settings.log_level == "DEBUG"

    def test_settings_cors_origins(self):
        settings = Settings(cors_allow_origins=["http://localhost:3000", "http://example.com"])
        assert settings.cors_allow_origins == ["http://localhost:3000", "http://example.com"]

    def test_settings_types(self):
        settings = Settings()
        assert isinstance(settings.max_file_size, int)
        assert isinstance(settings.import_service_timeout, float)
        assert isinstance(settings.debug, bool)
        assert isinstance(settings.session_ttl, int)
