"""
Noter Backend: Configuration Tests
====================================

What we test:
    ✅ Defaults when nothing is set
    ✅ Environment variables override defaults
    ✅ Process environment wins over the .env file
    ✅ Unparseable values raise ConfigurationError
    ✅ database_url is built from the DB_* fields
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from noter.config import Settings, load_settings
from noter.exceptions import ConfigurationError, ErrorKind

ENV_KEYS = (
    "HOST", "PORT", "DB_HOST", "DB_PORT", "DB_USER", "DB_PASSWORD",
    "DB_NAME", "DB_SSLMODE", "LOG_LEVEL", "DB_CONNECT_TIMEOUT",
    "DB_HEALTH_TIMEOUT", "SHUTDOWN_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestDefaults:

    def test_defaults(self):
        settings = load_settings(env_file=None)

        assert settings.port == 8080
        assert settings.db_host == "localhost"
        assert settings.db_port == 5432
        assert settings.db_user == "postgres"
        assert settings.db_password == "postgres"
        assert settings.db_name == "noter"
        assert settings.db_sslmode == "disable"
        assert settings.log_level == "INFO"

    def test_default_timeouts(self):
        settings = load_settings(env_file=None)

        assert settings.db_connect_timeout == 10.0
        assert settings.db_health_timeout == 3.0
        assert settings.shutdown_timeout == 5.0


class TestEnvironment:

    def test_env_overrides_defaults(self, monkeypatch):
        monkeypatch.setenv("PORT", "9090")
        monkeypatch.setenv("DB_HOST", "db.internal")
        monkeypatch.setenv("DB_NAME", "notes_prod")
        monkeypatch.setenv("DB_SSLMODE", "require")

        settings = load_settings(env_file=None)

        assert settings.port == 9090
        assert settings.db_host == "db.internal"
        assert settings.db_name == "notes_prod"
        assert settings.db_sslmode == "require"

    def test_env_file_fills_unset_values(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("DB_NAME=from_file\nDB_USER=file_user\n")

        settings = load_settings(env_file=str(env_file))

        assert settings.db_name == "from_file"
        assert settings.db_user == "file_user"

    def test_process_env_wins_over_env_file(self, tmp_path, monkeypatch):
        """A variable already set in the environment is not replaced by the file."""
        env_file = tmp_path / ".env"
        env_file.write_text("PORT=9000\nDB_NAME=from_file\n")
        monkeypatch.setenv("PORT", "7000")

        settings = load_settings(env_file=str(env_file))

        assert settings.port == 7000
        assert settings.db_name == "from_file"

    def test_missing_env_file_is_ignored(self, tmp_path):
        settings = load_settings(env_file=str(tmp_path / "does-not-exist.env"))
        assert settings.port == 8080

    def test_log_level_is_normalised(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert load_settings(env_file=None).log_level == "DEBUG"


class TestInvalidValues:

    def test_non_numeric_port(self, monkeypatch):
        monkeypatch.setenv("PORT", "abc")

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(env_file=None)

        assert exc_info.value.kind is ErrorKind.CONFIG

    def test_unknown_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigurationError):
            load_settings(env_file=None)

    def test_settings_are_read_only(self):
        settings = load_settings(env_file=None)

        with pytest.raises(PydanticValidationError):
            settings.port = 1234


class TestDatabaseURL:

    def test_url_fields(self):
        url = load_settings(env_file=None).database_url

        assert url.drivername == "postgresql+asyncpg"
        assert url.host == "localhost"
        assert url.port == 5432
        assert url.database == "noter"
        assert url.query["ssl"] == "disable"

    def test_password_with_special_characters(self):
        settings = Settings(_env_file=None, db_password="p@ss:w/rd%")

        url = settings.database_url

        assert url.password == "p@ss:w/rd%"
        assert "p@ss:w/rd%" not in url.render_as_string(hide_password=False)
