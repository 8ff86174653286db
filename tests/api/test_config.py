"""
Tests for settings loading and request credential checks.
"""

import pytest

from movies_api.api.config import get_settings, load_settings
from movies_api.api.dependencies import get_rater_id, verify_bearer
from movies_api.exceptions import AuthorizationError


REQUIRED_ENV = {
    "AUTH_TOKEN": "secret",
    "BOXOFFICE_URL": "http://boxoffice.test",
    "BOXOFFICE_API_KEY": "test-key",
}

OPTIONAL_ENV = [
    "DATABASE_URL", "BOXOFFICE_TIMEOUT_SECS", "DB_POOL_SIZE", "DB_MAX_OVERFLOW",
    "DB_POOL_RECYCLE_SECS", "DB_POOL_TIMEOUT_SECS", "HEALTH_TIMEOUT_SECS",
    "LOG_LEVEL", "LOG_FILE", "API_HOST", "API_PORT",
]


@pytest.fixture
def env(monkeypatch):
    for key in OPTIONAL_ENV:
        monkeypatch.delenv(key, raising=False)
    for key, value in REQUIRED_ENV.items():
        monkeypatch.setenv(key, value)
    return monkeypatch


class TestLoadSettings:
    """Tests for load_settings()."""

    def test_defaults(self, env):
        settings = load_settings()

        assert settings.auth_token == "secret"
        assert settings.database_url == "sqlite:///data/movies.db"
        assert settings.boxoffice_timeout_secs == 5
        assert settings.db_pool_size == 20
        assert settings.db_max_overflow == 0
        assert settings.db_pool_recycle_secs == 3600
        assert settings.db_pool_timeout_secs == 10
        assert settings.health_timeout_secs == 2
        assert settings.log_level == "INFO"
        assert settings.log_file is None
        assert settings.api_port == 8080

    def test_overrides(self, env):
        env.setenv("DATABASE_URL", "postgresql://movies@db/movies")
        env.setenv("DB_POOL_SIZE", "5")
        env.setenv("LOG_LEVEL", "debug")

        settings = load_settings()

        assert settings.database_url == "postgresql://movies@db/movies"
        assert settings.db_pool_size == 5
        assert settings.log_level == "DEBUG"

    def test_invalid_integer_falls_back(self, env):
        env.setenv("BOXOFFICE_TIMEOUT_SECS", "soon")
        assert load_settings().boxoffice_timeout_secs == 5

    @pytest.mark.parametrize("missing", sorted(REQUIRED_ENV))
    def test_required_variables(self, env, missing):
        env.delenv(missing)

        with pytest.raises(ValueError, match=missing):
            load_settings()

    @pytest.mark.parametrize("key,value", [
        ("BOXOFFICE_TIMEOUT_SECS", "0"),
        ("DB_POOL_SIZE", "-1"),
        ("DB_MAX_OVERFLOW", "-1"),
        ("HEALTH_TIMEOUT_SECS", "0"),
    ])
    def test_out_of_range(self, env, key, value):
        env.setenv(key, value)

        with pytest.raises(ValueError, match=key):
            load_settings()

    def test_settings_are_immutable(self, settings):
        with pytest.raises(AttributeError):
            settings.auth_token = "other"

    def test_get_settings_is_cached(self, env):
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()


class TestCredentials:
    """Tests for bearer token and rater identity checks."""

    @pytest.mark.parametrize("header,expected", [
        ("Bearer secret", True),
        ("Bearer  secret ", True),
        ("Bearer other", False),
        ("bearer secret", False),
        ("secret", False),
        ("Bearer ", False),
        ("", False),
        (None, False),
    ])
    def test_verify_bearer(self, header, expected):
        assert verify_bearer(header, "secret") is expected

    def test_rater_id_trimmed(self):
        assert get_rater_id("  alice ") == "alice"

    @pytest.mark.parametrize("header", [None, "", "   "])
    def test_rater_id_required(self, header):
        with pytest.raises(AuthorizationError):
            get_rater_id(header)
