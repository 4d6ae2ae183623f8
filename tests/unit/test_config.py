"""Unit tests for configuration loading."""

import pytest

from foodieai.config import Config


class TestConfigDefaults:
    """Defaults when nothing is set."""

    def test_defaults(self, monkeypatch):
        """Test default values for optional settings."""
        for name in (
            "PORT",
            "DEV_AUTH_BYPASS_SUB",
            "OAUTH_TOKEN_SECRET",
            "OAUTH_AUDIENCE",
            "PRODUCT_DEDUP_TTL_SECONDS",
            "SEARCH_DEFAULT_LIMIT",
            "SEARCH_MAX_LIMIT",
            "MCP_PROTOCOL_VERSION",
        ):
            monkeypatch.delenv(name, raising=False)

        cfg = Config()

        assert cfg.PORT == 8000
        assert cfg.DEV_AUTH_BYPASS_SUB is None
        assert cfg.OAUTH_TOKEN_SECRET is None
        assert cfg.OAUTH_AUDIENCE == "foodieai-mcp"
        assert cfg.PRODUCT_DEDUP_TTL_SECONDS == 30.0
        assert cfg.SEARCH_DEFAULT_LIMIT == 20
        assert cfg.SEARCH_MAX_LIMIT == 50
        assert cfg.MCP_PROTOCOL_VERSION == "2024-11-05"

    def test_empty_bypass_subject_is_none(self, monkeypatch):
        """Test an empty DEV_AUTH_BYPASS_SUB disables the bypass."""
        monkeypatch.setenv("DEV_AUTH_BYPASS_SUB", "")

        assert Config().DEV_AUTH_BYPASS_SUB is None


class TestConfigFromEnvironment:
    """Values read from the environment."""

    def test_environment_overrides(self, monkeypatch):
        """Test env vars are parsed to the right types."""
        monkeypatch.setenv("DATABASE_URL", "sqlite:///./foodie.db")
        monkeypatch.setenv("PORT", "9001")
        monkeypatch.setenv("DEV_AUTH_BYPASS_SUB", "dev-user")
        monkeypatch.setenv("PRODUCT_DEDUP_TTL_SECONDS", "2.5")
        monkeypatch.setenv("SEARCH_MAX_LIMIT", "100")

        cfg = Config()

        assert cfg.DATABASE_URL == "sqlite:///./foodie.db"
        assert cfg.PORT == 9001
        assert cfg.DEV_AUTH_BYPASS_SUB == "dev-user"
        assert cfg.PRODUCT_DEDUP_TTL_SECONDS == 2.5
        assert cfg.SEARCH_MAX_LIMIT == 100

    def test_invalid_port_raises(self, monkeypatch):
        """Test a non-numeric PORT fails at load time."""
        monkeypatch.setenv("PORT", "eighty")

        with pytest.raises(ValueError):
            Config()


class TestConfigValidation:
    """validate() range checks."""

    def test_valid_configuration_passes(self, monkeypatch):
        """Test defaults validate."""
        monkeypatch.delenv("SEARCH_DEFAULT_LIMIT", raising=False)
        monkeypatch.delenv("SEARCH_MAX_LIMIT", raising=False)
        monkeypatch.delenv("PRODUCT_DEDUP_TTL_SECONDS", raising=False)

        Config().validate()

    def test_non_positive_ttl_rejected(self, monkeypatch):
        """Test a zero de-dup window is rejected."""
        monkeypatch.setenv("PRODUCT_DEDUP_TTL_SECONDS", "0")

        with pytest.raises(ValueError, match="PRODUCT_DEDUP_TTL_SECONDS"):
            Config().validate()

    def test_default_limit_above_max_rejected(self, monkeypatch):
        """Test SEARCH_DEFAULT_LIMIT must not exceed SEARCH_MAX_LIMIT."""
        monkeypatch.setenv("SEARCH_DEFAULT_LIMIT", "60")
        monkeypatch.setenv("SEARCH_MAX_LIMIT", "50")

        with pytest.raises(ValueError, match="SEARCH_DEFAULT_LIMIT"):
            Config().validate()

    def test_max_limit_below_one_rejected(self, monkeypatch):
        """Test SEARCH_MAX_LIMIT must be at least 1."""
        monkeypatch.setenv("SEARCH_MAX_LIMIT", "0")

        with pytest.raises(ValueError, match="SEARCH_MAX_LIMIT"):
            Config().validate()
