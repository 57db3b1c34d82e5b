"""Tests for environment configuration."""

import pytest

from formpages.config import DEFAULT_PORT, ServerConfig


class TestServerConfig:
    """ServerConfig.from_env."""

    def test_defaults(self):
        """Test an empty environment gives the defaults."""
        config = ServerConfig.from_env({})
        assert config.port == DEFAULT_PORT == 3000
        assert config.host == "0.0.0.0"
        assert config.log_level == "INFO"

    def test_port_from_env(self):
        """Test PORT overrides the default."""
        assert ServerConfig.from_env({"PORT": "8080"}).port == 8080

    def test_empty_port_uses_default(self):
        """Test an empty PORT counts as unset."""
        assert ServerConfig.from_env({"PORT": ""}).port == 3000

    def test_host_and_log_level(self):
        """Test HOST is used as-is and LOG_LEVEL is upper-cased."""
        config = ServerConfig.from_env({"HOST": "127.0.0.1", "LOG_LEVEL": "debug"})
        assert config.host == "127.0.0.1"
        assert config.log_level == "DEBUG"

    @pytest.mark.parametrize("raw", ["abc", "80.5", "-1", "70000"])
    def test_invalid_port_raises(self, raw):
        """Test garbage or out-of-range ports are rejected."""
        with pytest.raises(ValueError, match="PORT"):
            ServerConfig.from_env({"PORT": raw})

    def test_reads_os_environ_by_default(self, monkeypatch):
        """Test from_env falls back to os.environ."""
        monkeypatch.setenv("PORT", "4321")
        assert ServerConfig.from_env().port == 4321
