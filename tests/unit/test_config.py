"""
Unit tests for server configuration.
"""

import pytest

from webserver import WebServer
from webserver.config import ServerConfig, ConfigurationError, MIN_PORT, MAX_PORT


class TestValidate:
    """Tests for ServerConfig.validate()."""

    def test_defaults_are_valid(self):
        config = ServerConfig()
        config.validate()

        assert config.port == 8080
        assert config.web_root == "wwwroot"
        assert config.chunk_size == 4096
        assert config.timeout is None

    @pytest.mark.parametrize("port", [MIN_PORT, 8080, MAX_PORT])
    def test_valid_ports(self, port):
        ServerConfig(port=port).validate()

    @pytest.mark.parametrize("port", [-1, 0, 80, 1024, MAX_PORT + 1])
    def test_invalid_ports(self, port):
        with pytest.raises(ConfigurationError, match="port"):
            ServerConfig(port=port).validate()

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            ServerConfig(port=1).validate()

    @pytest.mark.parametrize("field, value", [
        ("backlog", 0),
        ("chunk_size", 0),
        ("max_line_length", 4),
        ("timeout", 0),
        ("timeout", -1.5),
        ("log_level", "CHATTY"),
    ])
    def test_invalid_values(self, field, value):
        config = ServerConfig(**{field: value})
        with pytest.raises(ConfigurationError):
            config.validate()

    def test_log_level_case_insensitive(self):
        ServerConfig(log_level="debug").validate()


class TestFromEnv:
    """Tests for ServerConfig.from_env()."""

    def test_defaults(self, monkeypatch):
        for name in ("HTTP_HOST", "HTTP_PORT", "HTTP_WEB_ROOT", "HTTP_TIMEOUT", "HTTP_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        config = ServerConfig.from_env()

        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.web_root == "wwwroot"
        assert config.timeout is None

    def test_reads_variables(self, monkeypatch):
        monkeypatch.setenv("HTTP_HOST", "127.0.0.1")
        monkeypatch.setenv("HTTP_PORT", "9090")
        monkeypatch.setenv("HTTP_WEB_ROOT", "/srv/www")
        monkeypatch.setenv("HTTP_TIMEOUT", "2.5")
        monkeypatch.setenv("HTTP_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config.host == "127.0.0.1"
        assert config.port == 9090
        assert config.web_root == "/srv/www"
        assert config.timeout == 2.5
        assert config.log_level == "DEBUG"

    @pytest.mark.parametrize("name", ["HTTP_PORT", "HTTP_TIMEOUT"])
    def test_bad_numbers(self, monkeypatch, name):
        monkeypatch.setenv(name, "lots")
        with pytest.raises(ConfigurationError, match=name):
            ServerConfig.from_env()


class TestWebServerValidation:
    """The server refuses an invalid config before binding anything."""

    def test_privileged_port_rejected(self):
        with pytest.raises(ConfigurationError):
            WebServer(ServerConfig(port=80))

    def test_start_override_validated(self, web_root):
        server = WebServer(ServerConfig(port=8080, web_root=str(web_root)))

        with pytest.raises(ConfigurationError):
            server.start(port=1024)

        assert not server.is_running

    def test_address_before_start(self):
        server = WebServer(ServerConfig(host="127.0.0.1", port=9999))
        assert server.address == ("127.0.0.1", 9999)
