#!/usr/bin/env python3
"""Tests for environment-driven configuration."""

from pathlib import Path

import pydantic
import pytest

from rcon_common.config import RconConfig


class TestRconConfig:
    """BFOX_RCON_* settings"""
    
    def test_defaults(self, monkeypatch):
        for name in ("IP", "PORT", "PASSWORD", "QUERY_TIMEOUT", "LOG_LEVEL"):
            monkeypatch.delenv(f"BFOX_RCON_{name}", raising=False)
        settings = RconConfig(_env_file=None)
        assert settings.ip is None
        assert settings.password is None
        assert settings.port == 47200
        assert settings.query_timeout is None
        assert settings.get_log_level() == "WARNING"
    
    def test_environment(self, monkeypatch):
        monkeypatch.setenv("BFOX_RCON_IP", "203.0.113.7")
        monkeypatch.setenv("BFOX_RCON_PORT", "25200")
        monkeypatch.setenv("BFOX_RCON_PASSWORD", "hunter2")
        monkeypatch.setenv("BFOX_RCON_LOG_LEVEL", "debug")
        settings = RconConfig(_env_file=None)
        assert settings.ip == "203.0.113.7"
        assert settings.port == 25200
        assert settings.password == "hunter2"
        assert settings.get_log_level() == "DEBUG"
    
    def test_dotenv_file(self, monkeypatch, tmp_path):
        for name in ("IP", "PASSWORD"):
            monkeypatch.delenv(f"BFOX_RCON_{name}", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("BFOX_RCON_IP=198.51.100.1\nBFOX_RCON_PASSWORD=fromfile\n")
        settings = RconConfig(_env_file=env_file)
        assert settings.ip == "198.51.100.1"
        assert settings.password == "fromfile"
    
    def test_invalid_port(self, monkeypatch):
        monkeypatch.setenv("BFOX_RCON_PORT", "0")
        with pytest.raises(pydantic.ValidationError):
            RconConfig(_env_file=None)
    
    def test_non_positive_query_timeout_means_none(self, monkeypatch):
        monkeypatch.setenv("BFOX_RCON_QUERY_TIMEOUT", "0")
        assert RconConfig(_env_file=None).query_timeout is None
    
    def test_event_log_file_is_path(self, monkeypatch):
        monkeypatch.setenv("BFOX_RCON_EVENT_LOG_FILE", "/tmp/rcon/events.jsonl")
        assert RconConfig(_env_file=None).event_log_file == Path("/tmp/rcon/events.jsonl")
    
    def test_str_hides_password(self, monkeypatch):
        monkeypatch.setenv("BFOX_RCON_PASSWORD", "hunter2")
        assert "hunter2" not in str(RconConfig(_env_file=None))
