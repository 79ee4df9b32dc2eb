"""Shared configuration management using pydantic-settings.

Provides centralized configuration with environment variable support for
the protocol client and the console. Values are read from the process
environment and from a ``.env`` file in the working directory or the
nearest parent directory that has one.

Environment Variables:
    BFOX_RCON_IP - Server address (no default, required to connect)
    BFOX_RCON_PORT - RCON port (default: 47200)
    BFOX_RCON_PASSWORD - RCON admin password (no default, required to connect)
    BFOX_RCON_CONNECT_TIMEOUT - Connect and login timeout in seconds (default: 10.0)
    BFOX_RCON_QUERY_TIMEOUT - Per-query timeout in seconds (default: none, wait forever)
    BFOX_RCON_LOG_LEVEL - Diagnostic logging level (default: WARNING)
    BFOX_RCON_LOG_FORMAT - Diagnostic log format: json or console (default: console)
    BFOX_RCON_EVENT_LOG_FILE - JSON lines file for the event dump (default: var/logs/events.jsonl)

Example:
    export BFOX_RCON_IP=203.0.113.7
    export BFOX_RCON_PASSWORD=hunter2
    rcon-console query serverInfo
"""

from pathlib import Path
from typing import Literal, Optional

from dotenv import find_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings

from .constants import (
    DEFAULT_RCON_PORT,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_LOG_LEVEL,
    DEFAULT_EVENT_LOG_FILE,
    ENV_PREFIX,
)


class RconConfig(BaseSettings):
    """Configuration shared by the protocol client and the console.
    
    Command line flags override these values; see ``rcon_console.cli``.
    """
    
    # Connection
    ip: Optional[str] = None
    port: int = DEFAULT_RCON_PORT
    password: Optional[str] = None
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    query_timeout: Optional[float] = None
    
    # Logging configuration
    log_level: str = DEFAULT_LOG_LEVEL
    log_format: Literal["json", "console"] = "console"
    event_log_file: Path = Path(DEFAULT_EVENT_LOG_FILE)
    
    @field_validator('port', mode='after')
    @classmethod
    def check_port(cls, v: int) -> int:
        """Reject ports outside the TCP range."""
        if not 0 < v < 65536:
            raise ValueError(f"Invalid port number: {v}")
        return v
    
    @field_validator('query_timeout', mode='after')
    @classmethod
    def check_query_timeout(cls, v: Optional[float]) -> Optional[float]:
        """Treat zero or negative timeouts as no timeout."""
        if v is not None and v <= 0:
            return None
        return v
    
    model_config = {
        "env_prefix": ENV_PREFIX,
        "env_file": find_dotenv(usecwd=True) or ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"  # Ignore unknown environment variables
    }
    
    def get_log_level(self) -> str:
        """Get log level string for structlog."""
        return self.log_level.upper()
    
    def __str__(self) -> str:
        """String representation for debugging, password withheld."""
        return (
            f"RconConfig(ip={self.ip}, port={self.port}, "
            f"log_level={self.log_level})"
        )


# Global configuration instance
config = RconConfig()
