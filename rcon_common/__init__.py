"""RCON Common - Shared utilities for all RCON console components.

This package contains shared configuration, logging, timestamps and the
exception base classes used by rcon_client and rcon_console. It has no
dependencies on the other packages to avoid circular imports.
"""

__version__ = "0.2.0"

from .timestamps import (
    utc_now,
    timestamp_utc,
    to_iso_utc,
    format_for_display,
    CaptureClock,
)
from .config import RconConfig, config
from .exceptions import (
    RconError,
    ValidationError,
    ConnectError,
    ProtocolError,
    EventStreamEnded,
)
from .logging import (
    configure_structlog,
    get_bound_logger,
    bind_connection_context,
    clear_context,
    operation_context,
    get_event_file_logger,
    close_event_file_logger,
)

__all__ = [
    # Version
    "__version__",
    
    # Config
    "RconConfig",
    "config",
    
    # Timestamps
    "utc_now",
    "timestamp_utc",
    "to_iso_utc",
    "format_for_display",
    "CaptureClock",
    
    # Exceptions
    "RconError",
    "ValidationError",
    "ConnectError",
    "ProtocolError",
    "EventStreamEnded",
    
    # Logging utilities
    "configure_structlog",
    "get_bound_logger",
    "bind_connection_context",
    "clear_context",
    "operation_context",
    "get_event_file_logger",
    "close_event_file_logger",
]
