#!/usr/bin/env python3
"""
RCON Console Logging Configuration

Provides structured diagnostic logging using structlog on top of the
standard library. Diagnostics always go to stderr (or a log file) so that
stdout carries nothing but query results and events, which scripts parse.

The event dump's file sink is a separate stdlib logger that writes one
JSON document per line; see ``get_event_file_logger``.
"""

import logging
import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import structlog

# Global flag to track if structlog has been configured
_STRUCTLOG_CONFIGURED = False

EVENT_FILE_LOGGER = "rcon.events.file"


def configure_structlog(
    log_level: str = "WARNING",
    log_format: str = "console",
    log_file: Optional[Path] = None,
    force: bool = False
) -> None:
    """
    Configure structlog for all RCON components with stdlib integration.
    
    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format ("json" or "console")
        log_file: Optional diagnostic log file path (stderr when omitted)
        force: Reconfigure even if already configured
    """
    global _STRUCTLOG_CONFIGURED
    
    # First call wins unless forced
    if _STRUCTLOG_CONFIGURED and not force:
        return
    
    log_level_numeric = getattr(logging, log_level.upper(), logging.WARNING)
    
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(str(log_file), mode='a')
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level_numeric)
    
    timestamper = structlog.processors.TimeStamper(fmt="iso")
    
    # Shared processors for both structlog and stdlib logs
    shared_processors = [
        timestamper,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.contextvars.merge_contextvars,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer() if log_format == "json" else structlog.dev.ConsoleRenderer(colors=False),
        foreign_pre_chain=shared_processors,
    )
    handler.setFormatter(formatter)
    
    logging.basicConfig(
        level=log_level_numeric,
        handlers=[handler],
        force=True,  # Remove existing handlers
    )
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    
    _STRUCTLOG_CONFIGURED = True


def get_bound_logger(component: str, **default_context):
    """
    Get a bound logger with component identity and optional default context.
    
    Usage:
        logger = get_bound_logger("executor")
        logger.debug("query.completed", words=3)
    
    Args:
        component: Component name (e.g., "client", "executor")
        **default_context: Default context to bind to this logger instance
        
    Returns:
        Bound logger with component context
    """
    if not _STRUCTLOG_CONFIGURED:
        # Module import compatibility; the CLI reconfigures with real settings
        log_level = os.environ.get('BFOX_RCON_LOG_LEVEL', 'WARNING')
        log_format = os.environ.get('BFOX_RCON_LOG_FORMAT', 'console')
        configure_structlog(log_level=log_level, log_format=log_format)
    
    base_logger = structlog.get_logger("rcon")
    return base_logger.bind(component=component, **default_context)


def bind_connection_context(host: str, port: int, **extra_context) -> None:
    """Bind the server address to every log entry of the current context."""
    structlog.contextvars.bind_contextvars(host=host, port=port, **extra_context)


def clear_context() -> None:
    """Clear all context variables."""
    structlog.contextvars.clear_contextvars()


@contextmanager
def operation_context(**context):
    """Context manager for temporary operation-specific context."""
    structlog.contextvars.bind_contextvars(**context)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())


def get_event_file_logger(path: Path) -> logging.Logger:
    """
    Get the stdlib logger that persists the event dump as JSON lines.
    
    The logger does not propagate, so event lines never show up in the
    diagnostic stream. Calling this twice with the same path reuses the
    existing handler.
    
    Args:
        path: Target file, parent directories are created
        
    Returns:
        Logger writing the bare message, one per line
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    event_logger = logging.getLogger(EVENT_FILE_LOGGER)
    event_logger.setLevel(logging.INFO)
    event_logger.propagate = False
    
    target = str(path.resolve())
    for handler in event_logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            return event_logger
    
    handler = logging.FileHandler(target, mode='a', encoding='utf-8')
    handler.setFormatter(logging.Formatter('%(message)s'))
    event_logger.addHandler(handler)
    return event_logger


def close_event_file_logger() -> None:
    """Flush and detach every handler of the event file logger."""
    event_logger = logging.getLogger(EVENT_FILE_LOGGER)
    for handler in event_logger.handlers[:]:
        handler.close()
        event_logger.removeHandler(handler)
