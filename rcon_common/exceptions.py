"""Common exception classes for the RCON console.

Provides the base of the exception hierarchy used by the protocol client
and the console layers.
"""

from typing import Optional, Dict, Any


class RconError(Exception):
    """Base exception for all RCON-related errors."""
    
    def __init__(self, message: str, code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logs."""
        result = {"message": self.message}
        if self.code:
            result["code"] = self.code
        if self.details:
            result["details"] = self.details
        return result


class ValidationError(RconError):
    """Raised when input words cannot form a query (non-ASCII text)."""
    
    def __init__(self, message: str = "Invalid query word", **kwargs):
        super().__init__(message, code="VALIDATION_ERROR", **kwargs)


class ConnectError(RconError):
    """Raised when the TCP connection to the server cannot be established."""
    
    def __init__(self, message: str = "Failed to connect to server", **kwargs):
        super().__init__(message, code="CONNECTION_ERROR", **kwargs)


class ProtocolError(RconError):
    """Raised when protocol violations occur."""
    
    def __init__(self, message: str = "Protocol error", **kwargs):
        super().__init__(message, code="PROTOCOL_ERROR", **kwargs)


class EventStreamEnded(RconError):
    """Raised when the server event stream ends, which never happens in normal operation."""
    
    def __init__(self, message: str = "Event stream ended unexpectedly", **kwargs):
        super().__init__(message, code="STREAM_ENDED", **kwargs)
