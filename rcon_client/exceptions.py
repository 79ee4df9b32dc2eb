#!/usr/bin/env python3
"""
RCON Client Exceptions

Errors raised by the protocol client. Query failures form a closed set:
QueryError, ConnectionClosedError, InvalidArgumentsError and
UnknownCommandError. Callers may rely on nothing else escaping
``RconClient.query`` except ValidationError for unencodable input.
"""

from typing import Optional, Sequence

from rcon_common.exceptions import RconError, ConnectError, ProtocolError


class ConnectionClosedError(RconError):
    """Raised when the server closed the connection or it was lost."""
    
    def __init__(self, message: str = "Connection closed", **kwargs):
        super().__init__(message, code="CONNECTION_CLOSED", **kwargs)


class QueryError(RconError):
    """Raised when the server answers a query with a free-form error status."""
    
    def __init__(self, message: str, query: Optional[Sequence[str]] = None):
        super().__init__(message, code="QUERY_ERROR")
        self.query = tuple(query or ())


class InvalidArgumentsError(RconError):
    """Raised when the server rejects the arguments of a known command."""
    
    def __init__(self, query: Sequence[str]):
        self.query = tuple(query)
        super().__init__(f"Invalid arguments: {' '.join(self.query)}", code="INVALID_ARGUMENTS")


class UnknownCommandError(RconError):
    """Raised when the server does not know the command word."""
    
    def __init__(self, query: Sequence[str]):
        self.query = tuple(query)
        super().__init__(f"Unknown command: {' '.join(self.query)}", code="UNKNOWN_COMMAND")


class LoginError(ConnectError):
    """Raised when the login handshake is rejected."""
    
    def __init__(self, message: str = "Login failed", **kwargs):
        super().__init__(message, **kwargs)
        self.code = "AUTH_ERROR"


class EventDecodeError(ProtocolError):
    """A server event whose words could not be decoded.
    
    Instances are yielded by ``RconClient.event_stream`` rather than raised,
    so one malformed packet never ends the stream.
    """
    
    def __init__(self, message: str, words: Sequence[str]):
        super().__init__(message, details={"words": list(words)})
        self.words = tuple(words)


class UnknownEventError(EventDecodeError):
    """A server event with a name this client does not recognize."""
    
    def __init__(self, words: Sequence[str]):
        name = words[0] if words else ""
        super().__init__(f"Unknown event: {name}", words)
