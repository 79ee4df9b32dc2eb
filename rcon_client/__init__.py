#!/usr/bin/env python3
"""
RCON Client Library - asyncio client for Frostbite RCON servers

Usage:
    from rcon_client import RconClient
    
    client = await RconClient.connect("203.0.113.7", 47200, "secret")
    words = await client.query(["serverInfo"])
"""

from .client import RconClient
from .events import Event, EventKind, KNOWN_EVENTS, decode_event
from .packet import Packet, read_packet
from .exceptions import (
    ConnectionClosedError,
    QueryError,
    InvalidArgumentsError,
    UnknownCommandError,
    LoginError,
    EventDecodeError,
    UnknownEventError,
)

__version__ = "0.2.0"

__all__ = [
    "RconClient",
    "Event",
    "EventKind",
    "KNOWN_EVENTS",
    "decode_event",
    "Packet",
    "read_packet",
    "ConnectionClosedError",
    "QueryError",
    "InvalidArgumentsError",
    "UnknownCommandError",
    "LoginError",
    "EventDecodeError",
    "UnknownEventError",
]
