"""Structural types for the session the console drives."""

from typing import List, Protocol, Sequence, Union

from rcon_client.events import Event
from rcon_client.exceptions import EventDecodeError

EventItem = Union[Event, EventDecodeError]


class QuerySession(Protocol):
    """Anything that answers one query with one response."""
    
    async def query(self, words: Sequence[str]) -> List[str]:
        ...
