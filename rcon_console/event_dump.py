"""
Event consumption loop.

Drains the server event stream for as long as the connection lives. Each
item that passes the PunkBuster filter is stamped once, wrapped in a
TimedEvent and handed to every sink. Decode failures are items too: they
are stamped and written like events.
"""

import json
import logging
import sys
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import IO, AsyncIterator, Dict, List, Literal, Optional, Sequence

from pydantic import BaseModel, Field
from rich.console import Console
from rich.errors import ConsoleError
from rich.text import Text

from rcon_client.events import Event, EventKind, format_call
from rcon_client.exceptions import EventDecodeError, UnknownEventError
from rcon_common.exceptions import EventStreamEnded
from rcon_common.logging import get_bound_logger, get_event_file_logger
from rcon_common.timestamps import CaptureClock, to_iso_utc

from .presenter import single_line
from .protocols import EventItem

logger = get_bound_logger("event_dump")


class TimedEvent(BaseModel):
    """One stream item with its capture time."""
    timestamp: datetime
    kind: Literal["event", "unknown", "error"]
    name: Optional[str] = None
    category: Optional[str] = None
    fields: Dict[str, str] = Field(default_factory=dict)
    words: List[str] = Field(default_factory=list)
    message: Optional[str] = None
    
    @classmethod
    def capture(cls, item: EventItem, timestamp: datetime) -> "TimedEvent":
        if isinstance(item, Event):
            data = item.to_dict()
            return cls(
                timestamp=timestamp,
                kind="event",
                name=data["name"],
                category=data["kind"],
                fields=data["fields"],
                words=data["extra"],
            )
        if isinstance(item, UnknownEventError):
            return cls(timestamp=timestamp, kind="unknown", words=list(item.words))
        return cls(timestamp=timestamp, kind="error", words=list(item.words), message=item.message)
    
    @property
    def is_error(self) -> bool:
        return self.kind == "error"
    
    def body(self) -> str:
        """Payload text without the timestamp."""
        if self.kind == "event":
            return format_call(self.name, self.fields, self.words)
        if self.kind == "unknown":
            return repr(self.words)
        return f"{self.message} {self.words!r}"
    
    def to_line(self) -> str:
        """Stable single-line text form."""
        prefix = "!!! Error " if self.is_error else ""
        return f"{to_iso_utc(self.timestamp)} {prefix}{self.body()}"
    
    def to_json(self) -> str:
        data = self.model_dump(exclude_none=True)
        data["timestamp"] = to_iso_utc(self.timestamp)
        return json.dumps(data, sort_keys=True)


def accept(item: EventItem, show_punkbuster: bool) -> bool:
    """Filter applied before anything else; only PunkBuster events can be dropped."""
    if isinstance(item, Event) and item.kind == EventKind.PUNKBUSTER:
        return show_punkbuster
    return True


class EventSink(ABC):
    """Destination for timed events."""
    
    @abstractmethod
    def write(self, timed: TimedEvent) -> None:
        ...
    
    def close(self) -> None:
        pass


class ConsoleEventSink(EventSink):
    """Events on stdout; errors get a red badge unless raw."""
    
    def __init__(self, raw: bool, file: Optional[IO[str]] = None, console: Optional[Console] = None):
        self.raw = raw
        self._file = file
        self.console = console or Console(file=file, highlight=False, soft_wrap=True, emoji=False)
    
    def write(self, timed: TimedEvent) -> None:
        try:
            if self.raw or not timed.is_error:
                out = self._file or sys.stdout
                out.write(single_line(timed.to_line()) + "\n")
                out.flush()
                return
            line = Text(f"{to_iso_utc(timed.timestamp)} ")
            line.append("!!! Error", style="black on red")
            line.append(f" {timed.body()}", style="red")
            self.console.print(line)
        except (OSError, ConsoleError) as e:
            logger.warning("Failed to print event", error=str(e))


class FileEventSink(EventSink):
    """Events appended to a JSON lines file."""
    
    def __init__(self, path: Path):
        self.path = path
        self._logger: logging.Logger = get_event_file_logger(path)
    
    def write(self, timed: TimedEvent) -> None:
        self._logger.info(timed.to_json())
    
    def close(self) -> None:
        for handler in self._logger.handlers:
            handler.flush()


class EventDump:
    """Filter, stamp and persist a server event stream."""
    
    def __init__(self, sinks: Sequence[EventSink], show_punkbuster: bool = False,
                 clock: Optional[CaptureClock] = None):
        self.sinks = list(sinks)
        self.show_punkbuster = show_punkbuster
        self.clock = clock or CaptureClock()
        self.emitted = 0
    
    def handle(self, item: EventItem) -> Optional[TimedEvent]:
        """Process one item; returns the TimedEvent or None when filtered out."""
        if not accept(item, self.show_punkbuster):
            return None
        if isinstance(item, EventDecodeError) and not isinstance(item, UnknownEventError):
            logger.warning("Undecodable event", error=item.message)
        timed = TimedEvent.capture(item, self.clock.now())
        for sink in self.sinks:
            sink.write(timed)
        self.emitted += 1
        return timed
    
    async def run(self, stream: AsyncIterator[EventItem]) -> None:
        """
        Consume the stream; never returns normally.
        
        Raises:
            EventStreamEnded: If the stream is exhausted
            ConnectionClosedError: If the connection ends
        """
        try:
            async for item in stream:
                self.handle(item)
        finally:
            for sink in self.sinks:
                sink.close()
        raise EventStreamEnded(details={"emitted": self.emitted})
