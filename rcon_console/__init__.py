"""
RCON Console - interactive and scripted front end for rcon_client.

- tokenizer: input lines to ASCII query words
- executor: one query, one QueryResult
- presenter: raw or colored rendering of results
- session_loop: the interactive read-execute-present loop
- event_dump: filtered, timestamped event stream consumption
"""

from .results import (
    QueryResult,
    QueryOk,
    QueryErr,
    ErrorKind,
    OtherError,
    ConnectionClosed,
    InvalidArguments,
    UnknownCommand,
)
from .tokenizer import split_line, validate_words, tokenize
from .executor import QueryExecutor
from .presenter import Presenter, RawFormatter, InteractiveFormatter, make_presenter
from .session_loop import InteractiveSession
from .event_dump import (
    EventDump,
    TimedEvent,
    EventSink,
    ConsoleEventSink,
    FileEventSink,
    accept,
)

__version__ = "0.2.0"
__all__ = [
    "QueryResult",
    "QueryOk",
    "QueryErr",
    "ErrorKind",
    "OtherError",
    "ConnectionClosed",
    "InvalidArguments",
    "UnknownCommand",
    "split_line",
    "validate_words",
    "tokenize",
    "QueryExecutor",
    "Presenter",
    "RawFormatter",
    "InteractiveFormatter",
    "make_presenter",
    "InteractiveSession",
    "EventDump",
    "TimedEvent",
    "EventSink",
    "ConsoleEventSink",
    "FileEventSink",
    "accept",
]
