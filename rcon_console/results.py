"""
Query outcomes.

A query ends in exactly one ``QueryResult``: ``QueryOk`` with the response
words, or ``QueryErr`` carrying one of the four ``ErrorKind`` variants.
"""

from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class OtherError:
    """Free-form error status from the server."""
    message: str


@dataclass(frozen=True)
class ConnectionClosed:
    """The session is gone; ends the interactive loop."""


@dataclass(frozen=True)
class InvalidArguments:
    query: Tuple[str, ...] = ()


@dataclass(frozen=True)
class UnknownCommand:
    query: Tuple[str, ...] = ()


ErrorKind = Union[OtherError, ConnectionClosed, InvalidArguments, UnknownCommand]


@dataclass(frozen=True)
class QueryOk:
    words: Tuple[str, ...]


@dataclass(frozen=True)
class QueryErr:
    kind: ErrorKind


QueryResult = Union[QueryOk, QueryErr]
