"""
Response presenter.

Two interchangeable formatters render query results: ``RawFormatter`` for
scripts (plain text, one line per result, no escape sequences) and
``InteractiveFormatter`` for humans (rich colors, markers, local time).
``Presenter`` owns the control flow shared by both: a ConnectionClosed
result is rendered and then raised, and output failures are logged,
never raised.
"""

import sys
from abc import ABC, abstractmethod
from typing import IO, Optional, Sequence

from rich.console import Console
from rich.errors import ConsoleError
from rich.text import Text

from rcon_client.exceptions import ConnectionClosedError
from rcon_common.constants import PROMPT, RESPONSE_MARKER
from rcon_common.logging import get_bound_logger
from rcon_common.timestamps import format_for_display

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

logger = get_bound_logger("presenter")

ERROR_LABELS = {
    ConnectionClosed: "Connection Closed",
    InvalidArguments: "Invalid Arguments",
    UnknownCommand: "Unknown Command",
}


def error_label(kind: ErrorKind) -> Optional[str]:
    """
    Fixed label for an error kind, None for OtherError.
    
    Raises:
        AssertionError: For anything outside the closed ErrorKind set
    """
    if isinstance(kind, OtherError):
        return None
    label = ERROR_LABELS.get(type(kind))
    if label is None:
        raise AssertionError(f"Unexpected error kind: {kind!r}")
    return label


def join_words(words: Sequence[str]) -> str:
    """Each word with one leading space."""
    return "".join(f" {word}" for word in words)


def single_line(text: str) -> str:
    """Escape line breaks so one result stays on one output line."""
    return text.replace("\r", "\\r").replace("\n", "\\n")


class OutputFormatter(ABC):
    """Rendering strategy for query results."""
    
    def __init__(self, file: Optional[IO[str]] = None):
        self._file = file
    
    @property
    def file(self) -> IO[str]:
        # Resolved late so a replaced sys.stdout is honoured
        return self._file or sys.stdout
    
    @abstractmethod
    def render_ok(self, words: Sequence[str]) -> None:
        ...
    
    @abstractmethod
    def render_error(self, kind: ErrorKind) -> None:
        ...
    
    @abstractmethod
    def render_local_error(self, message: str) -> None:
        """Errors raised before a query is sent (bad input)."""
    
    def render_prompt(self) -> None:
        """Nothing by default; scripts get no prompt."""


class RawFormatter(OutputFormatter):
    """Plain, machine-parseable output."""
    
    def _line(self, text: str) -> None:
        self.file.write(single_line(text) + "\n")
        self.file.flush()
    
    def render_ok(self, words: Sequence[str]) -> None:
        self._line("OK" + join_words(words))
    
    def render_error(self, kind: ErrorKind) -> None:
        label = error_label(kind)
        if label is None:
            self._line(f"Error: {kind.message}")
        else:
            self._line(label)
    
    def render_local_error(self, message: str) -> None:
        self._line(f"Error: {message}")


class InteractiveFormatter(OutputFormatter):
    """Colored output with direction markers and local time."""
    
    def __init__(self, file: Optional[IO[str]] = None, console: Optional[Console] = None):
        super().__init__(file)
        self.console = console or Console(file=file, highlight=False, soft_wrap=True, emoji=False)
    
    def _stamp(self) -> Text:
        return Text(f"{format_for_display()} ", style="dim")
    
    def render_ok(self, words: Sequence[str]) -> None:
        line = self._stamp()
        line.append(f"{RESPONSE_MARKER} OK", style="black on green")
        line.append(join_words(words), style="green")
        self.console.print(line)
    
    def render_error(self, kind: ErrorKind) -> None:
        label = error_label(kind)
        line = self._stamp()
        if label is None:
            line.append(f"{RESPONSE_MARKER} Error", style="black on red")
            line.append(f" {kind.message}", style="red")
        else:
            line.append(f"{RESPONSE_MARKER} {label}", style="black on dark_red")
        self.console.print(line)
    
    def render_local_error(self, message: str) -> None:
        line = self._stamp()
        line.append("!! Invalid input", style="black on red")
        line.append(f" {message}", style="red")
        self.console.print(line)
    
    def render_prompt(self) -> None:
        self.console.print(PROMPT, end="")
        self.console.file.flush()


class Presenter:
    """Shows query results through one formatter."""
    
    def __init__(self, formatter: OutputFormatter):
        self.formatter = formatter
    
    def present(self, result: QueryResult) -> None:
        """
        Render one result.
        
        Raises:
            ConnectionClosedError: After rendering a ConnectionClosed result
            AssertionError: For a result outside the QueryResult set
        """
        if isinstance(result, QueryOk):
            self._guarded(self.formatter.render_ok, result.words)
        elif isinstance(result, QueryErr):
            # Classify first; an unknown kind must not be hidden by the output guard
            error_label(result.kind)
            self._guarded(self.formatter.render_error, result.kind)
            if isinstance(result.kind, ConnectionClosed):
                raise ConnectionClosedError()
        else:
            raise AssertionError(f"Unexpected query result: {result!r}")
    
    def present_local_error(self, message: str) -> None:
        self._guarded(self.formatter.render_local_error, message)
    
    def prompt(self) -> None:
        self._guarded(self.formatter.render_prompt)
    
    def _guarded(self, render, *args) -> None:
        try:
            render(*args)
        except (OSError, ConsoleError) as e:
            logger.warning("Failed to render output", error=str(e))


def make_presenter(raw: bool, file: Optional[IO[str]] = None) -> Presenter:
    """Presenter for raw (script) or interactive (human) output."""
    formatter = RawFormatter(file) if raw else InteractiveFormatter(file)
    return Presenter(formatter)
