"""
Interactive session loop.

Reads one line per turn, tokenizes it, executes it and presents the
result, until input ends or the connection closes. Turns never overlap:
the next line is read only after the previous result has been shown.
"""

import asyncio
import os
import sys
import threading
from typing import IO, Optional

from rcon_client.exceptions import ConnectionClosedError
from rcon_common.exceptions import ValidationError
from rcon_common.logging import get_bound_logger

from .executor import QueryExecutor
from .presenter import Presenter
from .tokenizer import tokenize, is_blank

logger = get_bound_logger("session_loop")

READ_CHUNK = 4096


class LineInput:
    """
    Line reader over a text stream that never fails on undecodable bytes.
    
    Streams backed by a file descriptor are read with ``os.read`` so a
    reader thread blocked at the prompt holds no interpreter-level lock.
    Bytes are decoded as UTF-8 with ``surrogateescape``: anything that is
    not valid text survives as non-ASCII characters, which the tokenizer
    then rejects like any other non-ASCII input.
    """
    
    def __init__(self, stream: IO[str]):
        self.stream = stream
        self._fd = _fileno(stream)
        self._pending = b""
    
    def readline(self) -> str:
        """One line including its terminator; '' at end of input."""
        if self._fd is not None:
            raw = self._read_fd_line()
        else:
            buffer = getattr(self.stream, "buffer", None)
            if buffer is None:
                return self.stream.readline()
            raw = buffer.readline()
        return raw.decode("utf-8", errors="surrogateescape")
    
    def _read_fd_line(self) -> bytes:
        while b"\n" not in self._pending:
            chunk = os.read(self._fd, READ_CHUNK)
            if not chunk:
                line, self._pending = self._pending, b""
                return line
            self._pending += chunk
        line, _, self._pending = self._pending.partition(b"\n")
        return line + b"\n"


def _fileno(stream: IO[str]) -> Optional[int]:
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError):
        # In-memory streams have no descriptor
        return None


class InteractiveSession:
    """Line-at-a-time console over one executor."""
    
    def __init__(self, executor: QueryExecutor, presenter: Presenter,
                 input_stream: Optional[IO[str]] = None):
        self.executor = executor
        self.presenter = presenter
        self._input = LineInput(input_stream if input_stream is not None else sys.stdin)
    
    async def read_line(self) -> str:
        """
        Wait for the next line; '' means end of input.
        
        The blocking read runs on a daemon thread, so cancelling this
        coroutine (Ctrl-C) never waits for the user to press Enter.
        """
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        
        def deliver(setter, value):
            if not future.done():
                setter(value)
        
        def reader():
            try:
                line = self._input.readline()
            except Exception as e:
                outcome = (future.set_exception, e)
            else:
                outcome = (future.set_result, line)
            try:
                loop.call_soon_threadsafe(deliver, *outcome)
            except RuntimeError:
                # Loop already closed after an interrupt; nobody is waiting
                pass
        
        threading.Thread(target=reader, name="rcon-console-input", daemon=True).start()
        return await future
    
    async def handle_line(self, line: str) -> None:
        """
        One turn: tokenize, execute, present.
        
        Raises:
            ConnectionClosedError: If the session is gone
        """
        if is_blank(line):
            return
        try:
            words = tokenize(line)
        except ValidationError as e:
            logger.info("Rejected input line", error=e.message)
            self.presenter.present_local_error(e.message)
            return
        
        try:
            result = await self.executor.execute(words)
        except ValidationError as e:
            # The session refused to encode it (oversized packet)
            self.presenter.present_local_error(e.message)
            return
        self.presenter.present(result)
    
    async def run(self) -> int:
        """
        Loop until end of input or connection close.
        
        Returns:
            Exit code, 0 for both clean endings
        """
        try:
            while True:
                self.presenter.prompt()
                try:
                    line = await self.read_line()
                except UnicodeDecodeError as e:
                    self.presenter.present_local_error(f"Input is not valid text: {e.reason}")
                    continue
                if line == "":
                    logger.debug("End of input")
                    return 0
                await self.handle_line(line)
        except ConnectionClosedError:
            logger.info("Connection closed, leaving interactive mode")
            return 0
