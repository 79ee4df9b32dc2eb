#!/usr/bin/env python3
"""
RCON Client

Asyncio client for the Frostbite RCON protocol. One TCP connection per
client; a background listener task routes responses to the waiting query
by sequence number and queues server-originated events for
``event_stream``.
"""

import asyncio
import hashlib
from typing import AsyncIterator, Dict, List, Optional, Sequence, Union

from rcon_common.constants import (
    DEFAULT_CONNECT_TIMEOUT,
    MAX_SEQUENCE,
    STATUS_OK,
    STATUS_INVALID_ARGUMENTS,
    STATUS_UNKNOWN_COMMAND,
)
from rcon_common.exceptions import ConnectError, ProtocolError, ValidationError
from rcon_common.logging import get_bound_logger

from .events import Event, decode_event
from .exceptions import (
    ConnectionClosedError,
    QueryError,
    InvalidArgumentsError,
    UnknownCommandError,
    LoginError,
    EventDecodeError,
)
from .packet import Packet, make_ack, make_request, read_packet

logger = get_bound_logger("client")

# Marks the end of the event queue once the connection is gone
_CLOSED = object()


class RconClient:
    """
    Connected RCON session.
    
    Usage:
        async with await RconClient.connect("203.0.113.7", 47200, "secret") as client:
            words = await client.query(["serverInfo"])
            async for event in client.event_stream():
                print(event)
    """
    
    def __init__(self, host: str, port: int, query_timeout: Optional[float] = None):
        """
        Initialize an unconnected client; prefer ``RconClient.connect``.
        
        Args:
            host: Server address
            port: RCON port
            query_timeout: Seconds to wait for each response (None waits forever)
        """
        self.host = host
        self.port = port
        self.query_timeout = query_timeout
        
        # Connection state
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None
        self.connected = False
        self._listen_task: Optional[asyncio.Task] = None
        self._write_lock = asyncio.Lock()
        
        # Correlation state
        self._next_sequence = 0
        self._pending_requests: Dict[int, asyncio.Future] = {}
        
        # Server-originated packets, drained by event_stream()
        self._events: asyncio.Queue = asyncio.Queue()
        self._events_enabled = False
    
    @classmethod
    async def connect(cls, host: str, port: int, password: str,
                      timeout: float = DEFAULT_CONNECT_TIMEOUT,
                      query_timeout: Optional[float] = None) -> "RconClient":
        """
        Open a connection and log in.
        
        Raises:
            ConnectError: If the server is unreachable
            LoginError: If the password is rejected
        """
        client = cls(host, port, query_timeout=query_timeout)
        await client.open(timeout)
        try:
            await asyncio.wait_for(client.login(password), timeout=timeout)
        except asyncio.TimeoutError:
            await client.close()
            raise LoginError(f"Login to {host}:{port} timed out")
        except ConnectionClosedError:
            await client.close()
            raise LoginError(f"Server at {host}:{port} closed the connection during login")
        except Exception:
            await client.close()
            raise
        return client
    
    async def __aenter__(self):
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
    
    async def open(self, timeout: float = DEFAULT_CONNECT_TIMEOUT):
        """Open the TCP connection and start the listener."""
        if self.connected:
            return
        
        try:
            self.reader, self.writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=timeout
            )
        except asyncio.TimeoutError:
            raise ConnectError(f"Connection timeout to {self.host}:{self.port}")
        except OSError as e:
            raise ConnectError(f"Failed to connect to {self.host}:{self.port}: {e}")
        
        self.connected = True
        self._listen_task = asyncio.create_task(self._listen())
        logger.info("Connected to server", host=self.host, port=self.port)
    
    async def login(self, password: str):
        """
        Salted-hash login.
        
        Raises:
            LoginError: If the server rejects the handshake or the password
        """
        try:
            raw_password = password.encode("ascii")
        except UnicodeEncodeError:
            raise LoginError("Password is not an ASCII string")
        
        try:
            response = await self.query(["login.hashed"])
            if len(response) != 2:
                raise LoginError(f"Unexpected salt response: {response}")
            try:
                salt = bytes.fromhex(response[1])
            except ValueError:
                raise LoginError(f"Salt is not hex: {response[1]!r}")
            digest = hashlib.md5(salt + raw_password).hexdigest().upper()
            await self.query(["login.hashed", digest])
        except (QueryError, InvalidArgumentsError, UnknownCommandError) as e:
            raise LoginError(f"Login rejected: {e.message}")
        logger.info("Logged in")
    
    async def close(self):
        """Stop the listener and close the connection."""
        if self._listen_task and not self._listen_task.done():
            self._listen_task.cancel()
            try:
                await self._listen_task
            except asyncio.CancelledError:
                pass
        
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except (ConnectionError, OSError):
                pass
            self.writer = None
        
        self._mark_closed(ConnectionClosedError("Client closed the connection"))
    
    def _mark_closed(self, error: ConnectionClosedError):
        """Fail every waiting query and end the event stream."""
        if not self.connected:
            return
        self.connected = False
        for future in self._pending_requests.values():
            if not future.done():
                future.set_exception(error)
        self._pending_requests.clear()
        self._events.put_nowait(_CLOSED)
    
    async def _listen(self):
        """Route incoming packets until the connection ends."""
        try:
            while True:
                packet = await read_packet(self.reader)
                if packet.is_response:
                    self._handle_response(packet)
                else:
                    await self._handle_server_request(packet)
        except asyncio.CancelledError:
            raise
        except ConnectionClosedError as e:
            logger.warning("Connection closed", reason=e.message)
            self._mark_closed(e)
        except ProtocolError as e:
            logger.error("Protocol violation, dropping connection", error=e.message)
            self._mark_closed(ConnectionClosedError(f"Protocol error: {e.message}"))
    
    def _handle_response(self, packet: Packet):
        future = self._pending_requests.pop(packet.sequence, None)
        if future is None:
            logger.warning("Response for unknown sequence", sequence=packet.sequence)
            return
        if not future.cancelled():
            future.set_result(packet.words)
    
    async def _handle_server_request(self, packet: Packet):
        # The server expects every request to be acknowledged
        try:
            await self._send(make_ack(packet))
        except (ConnectionError, OSError) as e:
            raise ConnectionClosedError(f"Connection lost: {e}")
        self._events.put_nowait(packet.words)
    
    async def _send(self, packet: Packet):
        data = packet.encode()
        async with self._write_lock:
            self.writer.write(data)
            await self.writer.drain()
    
    def _allocate_sequence(self) -> int:
        sequence = self._next_sequence
        self._next_sequence = (self._next_sequence + 1) & MAX_SEQUENCE
        return sequence
    
    async def query(self, words: Sequence[str]) -> List[str]:
        """
        Send one query and wait for its response.
        
        Args:
            words: Command word followed by its arguments
            
        Returns:
            Complete response words, leading OK status included
            
        Raises:
            ValidationError: If the words cannot be encoded
            ConnectionClosedError: If the connection is or becomes closed
            InvalidArgumentsError: If the server rejects the arguments
            UnknownCommandError: If the server does not know the command
            QueryError: For any other error status (including timeouts)
        """
        words = list(words)
        if not words:
            raise ValidationError("Refusing to send an empty query")
        if not self.connected:
            raise ConnectionClosedError("Not connected to server")
        
        sequence = self._allocate_sequence()
        packet = make_request(sequence, words)
        # Encode before registering so a bad word leaves no pending entry
        packet.encode()
        
        response_future = asyncio.get_running_loop().create_future()
        self._pending_requests[sequence] = response_future
        
        try:
            try:
                await self._send(packet)
            except (ConnectionError, OSError) as e:
                error = ConnectionClosedError(f"Connection lost: {e}")
                self._mark_closed(error)
                raise error
            
            try:
                response = await asyncio.wait_for(response_future, timeout=self.query_timeout)
            except asyncio.TimeoutError:
                raise QueryError(f"No response within {self.query_timeout}s", words)
        finally:
            self._pending_requests.pop(sequence, None)
        
        return self._check_status(words, response)
    
    @staticmethod
    def _check_status(query: List[str], response: List[str]) -> List[str]:
        if not response:
            raise QueryError("Empty response", query)
        status = response[0]
        if status == STATUS_OK:
            return response
        if status == STATUS_INVALID_ARGUMENTS:
            raise InvalidArgumentsError(query)
        if status == STATUS_UNKNOWN_COMMAND:
            raise UnknownCommandError(query)
        raise QueryError(" ".join(response), query)
    
    async def enable_events(self):
        """Ask the server to push events on this connection."""
        if self._events_enabled:
            return
        await self.query(["admin.eventsEnabled", "true"])
        self._events_enabled = True
        logger.info("Server events enabled")
    
    async def event_stream(self) -> AsyncIterator[Union[Event, EventDecodeError]]:
        """
        Yield decoded server events forever.
        
        Decode failures are yielded as EventDecodeError instances, not raised.
        Only one consumer should drain the stream.
        
        Raises:
            ConnectionClosedError: When the connection ends
        """
        await self.enable_events()
        while True:
            item = await self._events.get()
            if item is _CLOSED:
                # Leave the marker for any later consumer
                self._events.put_nowait(_CLOSED)
                raise ConnectionClosedError("Event stream closed with the connection")
            yield decode_event(item)
