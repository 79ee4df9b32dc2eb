#!/usr/bin/env python3
"""
Shared fixtures: an in-process fake RCON server speaking the real wire format.
"""

import asyncio
import hashlib
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest
import pytest_asyncio

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from rcon_client import RconClient
from rcon_client.exceptions import ConnectionClosedError
from rcon_client.packet import Packet, read_packet

# Returned by a handler to make the server hang up instead of answering
DROP = object()
# Returned by a handler to swallow the request
SILENT = object()


class FakeRconServer:
    """Minimal server: hashed login, echo, event push, scripted handlers."""
    
    def __init__(self, password: str = "secret", salt: bytes = bytes.fromhex("0011AABB2233CCDD")):
        self.password = password
        self.salt = salt
        self.handlers: Dict[str, Callable[[List[str]], object]] = {}
        self.received: List[List[str]] = []
        self.acks: List[Packet] = []
        self.writers: List[asyncio.StreamWriter] = []
        self.server: Optional[asyncio.AbstractServer] = None
        self.port: Optional[int] = None
        self._event_sequence = 0
    
    async def start(self):
        self.server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        self.port = self.server.sockets[0].getsockname()[1]
    
    async def stop(self):
        self.drop_clients()
        self.server.close()
        await self.server.wait_closed()
    
    def drop_clients(self):
        for writer in self.writers:
            writer.close()
        self.writers.clear()
    
    async def _handle(self, reader, writer):
        self.writers.append(writer)
        try:
            while True:
                packet = await read_packet(reader)
                if packet.is_response:
                    self.acks.append(packet)
                    continue
                self.received.append(packet.words)
                response = self.respond(packet.words)
                if response is SILENT:
                    continue
                if response is DROP:
                    writer.close()
                    return
                writer.write(Packet(packet.sequence, response, is_response=True).encode())
                await writer.drain()
        except (ConnectionClosedError, ConnectionError):
            pass
        finally:
            writer.close()
    
    def expected_hash(self) -> str:
        return hashlib.md5(self.salt + self.password.encode("ascii")).hexdigest().upper()
    
    def respond(self, words: List[str]):
        command = words[0]
        if command in self.handlers:
            return self.handlers[command](words)
        if command == "login.hashed":
            if len(words) == 1:
                return ["OK", self.salt.hex().upper()]
            return ["OK"] if words[1] == self.expected_hash() else ["InvalidPasswordHash"]
        if command == "admin.eventsEnabled":
            return ["OK"]
        if command == "admin.say":
            return ["OK"]
        if command == "echo":
            return ["OK", *words[1:]]
        return ["UnknownCommand"]
    
    async def push_event(self, words: List[str]):
        """Send a server-originated request to every client."""
        self._event_sequence += 1
        data = Packet(self._event_sequence, list(words), from_server=True).encode()
        for writer in self.writers:
            writer.write(data)
            await writer.drain()
    
    async def wait_for_acks(self, count: int, timeout: float = 2.0):
        deadline = asyncio.get_running_loop().time() + timeout
        while len(self.acks) < count:
            if asyncio.get_running_loop().time() > deadline:
                raise AssertionError(f"Expected {count} acks, got {len(self.acks)}")
            await asyncio.sleep(0.01)


@pytest_asyncio.fixture
async def rcon_server():
    server = FakeRconServer()
    await server.start()
    yield server
    await server.stop()


@pytest_asyncio.fixture
async def rcon_client(rcon_server):
    client = await RconClient.connect("127.0.0.1", rcon_server.port, rcon_server.password, timeout=5.0)
    yield client
    await client.close()
