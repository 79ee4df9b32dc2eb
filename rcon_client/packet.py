#!/usr/bin/env python3
"""
Frostbite RCON packet framing.

Wire layout, all integers little-endian uint32:

    sequence   bit 31: packet originated on the server
               bit 30: packet is a response
               bits 0-29: sequence number
    size       total packet size in bytes, header included
    num_words  number of words that follow

    word       size (content only), content bytes, NUL terminator

Packets never exceed MAX_PACKET_SIZE bytes.
"""

import asyncio
import struct
from dataclasses import dataclass, field
from typing import List, Sequence

from rcon_common.constants import MAX_PACKET_SIZE, HEADER_SIZE, MAX_SEQUENCE
from rcon_common.exceptions import ProtocolError, ValidationError

from .exceptions import ConnectionClosedError

FROM_SERVER_FLAG = 0x80000000
RESPONSE_FLAG = 0x40000000

_HEADER = struct.Struct("<III")
_WORD_SIZE = struct.Struct("<I")


@dataclass
class Packet:
    """A single RCON packet."""
    sequence: int
    words: List[str] = field(default_factory=list)
    from_server: bool = False
    is_response: bool = False
    
    def encode(self) -> bytes:
        """Serialize to wire bytes.
        
        Raises:
            ValidationError: If a word is not ASCII or the packet is too large
        """
        body = bytearray()
        for word in self.words:
            try:
                raw = word.encode("ascii")
            except UnicodeEncodeError:
                raise ValidationError(f"Word is not ASCII: {word!r}")
            body += _WORD_SIZE.pack(len(raw))
            body += raw
            body += b"\x00"
        
        size = HEADER_SIZE + len(body)
        if size > MAX_PACKET_SIZE:
            raise ValidationError(f"Packet of {size} bytes exceeds the {MAX_PACKET_SIZE} byte limit")
        
        header = self.sequence & MAX_SEQUENCE
        if self.from_server:
            header |= FROM_SERVER_FLAG
        if self.is_response:
            header |= RESPONSE_FLAG
        return _HEADER.pack(header, size, len(self.words)) + bytes(body)
    
    @classmethod
    def decode(cls, data: bytes) -> "Packet":
        """Parse one complete packet.
        
        Non-ASCII bytes inside words are kept as backslash escapes so the
        words stay ASCII.
        
        Raises:
            ProtocolError: If the framing is inconsistent
        """
        if len(data) < HEADER_SIZE:
            raise ProtocolError(f"Packet too short: {len(data)} bytes")
        header, size, num_words = _HEADER.unpack_from(data, 0)
        if size != len(data):
            raise ProtocolError(f"Packet size mismatch: header says {size}, got {len(data)}")
        
        words = []
        offset = HEADER_SIZE
        for _ in range(num_words):
            if offset + _WORD_SIZE.size > size:
                raise ProtocolError("Truncated word header")
            (length,) = _WORD_SIZE.unpack_from(data, offset)
            offset += _WORD_SIZE.size
            end = offset + length
            if end + 1 > size or data[end] != 0:
                raise ProtocolError("Word is truncated or not NUL-terminated")
            words.append(data[offset:end].decode("ascii", errors="backslashreplace"))
            offset = end + 1
        
        if offset != size:
            raise ProtocolError(f"{size - offset} trailing bytes after last word")
        
        return cls(
            sequence=header & MAX_SEQUENCE,
            words=words,
            from_server=bool(header & FROM_SERVER_FLAG),
            is_response=bool(header & RESPONSE_FLAG),
        )


def make_request(sequence: int, words: Sequence[str]) -> Packet:
    """Client-originated request."""
    return Packet(sequence=sequence, words=list(words))


def make_ack(request: Packet) -> Packet:
    """Acknowledge a server-originated request with a bare OK."""
    return Packet(sequence=request.sequence, words=["OK"],
                  from_server=request.from_server, is_response=True)


async def read_packet(reader: asyncio.StreamReader) -> Packet:
    """
    Read exactly one packet from the stream.
    
    Raises:
        ConnectionClosedError: If the stream ends, even mid-packet
        ProtocolError: If the announced size is out of bounds
    """
    try:
        header = await reader.readexactly(HEADER_SIZE)
        _, size, _ = _HEADER.unpack(header)
        if size < HEADER_SIZE or size > MAX_PACKET_SIZE:
            raise ProtocolError(f"Invalid packet size: {size}")
        body = await reader.readexactly(size - HEADER_SIZE)
    except asyncio.IncompleteReadError:
        raise ConnectionClosedError("Server closed the connection")
    except ConnectionError as e:
        raise ConnectionClosedError(f"Connection lost: {e}")
    return Packet.decode(header + body)
