#!/usr/bin/env python3
"""
Server event decoding.

Turns the words of a server-originated packet into a tagged ``Event``.
Only the event names below are recognized; anything else becomes an
``UnknownEventError`` carrying the raw words, and a recognized name with
too few words becomes an ``EventDecodeError``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Sequence, Tuple, Union

from .exceptions import EventDecodeError, UnknownEventError


class EventKind(str, Enum):
    """Recognized server event categories."""
    PLAYER_AUTHENTICATED = "player_authenticated"
    PLAYER_JOIN = "player_join"
    PLAYER_LEAVE = "player_leave"
    PLAYER_SPAWN = "player_spawn"
    PLAYER_KILL = "player_kill"
    PLAYER_CHAT = "player_chat"
    PLAYER_SQUAD_CHANGE = "player_squad_change"
    PLAYER_TEAM_CHANGE = "player_team_change"
    PUNKBUSTER = "punkbuster"
    LEVEL_LOADED = "level_loaded"
    ROUND_OVER = "round_over"
    ROUND_OVER_PLAYERS = "round_over_players"
    ROUND_OVER_TEAM_SCORES = "round_over_team_scores"
    MAX_PLAYER_COUNT_CHANGE = "max_player_count_change"


# event name -> (kind, named leading fields); remaining words are kept in ``extra``
KNOWN_EVENTS: Dict[str, Tuple[EventKind, Tuple[str, ...]]] = {
    "player.onAuthenticated": (EventKind.PLAYER_AUTHENTICATED, ("player",)),
    "player.onJoin": (EventKind.PLAYER_JOIN, ("player", "guid")),
    "player.onLeave": (EventKind.PLAYER_LEAVE, ("player",)),
    "player.onSpawn": (EventKind.PLAYER_SPAWN, ("player", "team")),
    "player.onKill": (EventKind.PLAYER_KILL, ("killer", "victim", "weapon", "headshot")),
    "player.onChat": (EventKind.PLAYER_CHAT, ("player", "message")),
    "player.onSquadChange": (EventKind.PLAYER_SQUAD_CHANGE, ("player", "team", "squad")),
    "player.onTeamChange": (EventKind.PLAYER_TEAM_CHANGE, ("player", "team", "squad")),
    "punkBuster.onMessage": (EventKind.PUNKBUSTER, ("message",)),
    "server.onLevelLoaded": (EventKind.LEVEL_LOADED, ("level", "game_mode", "rounds_played", "rounds_total")),
    "server.onRoundOver": (EventKind.ROUND_OVER, ("winning_team",)),
    "server.onRoundOverPlayers": (EventKind.ROUND_OVER_PLAYERS, ()),
    "server.onRoundOverTeamScores": (EventKind.ROUND_OVER_TEAM_SCORES, ()),
    "server.onMaxPlayerCountChange": (EventKind.MAX_PLAYER_COUNT_CHANGE, ("count",)),
}


def format_call(name: str, fields: Dict[str, str], extra: Sequence[str] = ()) -> str:
    """Readable one-line form: name(key='value', ..., extra=[...])."""
    parts = [f"{key}={value!r}" for key, value in fields.items()]
    if extra:
        parts.append(f"extra={list(extra)!r}")
    return f"{name}({', '.join(parts)})"


@dataclass(frozen=True)
class Event:
    """A decoded server event."""
    name: str
    kind: EventKind
    fields: Dict[str, str] = field(default_factory=dict)
    extra: Tuple[str, ...] = ()
    
    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "fields": dict(self.fields),
            "extra": list(self.extra),
        }
    
    def __str__(self) -> str:
        return format_call(self.name, self.fields, self.extra)


def decode_event(words: Sequence[str]) -> Union[Event, EventDecodeError]:
    """
    Decode the words of one server event.
    
    Decode failures are returned, not raised.
    
    Args:
        words: Packet words, event name first
        
    Returns:
        Event, UnknownEventError or EventDecodeError
    """
    if not words:
        return EventDecodeError("Empty event packet", words)
    
    name = words[0]
    known = KNOWN_EVENTS.get(name)
    if known is None:
        return UnknownEventError(words)
    
    kind, field_names = known
    args = words[1:]
    if len(args) < len(field_names):
        return EventDecodeError(
            f"{name} expects at least {len(field_names)} arguments, got {len(args)}", words
        )
    
    return Event(
        name=name,
        kind=kind,
        fields=dict(zip(field_names, args)),
        extra=tuple(args[len(field_names):]),
    )
