#!/usr/bin/env python3
"""Tests for QueryExecutor error mapping and sequencing."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from rcon_client.exceptions import (
    ConnectionClosedError,
    QueryError,
    InvalidArgumentsError,
    UnknownCommandError,
    UnknownEventError,
)
from rcon_common.exceptions import ValidationError, ProtocolError
from rcon_console.executor import QueryExecutor
from rcon_console.results import (
    QueryOk,
    QueryErr,
    OtherError,
    ConnectionClosed,
    InvalidArguments,
    UnknownCommand,
)


def make_executor(**query_kwargs):
    session = AsyncMock()
    session.query = AsyncMock(**query_kwargs)
    return QueryExecutor(session), session


class TestResultMapping:
    """Session outcomes become QueryResults"""
    
    @pytest.mark.asyncio
    async def test_ok_words_unchanged(self):
        executor, session = make_executor(return_value=["OK"])
        result = await executor.execute(("admin.say", "hello", "world"))
        assert result == QueryOk(("OK",))
        session.query.assert_awaited_once_with(("admin.say", "hello", "world"))
    
    @pytest.mark.asyncio
    async def test_ok_preserves_order_and_empty_words(self):
        executor, _ = make_executor(return_value=["OK", "b", "", "a"])
        result = await executor.execute(["serverInfo"])
        assert result.words == ("OK", "b", "", "a")
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("error,expected", [
        (QueryError("PlayerNotFound"), OtherError("PlayerNotFound")),
        (ConnectionClosedError(), ConnectionClosed()),
        (InvalidArgumentsError(["admin.kickPlayer"]), InvalidArguments(("admin.kickPlayer",))),
        (UnknownCommandError(["nope"]), UnknownCommand(("nope",))),
    ])
    async def test_error_kinds(self, error, expected):
        executor, _ = make_executor(side_effect=error)
        assert await executor.execute(["x"]) == QueryErr(expected)
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        ProtocolError("garbage"),
        UnknownEventError(["server.onMystery"]),
    ])
    async def test_error_outside_taxonomy_is_fatal(self, error):
        executor, _ = make_executor(side_effect=error)
        with pytest.raises(AssertionError):
            await executor.execute(["x"])
    
    @pytest.mark.asyncio
    async def test_validation_error_propagates(self):
        executor, _ = make_executor(side_effect=ValidationError("too big"))
        with pytest.raises(ValidationError):
            await executor.execute(["x"])
    
    @pytest.mark.asyncio
    async def test_empty_query_never_sent(self):
        executor, session = make_executor(return_value=["OK"])
        with pytest.raises(ValueError):
            await executor.execute([])
        session.query.assert_not_awaited()


class TestSequencing:
    """One query in flight at a time"""
    
    @pytest.mark.asyncio
    async def test_no_pipelining(self):
        in_flight = 0
        peak = 0
        
        async def slow_query(words):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return ["OK", *words[1:]]
        
        executor, _ = make_executor(side_effect=slow_query)
        results = await asyncio.gather(*(executor.execute(["echo", str(n)]) for n in range(5)))
        
        assert peak == 1
        assert [r.words for r in results] == [("OK", str(n)) for n in range(5)]
