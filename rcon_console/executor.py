"""
Query executor.

Sends one tokenized query through the session and turns the outcome into a
QueryResult. Queries are strictly sequential: a lock lets only one query
be in flight per executor, whatever the session guarantees.
"""

import asyncio
import time
from typing import Sequence

from rcon_client.exceptions import (
    ConnectionClosedError,
    QueryError,
    InvalidArgumentsError,
    UnknownCommandError,
)
from rcon_common.exceptions import RconError, ValidationError
from rcon_common.logging import get_bound_logger, operation_context

from .protocols import QuerySession
from .results import (
    QueryResult,
    QueryOk,
    QueryErr,
    OtherError,
    ConnectionClosed,
    InvalidArguments,
    UnknownCommand,
)

logger = get_bound_logger("executor")


class QueryExecutor:
    """Runs queries one at a time against a session."""
    
    def __init__(self, session: QuerySession):
        self.session = session
        self._gate = asyncio.Lock()
    
    async def execute(self, words: Sequence[str]) -> QueryResult:
        """
        Send one query and wait for its single response.
        
        Args:
            words: Non-empty, already validated query words
            
        Returns:
            QueryOk or QueryErr
            
        Raises:
            ValueError: If words is empty
            ValidationError: If the session cannot encode the words
            AssertionError: If the session fails outside the known error set
        """
        words = tuple(words)
        if not words:
            raise ValueError("Cannot execute an empty query")
        
        async with self._gate:
            with operation_context(command=words[0]):
                start = time.monotonic()
                result = await self._run(words)
                logger.debug(
                    "query.completed",
                    word_count=len(words),
                    outcome=type(result.kind).__name__ if isinstance(result, QueryErr) else "ok",
                    duration_ms=round((time.monotonic() - start) * 1000, 1),
                )
        return result
    
    async def _run(self, words: tuple) -> QueryResult:
        try:
            response = await self.session.query(words)
        except ValidationError:
            raise
        except QueryError as e:
            return QueryErr(OtherError(e.message))
        except ConnectionClosedError:
            return QueryErr(ConnectionClosed())
        except InvalidArgumentsError as e:
            return QueryErr(InvalidArguments(e.query))
        except UnknownCommandError as e:
            return QueryErr(UnknownCommand(e.query))
        except RconError as e:
            raise AssertionError(f"Unexpected error from session: {e!r}") from e
        return QueryOk(tuple(response))
