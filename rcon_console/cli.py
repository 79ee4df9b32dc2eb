#!/usr/bin/env python3
"""
rcon-console command line interface.

Connects, then runs exactly one mode:

    rcon-console                        interactive console
    rcon-console query serverInfo       one query, print result, exit
    rcon-console events --punkbuster yes --log-file yes

Connection settings come from BFOX_RCON_IP / BFOX_RCON_PORT /
BFOX_RCON_PASSWORD (environment or a .env file in the working directory
or above); the flags override them.
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from rcon_client import RconClient
from rcon_client.exceptions import ConnectionClosedError
from rcon_common import __version__
from rcon_common.config import config
from rcon_common.exceptions import ConnectError, EventStreamEnded, ValidationError
from rcon_common.logging import (
    configure_structlog,
    get_bound_logger,
    bind_connection_context,
    clear_context,
    close_event_file_logger,
)

from .event_dump import EventDump, ConsoleEventSink, FileEventSink
from .executor import QueryExecutor
from .presenter import make_presenter
from .session_loop import InteractiveSession
from .tokenizer import validate_words

logger = get_bound_logger("cli")

YES_NO = {"yes": True, "no": False}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rcon-console",
        description="Send RCON queries and dump server events. "
                    "Also reads BFOX_RCON_* variables from a .env file in the "
                    "working directory or any parent.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-r", "--raw", action="store_true",
                        help="No colors and no ->, <- markers. Use this for automated scripts")
    parser.add_argument("--ip", default=config.ip, help="RCON server address [BFOX_RCON_IP]")
    parser.add_argument("--port", type=int, default=config.port, help="RCON port [BFOX_RCON_PORT]")
    parser.add_argument("--password", default=config.password,
                        help="RCON password. Prefer BFOX_RCON_PASSWORD or a .env file")
    parser.add_argument("--log-level", default=config.get_log_level(),
                        help="Diagnostic log level, written to stderr")
    
    subparsers = parser.add_subparsers(dest="command")
    
    query_parser = subparsers.add_parser(
        "query", help="Send a single query and print the result instead of going interactive")
    query_parser.add_argument("words", nargs="+", help="Command word and arguments")
    
    events_parser = subparsers.add_parser("events", help="Dump all server events")
    events_parser.add_argument("--punkbuster", choices=sorted(YES_NO), default="no",
                               help="Whether to show PunkBuster messages in the dump")
    events_parser.add_argument("--log-file", choices=sorted(YES_NO), default="no",
                               help="Whether to also append events to a JSON lines file")
    events_parser.add_argument("--log-path", type=Path, default=config.event_log_file,
                               help="Event log file [BFOX_RCON_EVENT_LOG_FILE]")
    return parser


async def single_query(client: RconClient, words: List[str], raw: bool) -> int:
    """One-shot mode: 0 once a response was shown, 1 if nothing could be sent."""
    presenter = make_presenter(raw)
    try:
        query = validate_words(words)
    except ValidationError as e:
        presenter.present_local_error(e.message)
        return 1
    
    try:
        result = await QueryExecutor(client).execute(query)
        presenter.present(result)
    except ValidationError as e:
        presenter.present_local_error(e.message)
        return 1
    except ConnectionClosedError:
        return 1
    return 0


async def interactive(client: RconClient, raw: bool) -> int:
    session = InteractiveSession(QueryExecutor(client), make_presenter(raw))
    return await session.run()


async def events_dump(client: RconClient, raw: bool, show_punkbuster: bool,
                      log_path: Optional[Path]) -> int:
    """Runs until the connection ends, which is always a failure."""
    sinks = [ConsoleEventSink(raw)]
    if log_path is not None:
        try:
            sinks.append(FileEventSink(log_path))
        except OSError as e:
            print(f"Failed to open event log file {log_path}: {e}", file=sys.stderr)
            return 1
        logger.info("Logging events to file", path=str(log_path))
    
    dump = EventDump(sinks, show_punkbuster=show_punkbuster)
    try:
        await dump.run(client.event_stream())
    except (EventStreamEnded, ConnectionClosedError) as e:
        logger.error("Event stream ended", error=e.to_dict(), emitted=dump.emitted)
        return 1
    finally:
        close_event_file_logger()
    return 1


async def run_command(args: argparse.Namespace) -> int:
    """Connect, run the selected mode, disconnect."""
    bind_connection_context(args.ip, args.port)
    try:
        client = await RconClient.connect(
            args.ip, args.port, args.password,
            timeout=config.connect_timeout,
            query_timeout=config.query_timeout,
        )
    except ConnectError as e:
        logger.info("Connect failed", error=e.to_dict())
        clear_context()
        print(f"Failed to connect to Rcon at {args.ip}:{args.port} with password ***: {e.message}",
              file=sys.stderr)
        return 1
    
    try:
        if args.command == "query":
            return await single_query(client, args.words, args.raw)
        if args.command == "events":
            log_path = args.log_path if YES_NO[args.log_file] else None
            return await events_dump(client, args.raw, YES_NO[args.punkbuster], log_path)
        return await interactive(client, args.raw)
    finally:
        await client.close()
        clear_context()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    
    if not args.ip:
        parser.error("no server address: pass --ip or set BFOX_RCON_IP")
    if args.password is None:
        parser.error("no password: pass --password or set BFOX_RCON_PASSWORD")
    if not args.password.isascii():
        parser.error("could not parse password: it is not an ASCII string")
    if not 0 < args.port < 65536:
        parser.error(f"invalid port number: {args.port}")
    
    configure_structlog(log_level=args.log_level, log_format=config.log_format, force=True)
    return run_until_interrupted(run_command(args))


def run_until_interrupted(coro) -> int:
    """Run the top-level coroutine; Ctrl-C exits quietly with 130."""
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        return 130


def run():
    """Entry point for the rcon-console command."""
    sys.exit(main())


if __name__ == "__main__":
    run()
