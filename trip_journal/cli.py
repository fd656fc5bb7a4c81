#!/usr/bin/env python3
"""
Command line front-end for the trip journal API.

The token is kept in the file named by ``TRIP_JOURNAL_TOKEN_FILE`` so a
``login`` in one invocation authorises the next ones.

Usage:
    python -m trip_journal login --username alice
    python -m trip_journal create-trip --name Lisbon \
        --start 2025-05-01T00:00:00Z --end 2025-05-07T00:00:00Z
    python -m trip_journal trips
    python -m trip_journal upload-media --event-id 3 --file photo.jpg --caption "Tram 28"
    python -m trip_journal logout

If --password is omitted, you will be prompted to enter it securely.
Results are printed as JSON on stdout; failures go to stderr.
"""

import argparse
import getpass
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel

from .client import JournalAPI
from .core.config import Settings
from .core.logging_config import setup_logging
from .errors import JournalError
from .schemas.media import MediaCreate
from .schemas.trip import TripCreate
from .schemas.wire import parse_timestamp, to_wire


logger = logging.getLogger(__name__)


def _timestamp(value: str) -> Any:
    try:
        return parse_timestamp(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="trip_journal", description="Trip journal API client.")
    ap.add_argument(
        "--base-url",
        help="API base URL (default: TRIP_JOURNAL_BASE_URL or http://localhost:8000)",
    )
    ap.add_argument("--log-level", help="Logging level (default: LOG_LEVEL or INFO)")
    sub = ap.add_subparsers(dest="command", required=True)

    for name in ("register", "login"):
        p = sub.add_parser(name, help=f"{name} and store the session token")
        p.add_argument("--username", required=True)
        p.add_argument("--password", help="If omitted, you'll be prompted securely.")

    sub.add_parser("logout", help="forget the stored session token")
    sub.add_parser("status", help="report whether a session token is stored")
    sub.add_parser("trips", help="list trips")

    p = sub.add_parser("trip", help="show one trip")
    p.add_argument("trip_id", type=int)

    p = sub.add_parser("create-trip", help="create a trip")
    p.add_argument("--name", required=True)
    p.add_argument("--start", required=True, type=_timestamp, help="e.g. 2025-05-01T00:00:00Z")
    p.add_argument("--end", required=True, type=_timestamp)

    for name, arg in (
        ("delete-trip", "trip_id"),
        ("delete-event", "event_id"),
        ("delete-media", "media_id"),
    ):
        p = sub.add_parser(name, help=f"delete by {arg.replace('_', ' ')}")
        p.add_argument(arg, type=int)

    p = sub.add_parser("upload-media", help="attach a file to an event")
    p.add_argument("--event-id", required=True, type=int)
    p.add_argument("--file", required=True, type=Path)
    p.add_argument("--caption")
    return ap


def _emit(result: Any) -> None:
    if isinstance(result, BaseModel):
        result = to_wire(result)
    elif isinstance(result, list):
        result = [to_wire(item) for item in result]
    print(json.dumps(result, indent=2, ensure_ascii=False))


def run(args: argparse.Namespace, api: JournalAPI) -> Any:
    """Execute the parsed command against ``api`` and return its result."""
    command = args.command
    if command in ("register", "login"):
        password = args.password or getpass.getpass("Password: ")
        if not password:
            raise ValueError("Empty password is not allowed.")
        if command == "register":
            api.register(args.username, password)
        else:
            api.log_in(args.username, password)
        return {"authenticated": api.is_authenticated}
    if command == "logout":
        api.log_out()
        return {"authenticated": api.is_authenticated}
    if command == "status":
        return {"authenticated": api.is_authenticated}
    if command == "trips":
        return api.get_trips()
    if command == "trip":
        return api.get_trip(args.trip_id)
    if command == "create-trip":
        return api.create_trip(TripCreate(name=args.name, start_date=args.start, end_date=args.end))
    if command == "delete-trip":
        api.delete_trip(args.trip_id)
        return {"deleted": args.trip_id}
    if command == "delete-event":
        api.delete_event(args.event_id)
        return {"deleted": args.event_id}
    if command == "delete-media":
        api.delete_media(args.media_id)
        return {"deleted": args.media_id}
    if command == "upload-media":
        data = args.file.read_bytes()
        media = MediaCreate(event_id=args.event_id, data=data, caption=args.caption)
        return api.create_media(media)
    raise ValueError(f"Unknown command: {command}")


def main(argv: Optional[List[str]] = None, api: Optional[JournalAPI] = None) -> int:
    args = build_parser().parse_args(argv)
    config = Settings()
    if args.base_url:
        config.base_url = args.base_url
    setup_logging(args.log_level or config.log_level, config.log_file)

    if api is None:
        api = JournalAPI.from_settings(config)
    logger.debug("Running %s against %s", args.command, api.base_url)
    try:
        result = run(args, api)
    except JournalError as exc:
        print(f"[!] {exc.detail}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        print(f"[!] {exc}", file=sys.stderr)
        return 2
    _emit(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
