"""CLI for querying sked timetables through the SplusEins backend."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import aiohttp
from pydantic import TypeAdapter, ValidationError

from spluseins.adapters.config import AppConfig
from spluseins.domain.models import Event, FetchError, SkedParseError, TimetableRequest
from spluseins.wiring import build_timetable_service

logger = logging.getLogger(__name__)

_REQUESTS_ADAPTER = TypeAdapter(list[TimetableRequest])


def load_requests(path: str | Path) -> list[TimetableRequest]:
    """Load timetable requests from a JSON file holding a list of request objects."""
    with open(path, "rb") as f:
        return _REQUESTS_ADAPTER.validate_json(f.read())


def events_to_json(events: list[Event]) -> list[dict[str, Any]]:
    """Serialize events the way the front-end expects them."""
    return [event.model_dump(mode="json", by_alias=True) for event in events]


def format_event(event: Event) -> str:
    """Format an event as a single human-readable line."""
    if event.start and event.end:
        when = f"{event.start:%a %d.%m.%Y %H:%M}-{event.end:%H:%M}"
    else:
        when = "(any time)"
    parts = [when, event.title]
    if event.location:
        parts.append(f"@ {event.location}")
    if event.lecturer:
        parts.append(f"({event.lecturer})")
    return "  ".join(parts)


def print_events(events: list[Event], format_json: bool = False) -> None:
    """Print events as JSON or as one line per event."""
    if format_json:
        print(json.dumps(events_to_json(events), indent=2, ensure_ascii=False))
        return

    print(f"\n{len(events)} event(s):\n")
    for event in events:
        print(f"  {format_event(event)}")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="spluseins",
        description="SplusEins sked timetable helper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Merged events of several timetables for their requested weeks
  spluseins events requests.json

  # One event per lecture of a timetable
  spluseins unique --id I-B.Sc.-1 --path i/Semester/Semester-Liste/I-B.Sc.-1.html
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Events command
    events_parser = subparsers.add_parser("events", help="Show merged events of timetables")
    events_parser.add_argument("requests_file", help="JSON file with a list of timetable requests")
    events_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # Unique command
    unique_parser = subparsers.add_parser("unique", help="Show one event per lecture")
    unique_parser.add_argument("--id", required=True, help="Timetable ID")
    unique_parser.add_argument("--path", required=True, help="Sked path of the timetable")
    unique_parser.add_argument(
        "--graphical", action="store_true", help="Timetable uses the graphical view"
    )
    unique_parser.add_argument("--faculty", default=None, help="Faculty of the timetable")
    unique_parser.add_argument("--json", action="store_true", help="Output as JSON")

    return parser


def _requests_from_args(args: argparse.Namespace) -> list[TimetableRequest]:
    if args.command == "events":
        return load_requests(args.requests_file)
    return [
        TimetableRequest(
            id=args.id,
            sked_path=args.path,
            graphical=args.graphical,
            faculty=args.faculty,
        )
    ]


async def run(command: str, timetables: list[TimetableRequest], config: AppConfig) -> list[Event]:
    """Run a command against sked and return its events."""
    async with aiohttp.ClientSession() as session:
        service = build_timetable_service(config, session)
        try:
            if command == "events":
                return await service.get_events(timetables)
            return await service.get_unique_events(timetables[0])
        finally:
            service.cache.close()


async def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        timetables = _requests_from_args(args)
    except (OSError, ValidationError) as e:
        logger.error(f"Invalid timetable requests: {e}")
        sys.exit(1)

    try:
        events = await run(args.command, timetables, AppConfig())
    except (FetchError, SkedParseError) as e:
        logger.error(str(e))
        sys.exit(1)

    print_events(events, format_json=args.json)


def cli_main() -> None:
    """Synchronous entry point for the CLI command."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    cli_main()
