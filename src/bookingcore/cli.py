"""CLI entry point for bookingcore."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timedelta

from . import __version__


def _setup_logging(args: argparse.Namespace) -> None:
    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )


def _parse_datetime(value: str) -> datetime:
    """ISO 8601 with an offset, e.g. 2024-03-10T09:00:00-04:00."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        raise argparse.ArgumentTypeError(f"{value!r} has no UTC offset")
    return parsed


def _open_database(config):
    from .database import Database

    db = Database(config.database.path)
    db.connect()
    return db


def _build_engine(config, db):
    """Wire providers, detector, query service and orchestrator from config."""
    from .calendar.factory import build_calendar_locator
    from .conference.factory import build_conference_services
    from .core.conflicts import ConflictDetector
    from .core.query import ScheduledEventsQueryService
    from .core.scheduled_events import GlobalScheduledEventsService
    from .notifications import BookingNotifier, LogNotificationSender

    calendar_locator = build_calendar_locator(config, db)
    detector = ConflictDetector(
        db, calendar_locator, timedelta(seconds=config.conflicts.exclusive_margin_seconds)
    )
    query = ScheduledEventsQueryService(db, calendar_locator, config.search)
    return GlobalScheduledEventsService(
        db,
        calendar_locator,
        conference_services=build_conference_services(config, db),
        notifier=BookingNotifier(LogNotificationSender()),
        detector=detector,
        query=query,
    )


def cmd_init_db(args: argparse.Namespace) -> None:
    """Create the SQLite schema."""
    from .config import load_config

    config = load_config(args.config)
    db = _open_database(config)
    db.close()
    print(f"Database ready at {config.database.path}")


def cmd_check(args: argparse.Namespace) -> None:
    """Check config, database and provider registration."""
    from .config import load_config

    print(f"bookingcore v{__version__} - configuration check\n")

    try:
        config = load_config(args.config)
        print(f"[OK] Config loaded from {args.config}")
    except Exception as e:
        print(f"[FAIL] Config: {e}")
        sys.exit(1)

    try:
        db = _open_database(config)
        print(f"[OK] Database: {config.database.path}")
    except Exception as e:
        print(f"[FAIL] Database: {e}")
        sys.exit(1)

    try:
        engine = _build_engine(config, db)
        vendors = [s.vendor.value for s in engine.calendar_locator.ordered()]
        print(f"[OK] Calendar providers: {', '.join(vendors) or 'none'}")
        conference = [s.vendor.value for s in engine.conference_services]
        print(f"[OK] Conference providers: {', '.join(conference) or 'none'}")
    except Exception as e:
        print(f"[FAIL] Providers: {e}")
        sys.exit(1)

    if "google" in config.calendar.outbound_priority and not config.calendar.google.client_id:
        print("[WARN] Google client_id not set; expired tokens cannot be refreshed")
    if "zoom" in config.conference.providers and not config.zoom.client_id:
        print("[WARN] Zoom client_id not set")
    asyncio.run(engine.aclose())
    db.close()


def cmd_validate(args: argparse.Namespace) -> None:
    """Pre-flight check of a time range against availability and existing bookings."""
    from .config import load_availability, load_config
    from .core.scheduled_events import get_patched_scheduled_event
    from .errors import CannotCreateByInvalidTimeRange
    from .models import HostProfile, ScheduledEvent, ScheduledTimeset, Team

    _setup_logging(args)
    config = load_config(args.config)
    availability = load_availability(args.availability)
    db = _open_database(config)
    engine = _build_engine(config, db)

    workspace, _, event_uuid = args.event.partition("/")
    event = db.get_event_by_workspace_and_uuid(workspace, event_uuid)
    if event is None:
        print(f"Event {args.event} not found")
        asyncio.run(engine.aclose())
        db.close()
        sys.exit(1)

    scheduled_event = get_patched_scheduled_event(
        event,
        ScheduledEvent(scheduled_time=ScheduledTimeset(args.start, args.end)),
        Team(id=args.team_id, workspace=workspace),
        [HostProfile(profile_id=args.profile_id)] if args.profile_id is not None else [],
        workspace,
        availability.timezone,
    )

    async def run():
        try:
            calendar_integration = None
            if args.profile_id is not None:
                calendar_integration = await engine.calendar_locator.find_outbound_calendar_integration(
                    args.profile_id
                )
            await engine.validate(scheduled_event, availability.timezone, availability.body, calendar_integration)
        finally:
            await engine.aclose()

    try:
        asyncio.run(run())
    except CannotCreateByInvalidTimeRange as e:
        print(f"[REJECTED] {e}")
        sys.exit(2)
    finally:
        db.close()
    print(f"[OK] {args.start.isoformat()} - {args.end.isoformat()} is bookable")


def cmd_search(args: argparse.Namespace) -> None:
    """List bookings for a team or host within a window."""
    from .config import load_config
    from .models import ScheduledEventSearchOption

    _setup_logging(args)
    config = load_config(args.config)
    db = _open_database(config)
    engine = _build_engine(config, db)

    option = ScheduledEventSearchOption(
        team_id=args.team_id,
        host_profile_id=args.profile_id,
        since=args.since,
        until=args.until,
        status_group=args.status_group,
        take=args.take,
        order_by_start="ASC",
    )

    async def run():
        try:
            return await engine.search(option)
        finally:
            await engine.aclose()

    results = asyncio.run(run())
    db.close()

    if not results:
        print("No scheduled events found.")
        return
    for se in results:
        source = getattr(se, "vendor", None)
        print(
            f"  {se.scheduled_time.start_timestamp.isoformat()} - "
            f"{se.scheduled_time.end_timestamp.isoformat()}  "
            f"[{se.status.value}] {se.name or '(no title)'}  "
            f"({source.value if source else 'native'}, {se.uuid})"
        )
    print(f"\nTotal: {len(results)}")


def main():
    parser = argparse.ArgumentParser(
        prog="bookingcore",
        description="Booking validation and creation engine",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    # init-db
    init_parser = subparsers.add_parser("init-db", help="Create the database schema")
    init_parser.add_argument("-c", "--config", default="config.yaml", help="Config file path")

    # check
    check_parser = subparsers.add_parser("check", help="Check config, database and providers")
    check_parser.add_argument("-c", "--config", default="config.yaml", help="Config file path")

    # validate
    validate_parser = subparsers.add_parser("validate", help="Check whether a time range is bookable")
    validate_parser.add_argument("-c", "--config", default="config.yaml", help="Config file path")
    validate_parser.add_argument("-a", "--availability", required=True, help="Host availability YAML")
    validate_parser.add_argument("--event", required=True, help="Event as <workspace>/<uuid>")
    validate_parser.add_argument("--start", required=True, type=_parse_datetime, help="ISO start with offset")
    validate_parser.add_argument("--end", required=True, type=_parse_datetime, help="ISO end with offset")
    validate_parser.add_argument("--team-id", type=int, default=0, help="Team id")
    validate_parser.add_argument("--profile-id", type=int, default=None, help="Main host profile id")
    validate_parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    # search
    search_parser = subparsers.add_parser("search", help="List scheduled events")
    search_parser.add_argument("-c", "--config", default="config.yaml", help="Config file path")
    search_parser.add_argument("--team-id", type=int, default=None, help="Team id")
    search_parser.add_argument("--profile-id", type=int, default=None, help="Host profile id")
    search_parser.add_argument("--since", type=_parse_datetime, default=None, help="Window start (default: now)")
    search_parser.add_argument("--until", type=_parse_datetime, default=None, help="Window end (default: now + 90 days)")
    search_parser.add_argument("--status-group", choices=["upcoming", "past"], default="upcoming")
    search_parser.add_argument("--take", type=int, default=None, help="Max results per source")
    search_parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(0)

    commands = {
        "init-db": cmd_init_db,
        "check": cmd_check,
        "validate": cmd_validate,
        "search": cmd_search,
    }
    commands[args.command](args)
