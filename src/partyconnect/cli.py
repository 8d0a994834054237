"""
Party Connect CLI entrypoint.

Intended for local demos and debugging against the same storage the API uses.
Cross-store actions go through `partyconnect.workflows.actions`.
"""

from __future__ import annotations

import argparse
import json
from typing import Any

from partyconnect.config.settings import get_settings
from partyconnect.core.logging import configure_logging
from partyconnect.core.time import parse_datetime
from partyconnect.domain.models import Event
from partyconnect.features.achievements import achievement_badges
from partyconnect.features.explore import search_events
from partyconnect.workflows import actions
from partyconnect.workflows.actions import Stores, build_stores


def _dump(model: Any) -> Any:
    if isinstance(model, list):
        return [_dump(m) for m in model]
    return model.model_dump(mode="json", by_alias=True)


def _print_json(payload: Any) -> None:
    print(json.dumps(_dump(payload), ensure_ascii=False, indent=2))


def _print_events(events: list[Event], *, as_json: bool) -> None:
    if as_json:
        _print_json(events)
        return
    if not events:
        print("No events found.")
        return
    for e in events:
        where = e.location or "(no location)"
        cat = f" [{e.category}]" if e.category else ""
        print(f"{e.id}  {e.date.isoformat()}  {e.title}{cat}  @ {where}  ({len(e.participants or [])} going)")


def _parse_requirement(value: str) -> dict[str, str]:
    """Parse `TYPE=DESCRIPTION` into a requirement mapping."""
    if "=" not in value:
        raise ValueError(f"Invalid --requirement '{value}', expected TYPE=DESCRIPTION")
    kind, description = value.split("=", 1)
    return {"type": kind.strip(), "description": description.strip()}


def _cmd_events(stores: Stores, args: argparse.Namespace) -> int:
    if args.near_lat is not None or args.near_lon is not None:
        if args.near_lat is None or args.near_lon is None:
            raise SystemExit("--near-lat and --near-lon must be given together")
        radius = args.radius_km if args.radius_km is not None else stores.settings.geo.default_radius_km
        events = stores.events.get_events_by_distance((args.near_lat, args.near_lon), radius)
    elif args.location:
        events = stores.events.get_events_by_location(args.location)
    else:
        events = stores.events.events
    events = search_events(events, query=args.query, category=args.category, upcoming_only=args.upcoming)
    _print_events(events, as_json=args.json)
    return 0


def _cmd_event(stores: Stores, args: argparse.Namespace) -> int:
    event = stores.events.get_event(args.event_id)
    if event is None:
        print(f"Unknown event: {args.event_id}")
        return 1
    _print_json(event)
    return 0


def _cmd_create_event(stores: Stores, args: argparse.Namespace) -> int:
    settings = stores.settings
    coordinates = [args.lat, args.lon] if args.lat is not None and args.lon is not None else None
    event = actions.create_event(
        stores,
        title=args.title,
        date=parse_datetime(args.date, settings.app.timezone),
        location=args.location or "",
        description=args.description or "",
        category=args.category,
        coordinates=coordinates,
        requirements=[_parse_requirement(r) for r in args.requirement],
    )
    print(f"Created {event.id}")
    return 0


def _cmd_join(stores: Stores, args: argparse.Namespace) -> int:
    if actions.join_event(stores, args.event_id) is None:
        print(f"Unknown event: {args.event_id}")
        return 1
    print(f"Joined {args.event_id}")
    return 0


def _cmd_contribute(stores: Stores, args: argparse.Namespace) -> int:
    event = actions.contribute(
        stores, args.event_id, role=args.role, details=args.details or "", requirement_id=args.requirement_id
    )
    if event is None:
        print(f"Unknown event: {args.event_id}")
        return 1
    print(f"Contributed {args.role} to {args.event_id}")
    return 0


def _cmd_rate(stores: Stores, args: argparse.Namespace) -> int:
    event = stores.events.rate_participant(args.event_id, args.participant_id, args.rating)
    if event is None:
        print(f"Unknown event: {args.event_id}")
        return 1
    return 0


def _cmd_profile(stores: Stores, _: argparse.Namespace) -> int:
    _print_json(stores.users.current_user)
    return 0


def _cmd_update_profile(stores: Stores, args: argparse.Namespace) -> int:
    updates = {k: getattr(args, k) for k in ("name", "avatar", "email", "bio", "preferences") if getattr(args, k)}
    if not updates:
        print("Nothing to update.")
        return 1
    _print_json(stores.users.update_profile(updates))
    return 0


def _cmd_set_location(stores: Stores, args: argparse.Namespace) -> int:
    coordinates = (args.lat, args.lon) if args.lat is not None and args.lon is not None else None
    profile = actions.set_location(stores, name=args.name, coordinates=coordinates)
    if profile is None:
        print("Location could not be resolved.")
        return 1
    print(f"Location set to {profile.location} {list(profile.coordinates or [])}")
    return 0


def _cmd_achievements(stores: Stores, args: argparse.Namespace) -> int:
    badges = achievement_badges(stores.users.current_user)
    if args.json:
        _print_json(badges)
        return 0
    if not badges:
        print("No achievements yet.")
    for b in badges:
        print(f"{b.icon} {b.name}: {b.description}")
    return 0


def _cmd_serve(_: Stores | None, args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "partyconnect.api.app:app",
        host=args.host or settings.api.host,
        port=args.port or settings.api.port,
        reload=bool(args.reload),
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the Party Connect CLI."""
    parser = argparse.ArgumentParser(prog="partyconnect")
    sub = parser.add_subparsers(dest="command", required=True)

    ev = sub.add_parser("events", help="List events (optionally near a point, by location, text or category).")
    ev.add_argument("--query", "-q", default=None)
    ev.add_argument("--category", default=None)
    ev.add_argument("--location", default=None, help="Substring of the event location.")
    ev.add_argument("--near-lat", type=float, default=None)
    ev.add_argument("--near-lon", type=float, default=None)
    ev.add_argument("--radius-km", type=float, default=None)
    ev.add_argument("--upcoming", action="store_true")
    ev.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    ev.set_defaults(func=_cmd_events)

    show = sub.add_parser("event", help="Show one event as JSON.")
    show.add_argument("event_id")
    show.set_defaults(func=_cmd_event)

    create = sub.add_parser("create-event", help="Create an event owned by the current user.")
    create.add_argument("--title", required=True)
    create.add_argument("--date", required=True, help="ISO datetime (e.g. 2026-07-15T18:00-07:00)")
    create.add_argument("--location", default=None)
    create.add_argument("--description", default=None)
    create.add_argument("--category", default=None)
    create.add_argument("--lat", type=float, default=None)
    create.add_argument("--lon", type=float, default=None)
    create.add_argument("--requirement", action="append", default=[], help="Repeatable: TYPE=DESCRIPTION")
    create.set_defaults(func=_cmd_create_event)

    join = sub.add_parser("join", help="Join an event as the current user.")
    join.add_argument("event_id")
    join.set_defaults(func=_cmd_join)

    contrib = sub.add_parser("contribute", help="Contribute to an event as the current user.")
    contrib.add_argument("event_id")
    contrib.add_argument("--role", required=True)
    contrib.add_argument("--details", default=None)
    contrib.add_argument("--requirement-id", default=None)
    contrib.set_defaults(func=_cmd_contribute)

    rate = sub.add_parser("rate", help="Rate a contributor of an event (0..5).")
    rate.add_argument("event_id")
    rate.add_argument("participant_id")
    rate.add_argument("rating", type=float)
    rate.set_defaults(func=_cmd_rate)

    prof = sub.add_parser("profile", help="Show the current profile.")
    prof.set_defaults(func=_cmd_profile)

    upd = sub.add_parser("update-profile", help="Update profile fields.")
    for name in ("name", "avatar", "email", "bio", "preferences"):
        upd.add_argument(f"--{name}", default=None)
    upd.set_defaults(func=_cmd_update_profile)

    loc = sub.add_parser("set-location", help="Set the profile location from a place name or coordinates.")
    loc.add_argument("--name", default=None)
    loc.add_argument("--lat", type=float, default=None)
    loc.add_argument("--lon", type=float, default=None)
    loc.set_defaults(func=_cmd_set_location)

    ach = sub.add_parser("achievements", help="List achievements earned by the current profile.")
    ach.add_argument("--json", action="store_true")
    ach.set_defaults(func=_cmd_achievements)

    srv = sub.add_parser("serve", help="Run the HTTP API.")
    srv.add_argument("--host", default=None)
    srv.add_argument("--port", type=int, default=None)
    srv.add_argument("--reload", action="store_true")
    srv.set_defaults(func=_cmd_serve, needs_stores=False)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m partyconnect.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    stores = build_stores(get_settings()) if getattr(args, "needs_stores", True) else None
    return int(func(stores, args))


if __name__ == "__main__":
    raise SystemExit(main())
