"""
Explore/dashboard filtering.

The explore views combine three optional filters over an event list:
- free text, matched case-insensitively against title, location and description
- category, using the same case-insensitive policy as `EventStore.get_events_by_category`
  (`"all"` disables the filter)
- upcoming only, keeping events dated after `now`
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from partyconnect.domain.models import Event
from partyconnect.stores.events import normalize_category

ALL_CATEGORIES = "all"


def matches_query(event: Event, query: str) -> bool:
    term = query.strip().lower()
    if not term:
        return True
    return any(term in field.lower() for field in (event.title, event.location, event.description))


def search_events(
    events: Iterable[Event],
    *,
    query: str | None = None,
    category: str | None = None,
    upcoming_only: bool = False,
    now: datetime | None = None,
) -> list[Event]:
    wanted = normalize_category(category)
    if wanted == ALL_CATEGORIES:
        wanted = ""
    cutoff = (now or datetime.now(tz=timezone.utc)).timestamp()

    out: list[Event] = []
    for event in events:
        if query and not matches_query(event, query):
            continue
        if wanted and normalize_category(event.category) != wanted:
            continue
        if upcoming_only and event.date.timestamp() <= cutoff:
            continue
        out.append(event)
    return out
