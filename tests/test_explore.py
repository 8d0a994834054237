from datetime import datetime, timezone

from partyconnect.domain.models import Creator, Event
from partyconnect.features.explore import matches_query, search_events

NOW = datetime(2026, 7, 1, tzinfo=timezone.utc)


def _event(event_id: str, *, title: str = "Party", category: str | None = "party", day: int = 10, **kw) -> Event:
    return Event(
        id=event_id,
        title=title,
        date=datetime(2026, 7, day, 18, 0, tzinfo=timezone.utc),
        category=category,
        creator=Creator(id="c"),
        **kw,
    )


EVENTS = [
    _event("beach", title="Beach Party", location="Malibu Beach, California"),
    _event("disco", title="Disco Night", category="Music", description="Seventies classics", day=20),
    _event("past", title="Past Picnic", category="family", day=1, location="Austin"),
    _event("plain", title="Mystery", category=None),
]


def test_query_matches_title_location_and_description():
    assert matches_query(EVENTS[0], "beach")
    assert matches_query(EVENTS[0], "MALIBU")
    assert matches_query(EVENTS[1], "seventies")
    assert not matches_query(EVENTS[1], "beach")
    assert matches_query(EVENTS[1], "   ")


def test_category_filter_is_case_insensitive_and_all_disables_it():
    assert [e.id for e in search_events(EVENTS, category="music")] == ["disco"]
    assert [e.id for e in search_events(EVENTS, category="All")] == [e.id for e in EVENTS]
    assert [e.id for e in search_events(EVENTS, category=None)] == [e.id for e in EVENTS]


def test_upcoming_only_keeps_events_after_now():
    early = search_events(EVENTS, upcoming_only=True, now=datetime(2026, 7, 5, tzinfo=timezone.utc))
    assert [e.id for e in early] == ["beach", "disco", "plain"]

    late = search_events(EVENTS, upcoming_only=True, now=datetime(2026, 7, 15, tzinfo=timezone.utc))
    assert [e.id for e in late] == ["disco"]


def test_filters_combine():
    found = search_events(EVENTS, query="night", category="music", upcoming_only=True, now=NOW)
    assert [e.id for e in found] == ["disco"]
    assert search_events(EVENTS, query="night", category="party") == []
