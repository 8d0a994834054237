"""
Event store.

Owns every `Event` known to this client, keyed by id in insertion order, and mirrors
the collection to local storage after each mutation (`{"events": [...]}` under the
`event-storage` key). Nothing else is persisted from here.

Policies (all lenient; the store never raises for business-rule cases):
- invalid coordinates on `add_event` are logged and dropped; the event is kept
- joining twice keeps a single participant entry
- ratings are clamped into the configured range (default 0..5)
- category matching is case-insensitive
- lookups that miss return None / do nothing
- failed writes are logged by the storage slot; in-memory state stays authoritative
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Iterable, Mapping

from pydantic import ValidationError

from partyconnect.core.geo import GeoPoint, coerce_coordinates, haversine_km
from partyconnect.core.storage import JsonSlot
from partyconnect.core.time import ensure_tz
from partyconnect.domain.models import Contribution, Event

logger = logging.getLogger(__name__)

EventInput = Event | Mapping[str, Any]
ContributionInput = Contribution | Mapping[str, Any]


def normalize_category(value: str | None) -> str:
    return (value or "").strip().casefold()


class EventStore:
    def __init__(
        self,
        slot: JsonSlot,
        *,
        timezone: str = "UTC",
        seed: Callable[[], Iterable[Mapping[str, Any]]] | None = None,
        rating_range: tuple[float, float] = (0.0, 5.0),
    ):
        self._slot = slot
        self._timezone = timezone
        self._rating_min, self._rating_max = rating_range
        self._events: dict[str, Event] = {}
        self._load(seed)

    # ------------------------------------------------------------------
    # Persistence
    def _load(self, seed: Callable[[], Iterable[Mapping[str, Any]]] | None) -> None:
        data = self._slot.load()
        if isinstance(data, dict) and isinstance(data.get("state"), dict):
            # Browser exports wrap the persisted fields in a "state" envelope.
            data = data["state"]

        if isinstance(data, dict) and isinstance(data.get("events"), list):
            raw_events: Iterable[Any] = data["events"]
            source = "storage"
        elif seed is not None:
            raw_events = seed()
            source = "seed catalog"
        else:
            raw_events = []
            source = "empty"

        for raw in raw_events:
            if not isinstance(raw, Mapping):
                continue
            try:
                event = self._prepare(raw)
            except ValidationError as e:
                logger.warning("Skipping unreadable event %r: %s", raw.get("id"), e)
                continue
            self._events[event.id] = event

        logger.info("Event store loaded %d events from %s", len(self._events), source)
        if source == "seed catalog":
            self._save()

    def _save(self) -> bool:
        payload = {"events": [e.model_dump(mode="json", by_alias=True) for e in self._events.values()]}
        return self._slot.save(payload)

    def _prepare(self, event: EventInput) -> Event:
        """Normalize an incoming event (coordinates, participants, timezone)."""
        if isinstance(event, Event):
            prepared = event
        else:
            data = dict(event)
            raw_coords = data.get("coordinates")
            if raw_coords is not None:
                coords = coerce_coordinates(raw_coords)
                if coords is None:
                    logger.warning(
                        "Invalid coordinates for event %r: %r; storing it without coordinates",
                        data.get("id"),
                        raw_coords,
                    )
                data["coordinates"] = coords
            prepared = Event.model_validate(data)

        updates: dict[str, Any] = {"date": ensure_tz(prepared.date, self._timezone)}
        if prepared.participants is None:
            updates["participants"] = [prepared.creator.id]
        return prepared.model_copy(update=updates)

    # ------------------------------------------------------------------
    # Reads
    @property
    def events(self) -> list[Event]:
        return list(self._events.values())

    def get_event(self, event_id: str) -> Event | None:
        return self._events.get(event_id)

    # ------------------------------------------------------------------
    # Mutations
    def add_event(self, event: EventInput) -> Event:
        """Insert an event; a repeated id replaces the earlier entry in place."""
        prepared = self._prepare(event)
        if prepared.id in self._events:
            logger.warning("Event id %r already exists; replacing it", prepared.id)
        self._events[prepared.id] = prepared
        logger.debug("Added event %s (coordinates=%s)", prepared.id, prepared.coordinates)
        self._save()
        return prepared

    def join_event(self, event_id: str, user_id: str) -> Event | None:
        event = self._events.get(event_id)
        if event is None:
            return None
        participants = list(event.participants or [])
        if user_id in participants:
            return event
        participants.append(user_id)
        updated = event.model_copy(update={"participants": participants})
        self._events[event_id] = updated
        self._save()
        return updated

    def contribute_to_event(self, event_id: str, contribution: ContributionInput) -> Event | None:
        event = self._events.get(event_id)
        if event is None:
            return None
        if not isinstance(contribution, Contribution):
            contribution = Contribution.model_validate(contribution)

        requirements = event.requirements
        if contribution.requirement_id:
            requirements = [
                r.model_copy(update={"filled": True}) if r.id == contribution.requirement_id else r
                for r in event.requirements
            ]

        participants = list(event.participants or [])
        if contribution.user_id and contribution.user_id not in participants:
            participants.append(contribution.user_id)

        updated = event.model_copy(
            update={
                "contributors": [*event.contributors, contribution],
                "requirements": requirements,
                "participants": participants,
            }
        )
        self._events[event_id] = updated
        self._save()
        return updated

    def rate_participant(self, event_id: str, participant_id: str, rating: float) -> Event | None:
        """Set the rating of contributors matching `participant_id` (by id or userId)."""
        if not event_id or not participant_id:
            logger.error("rate_participant needs both an event id and a participant id")
            return None
        event = self._events.get(event_id)
        if event is None:
            return None
        if not math.isfinite(float(rating)):
            logger.warning("Ignoring non-finite rating for %s on %s", participant_id, event_id)
            return event

        clamped = min(self._rating_max, max(self._rating_min, float(rating)))
        matched = False
        contributors: list[Contribution] = []
        for c in event.contributors:
            if c.id == participant_id or c.user_id == participant_id:
                contributors.append(c.model_copy(update={"rating": clamped}))
                matched = True
            else:
                contributors.append(c)
        if not matched:
            return event

        updated = event.model_copy(update={"contributors": contributors})
        self._events[event_id] = updated
        self._save()
        return updated

    # ------------------------------------------------------------------
    # Derived queries
    def get_events_by_distance(self, user_location: Any, max_distance_km: float) -> list[Event]:
        origin = coerce_coordinates(user_location)
        if origin is None:
            logger.warning("Invalid origin for distance query: %r", user_location)
            return []
        here = GeoPoint(lat=origin[0], lon=origin[1])
        out: list[Event] = []
        for event in self._events.values():
            if event.coordinates is None:
                continue
            there = GeoPoint(lat=event.coordinates[0], lon=event.coordinates[1])
            if haversine_km(here, there) <= max_distance_km:
                out.append(event)
        return out

    def get_events_by_location(self, location: str) -> list[Event]:
        term = (location or "").lower()
        return [e for e in self._events.values() if term in e.location.lower()]

    def get_events_by_category(self, category: str) -> list[Event]:
        wanted = normalize_category(category)
        if not wanted:
            return []
        return [e for e in self._events.values() if normalize_category(e.category) == wanted]
