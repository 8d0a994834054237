from __future__ import annotations

# This module is the "orchestrator" for user actions that touch more than one store.
# The stores are independent and only cross-reference each other by id, so keeping
# them consistent is the caller's job: e.g. creating an event means `add_event` on
# the event store AND `add_created_event` on the user store.
#
# There is no transaction spanning both writes; if the process dies in between, the
# two stores can disagree (accepted for a single-user local client).

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import partial
from typing import Any, Iterable, Mapping

from partyconnect.catalog.loader import load_event_payloads
from partyconnect.config.settings import Settings
from partyconnect.core.env import resolve_project_path
from partyconnect.core.geo import coerce_coordinates
from partyconnect.core.geocoding import location_name, search_location
from partyconnect.core.storage import FileKeyValueStorage, JsonSlot, KeyValueStorage, MemoryKeyValueStorage
from partyconnect.core.time import millis_id, now_in
from partyconnect.domain.models import Contribution, Creator, Event, Profile, Requirement
from partyconnect.stores.events import EventStore
from partyconnect.stores.messages import MessageStore
from partyconnect.stores.users import UserStore

logger = logging.getLogger(__name__)


@dataclass
class Stores:
    settings: Settings
    events: EventStore
    users: UserStore
    messages: MessageStore


def build_storage(settings: Settings) -> KeyValueStorage:
    if settings.storage.backend == "memory":
        return MemoryKeyValueStorage()
    return FileKeyValueStorage(resolve_project_path(settings.storage.dir))


def build_stores(settings: Settings, storage: KeyValueStorage | None = None) -> Stores:
    """Wire the stores onto one key/value storage (built from settings if not given)."""
    storage = storage if storage is not None else build_storage(settings)

    seed = partial(load_event_payloads, settings.catalog.seed_path) if settings.catalog.seed_sample_events else None
    default_profile = Profile.model_validate(settings.profile.default.model_dump())
    return Stores(
        settings=settings,
        events=EventStore(
            JsonSlot(storage, settings.storage.event_key),
            timezone=settings.app.timezone,
            seed=seed,
            rating_range=(settings.ratings.min, settings.ratings.max),
        ),
        users=UserStore(JsonSlot(storage, settings.storage.user_key), default_profile=default_profile),
        messages=MessageStore(storage),
    )


def _creator_snapshot(profile: Profile) -> Creator:
    return Creator(
        id=profile.id,
        name=profile.name,
        avatar=profile.avatar,
        created_events=list(profile.created_events),
        sponsored_events=list(profile.sponsored_events),
    )


def _fresh_event_id(stores: Stores, now: datetime | None) -> str:
    ts = now or datetime.now().astimezone()
    event_id = millis_id("event", ts)
    # Two creations within the same millisecond must not overwrite each other.
    while stores.events.get_event(event_id) is not None:
        ts += timedelta(milliseconds=1)
        event_id = millis_id("event", ts)
    return event_id


def create_event(
    stores: Stores,
    *,
    title: str,
    date: datetime,
    location: str = "",
    description: str = "",
    category: str | None = None,
    coordinates: Any = None,
    image: str | None = None,
    requirements: Iterable[Mapping[str, Any]] = (),
    now: datetime | None = None,
) -> Event:
    """Create an event owned by the current user and record it on the profile."""
    user = stores.users.current_user
    reqs = [
        Requirement(id=str(r.get("id") or i), type=r.get("type", ""), description=r.get("description", ""))
        for i, r in enumerate(requirements, start=1)
        if r.get("type") and r.get("description")
    ]
    payload: dict[str, Any] = {
        "id": _fresh_event_id(stores, now),
        "title": title,
        "date": date,
        "location": location,
        "description": description,
        "category": category,
        "coordinates": coordinates,
        "creator": _creator_snapshot(user),
        "requirements": reqs,
    }
    if image:
        payload["image"] = image

    event = stores.events.add_event(payload)
    stores.users.add_created_event(event.id)
    logger.info("User %s created event %s", user.id, event.id)
    return event


def join_event(stores: Stores, event_id: str) -> Event | None:
    user = stores.users.current_user
    event = stores.events.join_event(event_id, user.id)
    if event is None:
        return None
    stores.users.add_joined_event(event_id)
    return event


def contribute(
    stores: Stores,
    event_id: str,
    *,
    role: str,
    details: str = "",
    requirement_id: str | None = None,
    image: str | None = None,
    now: datetime | None = None,
) -> Event | None:
    """Record a contribution from the current user."""
    user = stores.users.current_user
    ts = now or now_in(stores.settings.app.timezone)
    contribution = Contribution(
        id=millis_id("contribution", ts),
        user_id=user.id,
        name=user.name,
        avatar=user.avatar,
        role=role,
        details=details,
        image=image,
        timestamp=ts,
        requirement_id=requirement_id,
    )
    return stores.events.contribute_to_event(event_id, contribution)


def sponsor_event(stores: Stores, event_id: str) -> Profile | None:
    if stores.events.get_event(event_id) is None:
        return None
    return stores.users.add_sponsored_event(event_id)


def set_location(stores: Stores, *, name: str | None = None, coordinates: Any = None) -> Profile | None:
    """Update the profile location from a place name or from coordinates.

    A name is geocoded through the mock tables; coordinates are labelled through the
    reverse table. Returns None when neither resolves.
    """
    radius = stores.settings.geo.reverse_geocode_radius_km
    if coordinates is not None:
        coords = coerce_coordinates(coordinates)
        if coords is None:
            logger.warning("Invalid coordinates for location update: %r", coordinates)
            return None
        return stores.users.update_location(coords, location_name(*coords, radius_km=radius))
    if name:
        coords = search_location(name)
        if coords is None:
            logger.info("No known location matches %r", name)
            return None
        return stores.users.update_location(coords, name.strip())
    return None


def logout(stores: Stores) -> Profile:
    return stores.users.reset()
