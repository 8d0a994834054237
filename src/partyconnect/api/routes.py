"""
API routes.

Endpoints (all JSON, camelCase payloads as persisted):
- events: list/search, nearby, by-location, get, create, join, contribute, rate, sponsor
- profile: read, patch, location, achievements, logout
- geocoding: forward and reverse lookups against the mock tables
- messages: conversation list, unread count, read, send, mark read
"""

from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from typing import Any

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from partyconnect.config.settings import get_settings
from partyconnect.core.geocoding import location_name, search_location
from partyconnect.domain.models import (
    AchievementBadge,
    ConversationSummary,
    Event,
    Message,
    Profile,
    ProfilePatch,
)
from partyconnect.features.achievements import achievement_badges
from partyconnect.features.explore import search_events
from partyconnect.workflows import actions
from partyconnect.workflows.actions import Stores, build_stores

router = APIRouter()


@lru_cache
def _stores() -> Stores:
    return build_stores(get_settings())


def _not_found(event_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail={"code": "NOT_FOUND", "message": f"Unknown event {event_id!r}"})


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RequirementIn(_Request):
    id: str | None = None
    type: str = ""
    description: str = ""


class EventCreateRequest(_Request):
    title: str = Field(..., min_length=1)
    date: datetime
    location: str = ""
    description: str = ""
    category: str | None = None
    # Invalid pairs are dropped by the store rather than rejected here.
    coordinates: list[Any] | None = None
    image: str | None = None
    requirements: list[RequirementIn] = Field(default_factory=list)


class ContributionRequest(_Request):
    role: str = Field(..., min_length=1)
    details: str = ""
    requirement_id: str | None = Field(default=None, alias="requirementId")
    image: str | None = None


class RatingRequest(_Request):
    participant_id: str = Field(..., alias="participantId", min_length=1)
    rating: float


class LocationRequest(_Request):
    name: str | None = None
    coordinates: tuple[float, float] | None = None


class MessageRequest(_Request):
    text: str = Field(..., min_length=1)
    event_id: str | None = Field(default=None, alias="eventId")


# ----------------------------------------------------------------------
# Events
@router.get("/api/events", response_model=list[Event])
def list_events(
    q: str | None = None,
    category: str | None = None,
    upcoming: bool = False,
) -> list[Event]:
    """List events, optionally filtered by text, category and date."""
    return search_events(_stores().events.events, query=q, category=category, upcoming_only=upcoming)


@router.get("/api/events/nearby", response_model=list[Event])
def nearby_events(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    radius_km: float | None = Query(default=None, gt=0),
) -> list[Event]:
    stores = _stores()
    radius = radius_km if radius_km is not None else stores.settings.geo.default_radius_km
    return stores.events.get_events_by_distance((lat, lon), radius)


@router.get("/api/events/by-location", response_model=list[Event])
def events_by_location(location: str) -> list[Event]:
    return _stores().events.get_events_by_location(location)


@router.get("/api/events/{event_id}", response_model=Event)
def get_event(event_id: str) -> Event:
    event = _stores().events.get_event(event_id)
    if event is None:
        raise _not_found(event_id)
    return event


@router.post("/api/events", response_model=Event, status_code=201)
def create_event(body: EventCreateRequest) -> Event:
    try:
        return actions.create_event(
            _stores(),
            title=body.title,
            date=body.date,
            location=body.location,
            description=body.description,
            category=body.category,
            coordinates=body.coordinates,
            image=body.image,
            requirements=[r.model_dump() for r in body.requirements],
        )
    except (ValidationError, ValueError) as e:
        raise HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": str(e)}) from e


@router.post("/api/events/{event_id}/join", response_model=Event)
def join_event(event_id: str) -> Event:
    event = actions.join_event(_stores(), event_id)
    if event is None:
        raise _not_found(event_id)
    return event


@router.post("/api/events/{event_id}/contributions", response_model=Event)
def contribute(event_id: str, body: ContributionRequest) -> Event:
    event = actions.contribute(
        _stores(),
        event_id,
        role=body.role,
        details=body.details,
        requirement_id=body.requirement_id,
        image=body.image,
    )
    if event is None:
        raise _not_found(event_id)
    return event


@router.post("/api/events/{event_id}/ratings", response_model=Event)
def rate_participant(event_id: str, body: RatingRequest) -> Event:
    event = _stores().events.rate_participant(event_id, body.participant_id, body.rating)
    if event is None:
        raise _not_found(event_id)
    return event


@router.post("/api/events/{event_id}/sponsor", response_model=Profile)
def sponsor_event(event_id: str) -> Profile:
    profile = actions.sponsor_event(_stores(), event_id)
    if profile is None:
        raise _not_found(event_id)
    return profile


# ----------------------------------------------------------------------
# Profile
@router.get("/api/profile", response_model=Profile)
def get_profile() -> Profile:
    return _stores().users.current_user


@router.patch("/api/profile", response_model=Profile)
def update_profile(patch: ProfilePatch) -> Profile:
    return _stores().users.update_profile(patch)


@router.put("/api/profile/location", response_model=Profile)
def update_location(body: LocationRequest) -> Profile:
    profile = actions.set_location(_stores(), name=body.name, coordinates=body.coordinates)
    if profile is None:
        raise HTTPException(
            status_code=400,
            detail={"code": "UNKNOWN_LOCATION", "message": "Location could not be resolved"},
        )
    return profile


@router.get("/api/profile/achievements", response_model=list[AchievementBadge])
def get_achievements() -> list[AchievementBadge]:
    return achievement_badges(_stores().users.current_user)


@router.post("/api/logout", response_model=Profile)
def logout() -> Profile:
    return actions.logout(_stores())


# ----------------------------------------------------------------------
# Geocoding
@router.get("/api/geocode")
def geocode(q: str) -> dict:
    coords = search_location(q)
    if coords is None:
        raise HTTPException(status_code=404, detail={"code": "NOT_FOUND", "message": f"Unknown place {q!r}"})
    return {"query": q, "coordinates": list(coords)}


@router.get("/api/reverse-geocode")
def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
) -> dict:
    radius = _stores().settings.geo.reverse_geocode_radius_km
    return {"coordinates": [lat, lon], "name": location_name(lat, lon, radius_km=radius)}


# ----------------------------------------------------------------------
# Messages
@router.get("/api/messages", response_model=list[ConversationSummary])
def list_conversations() -> list[ConversationSummary]:
    stores = _stores()
    return stores.messages.list_conversations(events=stores.events, reader_id=stores.users.current_user.id)


@router.get("/api/messages/unread-count")
def unread_count() -> dict:
    stores = _stores()
    return {"count": stores.messages.unread_count(stores.users.current_user.id)}


@router.get("/api/messages/{user_id}", response_model=list[Message])
def get_messages(user_id: str, event_id: str | None = Query(default=None, alias="eventId")) -> list[Message]:
    return _stores().messages.get_messages(user_id, event_id)


@router.post("/api/messages/{user_id}", response_model=Message, status_code=201)
def send_message(user_id: str, body: MessageRequest) -> Message:
    stores = _stores()
    me = stores.users.current_user
    message = stores.messages.send_message(
        user_id, sender_id=me.id, sender_name=me.name, text=body.text, event_id=body.event_id
    )
    if message is None:
        raise HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": "Empty message"})
    return message


@router.post("/api/messages/{user_id}/read")
def mark_read(user_id: str, event_id: str | None = Query(default=None, alias="eventId")) -> dict:
    stores = _stores()
    return {"marked": stores.messages.mark_read(user_id, event_id, reader_id=stores.users.current_user.id)}
