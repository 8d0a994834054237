"""
Domain models (Pydantic).

These types are the contract between the stores, the workflows, the API and the CLI:
- events and their embedded records (`Event`, `Creator`, `Contribution`, `Requirement`)
- the single locally controlled user (`Profile`) and partial updates to it (`ProfilePatch`)
- conversation messages (`Message`, `ConversationSummary`)
- the achievement display view (`AchievementBadge`)

Attributes are snake_case; the persisted JSON keeps the camelCase keys the browser
app wrote (`userId`, `createdEvents`, ...). Dump with `by_alias=True` when persisting.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from partyconnect.core.geo import is_valid_coordinates

PLACEHOLDER_IMAGE = "/placeholder.svg?height=400&width=600"
PLACEHOLDER_AVATAR = "/placeholder.svg?height=40&width=40"


def _check_coordinates(value: tuple[float, float] | None) -> tuple[float, float] | None:
    if value is None:
        return None
    lat, lon = value
    if not is_valid_coordinates(lat, lon):
        raise ValueError("coordinates must be finite and within latitude/longitude ranges")
    return value


def _stringify_ids(value: Any) -> Any:
    # Browser exports carry numeric ids in some of these lists (`createdEvents: [1, 2, 3]`).
    if isinstance(value, list):
        return [str(v) if isinstance(v, int) and not isinstance(v, bool) else v for v in value]
    return value


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Creator(_Record):
    """Snapshot of the creating user, copied when the event is created."""

    id: str
    name: str = ""
    avatar: str = ""
    created_events: list[str] = Field(default_factory=list, alias="createdEvents")
    sponsored_events: list[str] = Field(default_factory=list, alias="sponsoredEvents")

    @field_validator("created_events", "sponsored_events", mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> Any:
        return _stringify_ids(value)

class Requirement(_Record):
    """Something the event still needs (food, music, ...)."""

    id: str
    type: str = ""
    description: str = ""
    filled: bool = False


class Contribution(_Record):
    """One user's contribution to an event, optionally filling a requirement."""

    id: str
    user_id: str | None = Field(default=None, alias="userId")
    name: str = ""
    avatar: str = ""
    role: str = ""
    details: str = ""
    image: str | None = None
    # Bounded by the event store (`ratings.min`..`ratings.max`), not here.
    rating: float | None = None
    timestamp: datetime | None = None
    requirement_id: str | None = Field(default=None, alias="requirementId")


class Event(_Record):
    id: str
    title: str
    description: str = ""
    location: str = ""
    date: datetime
    image: str = PLACEHOLDER_IMAGE
    category: str | None = None
    coordinates: tuple[float, float] | None = None
    creator: Creator
    contributors: list[Contribution] = Field(default_factory=list)
    requirements: list[Requirement] = Field(default_factory=list)
    participants: list[str] | None = None

    @field_validator("coordinates")
    @classmethod
    def _validate_coordinates(cls, value: tuple[float, float] | None) -> tuple[float, float] | None:
        return _check_coordinates(value)

    @field_validator("participants", mode="before")
    @classmethod
    def _coerce_participant_ids(cls, value: Any) -> Any:
        return _stringify_ids(value)

    @field_validator("participants")
    @classmethod
    def _dedupe_participants(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return list(dict.fromkeys(value))

    @model_validator(mode="after")
    def _unique_requirement_ids(self) -> "Event":
        ids = [r.id for r in self.requirements]
        if len(ids) != len(set(ids)):
            raise ValueError(f"event {self.id!r} has duplicate requirement ids")
        return self


class Profile(_Record):
    """The current (single, local) user."""

    id: str = ""
    name: str = ""
    avatar: str = ""
    email: str | None = None
    bio: str = ""
    location: str = ""
    coordinates: tuple[float, float] | None = None
    preferences: str = ""
    created_events: list[str] = Field(default_factory=list, alias="createdEvents")
    joined_events: list[str] = Field(default_factory=list, alias="joinedEvents")
    sponsored_events: list[str] = Field(default_factory=list, alias="sponsoredEvents")
    positive_ratings: int = Field(default=0, ge=0, alias="positiveRatings")
    successful_events: int = Field(default=0, ge=0, alias="successfulEvents")

    @field_validator("coordinates")
    @classmethod
    def _validate_coordinates(cls, value: tuple[float, float] | None) -> tuple[float, float] | None:
        return _check_coordinates(value)

    @field_validator("created_events", "joined_events", "sponsored_events", mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> Any:
        return _stringify_ids(value)


NULLABLE_PROFILE_FIELDS = frozenset({"email", "coordinates"})


class ProfilePatch(_Record):
    """Partial profile update.

    Only fields that were explicitly provided are applied; each one replaces the stored
    value wholesale (no nested merging, e.g. `coordinates` is swapped as a pair).
    Only `email` and `coordinates` may be cleared with an explicit null.
    """

    id: str | None = None
    name: str | None = None
    avatar: str | None = None
    email: str | None = None
    bio: str | None = None
    location: str | None = None
    coordinates: tuple[float, float] | None = None
    preferences: str | None = None
    created_events: list[str] | None = Field(default=None, alias="createdEvents")
    joined_events: list[str] | None = Field(default=None, alias="joinedEvents")
    sponsored_events: list[str] | None = Field(default=None, alias="sponsoredEvents")
    positive_ratings: int | None = Field(default=None, ge=0, alias="positiveRatings")
    successful_events: int | None = Field(default=None, ge=0, alias="successfulEvents")

    @field_validator("coordinates")
    @classmethod
    def _validate_coordinates(cls, value: tuple[float, float] | None) -> tuple[float, float] | None:
        return _check_coordinates(value)

    @field_validator("created_events", "joined_events", "sponsored_events", mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> Any:
        return _stringify_ids(value)

    @model_validator(mode="after")
    def _reject_null_for_required_fields(self) -> "ProfilePatch":
        cleared = sorted(
            name
            for name in self.model_fields_set
            if getattr(self, name) is None and name not in NULLABLE_PROFILE_FIELDS
        )
        if cleared:
            raise ValueError(f"profile fields cannot be null: {', '.join(cleared)}")
        return self

    def updates(self) -> dict:
        """Field-name -> value for the fields set on this patch."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class Message(_Record):
    id: str
    sender_id: str = Field(alias="senderId")
    sender_name: str = Field(default="", alias="senderName")
    text: str
    timestamp: datetime
    is_read: bool = Field(default=False, alias="isRead")


class ConversationSummary(_Record):
    key: str
    user_id: str = Field(alias="userId")
    event_id: str | None = Field(default=None, alias="eventId")
    message_count: int = Field(alias="messageCount")
    last_message: Message = Field(alias="lastMessage")
    partner_name: str = Field(default="Unknown User", alias="partnerName")
    partner_avatar: str = Field(default=PLACEHOLDER_AVATAR, alias="partnerAvatar")
    unread_count: int = Field(default=0, alias="unreadCount")


class AchievementBadge(_Record):
    """Display view of an earned achievement."""

    id: str
    name: str
    description: str
    icon: str
    color: str
