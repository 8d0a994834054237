"""
User store: the single locally controlled profile.

Persisted as `{"currentUser": {...}}` under the `user-storage` key after every
mutation. Note the deliberate asymmetry in the list operations: only
`add_joined_event` skips ids that are already present; created and sponsored ids are
appended unconditionally.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import ValidationError

from partyconnect.core.storage import JsonSlot
from partyconnect.domain.models import Profile, ProfilePatch

logger = logging.getLogger(__name__)


class UserStore:
    def __init__(self, slot: JsonSlot, *, default_profile: Profile | None = None):
        self._slot = slot
        self._default = default_profile or Profile()
        self._current = self._load()

    def _load(self) -> Profile:
        data = self._slot.load()
        if isinstance(data, dict) and isinstance(data.get("state"), dict):
            data = data["state"]
        raw = data.get("currentUser") if isinstance(data, dict) else None
        if isinstance(raw, dict):
            try:
                return Profile.model_validate(raw)
            except ValidationError as e:
                logger.warning("Stored profile is unreadable, using the default: %s", e)
        return self._default.model_copy(deep=True)

    def _save(self) -> bool:
        return self._slot.save({"currentUser": self._current.model_dump(mode="json", by_alias=True)})

    def _apply(self, updates: dict[str, Any]) -> Profile:
        # Re-validate the merged profile so nothing unreadable reaches storage.
        self._current = Profile.model_validate({**self._current.model_dump(), **updates})
        self._save()
        return self._current

    @property
    def current_user(self) -> Profile:
        return self._current

    def update_profile(self, patch: ProfilePatch | Mapping[str, Any]) -> Profile:
        if not isinstance(patch, ProfilePatch):
            patch = ProfilePatch.model_validate(patch)
        return self._apply(patch.updates())

    def add_created_event(self, event_id: str) -> Profile:
        return self._apply({"created_events": [*self._current.created_events, event_id]})

    def add_joined_event(self, event_id: str) -> Profile:
        if event_id in self._current.joined_events:
            return self._current
        return self._apply({"joined_events": [*self._current.joined_events, event_id]})

    def add_sponsored_event(self, event_id: str) -> Profile:
        return self._apply({"sponsored_events": [*self._current.sponsored_events, event_id]})

    def update_location(self, coordinates: tuple[float, float], location_name: str) -> Profile:
        patch = ProfilePatch(coordinates=coordinates, location=location_name)
        return self._apply(patch.updates())

    def reset(self) -> Profile:
        """Clear every field (signed-out state)."""
        return self._apply(Profile().model_dump())
