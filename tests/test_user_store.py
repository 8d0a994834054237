import json

import pytest
from pydantic import ValidationError

from partyconnect.core.storage import JsonSlot, MemoryKeyValueStorage
from partyconnect.domain.models import Profile, ProfilePatch
from partyconnect.stores.users import UserStore

DEFAULT = Profile(
    id="current-user",
    name="You (Current User)",
    location="Los Angeles, CA",
    coordinates=(34.0522, -118.2437),
    preferences="Pop, Rock, Electronic",
)


def _store(storage: MemoryKeyValueStorage | None = None) -> UserStore:
    storage = storage if storage is not None else MemoryKeyValueStorage()
    return UserStore(JsonSlot(storage, "user-storage"), default_profile=DEFAULT)


def test_starts_from_default_profile():
    store = _store()
    assert store.current_user == DEFAULT
    assert store.current_user is not DEFAULT


def test_joined_events_are_deduplicated_but_created_are_not():
    store = _store()

    store.add_joined_event("e1")
    store.add_joined_event("e1")
    store.add_created_event("e2")
    store.add_created_event("e2")
    store.add_sponsored_event("e3")
    store.add_sponsored_event("e3")

    user = store.current_user
    assert user.joined_events == ["e1"]
    assert user.created_events == ["e2", "e2"]
    assert user.sponsored_events == ["e3", "e3"]


def test_update_profile_is_shallow_and_only_touches_given_fields():
    store = _store()

    store.update_profile({"name": "Riley", "bio": "Hosts board game nights"})

    user = store.current_user
    assert user.name == "Riley"
    assert user.bio == "Hosts board game nights"
    assert user.location == "Los Angeles, CA"
    assert user.preferences == "Pop, Rock, Electronic"


def test_update_profile_accepts_camel_case_and_replaces_lists():
    store = _store()
    store.add_created_event("old")

    store.update_profile(ProfilePatch.model_validate({"createdEvents": ["a", "b"], "positiveRatings": 4}))

    assert store.current_user.created_events == ["a", "b"]
    assert store.current_user.positive_ratings == 4


def test_update_profile_rejects_invalid_coordinates():
    store = _store()
    with pytest.raises(ValidationError):
        store.update_profile({"coordinates": [200, 0]})
    assert store.current_user.coordinates == (34.0522, -118.2437)


def test_update_location_replaces_coordinates_and_label():
    store = _store()

    store.update_location((30.2672, -97.7431), "Austin, TX")

    assert store.current_user.coordinates == (30.2672, -97.7431)
    assert store.current_user.location == "Austin, TX"
    assert store.current_user.name == "You (Current User)"


def test_reset_clears_every_field():
    store = _store()
    store.add_joined_event("e1")

    user = store.reset()

    assert user == Profile()
    assert user.joined_events == []
    assert user.coordinates is None


def test_profile_round_trips_through_storage():
    storage = MemoryKeyValueStorage()
    store = _store(storage)
    store.add_created_event("e1")
    store.update_profile({"email": "me@example.com"})

    payload = json.loads(storage.get("user-storage"))
    assert payload["currentUser"]["createdEvents"] == ["e1"]
    assert payload["currentUser"]["email"] == "me@example.com"

    assert _store(storage).current_user == store.current_user


def test_unreadable_stored_profile_falls_back_to_default():
    storage = MemoryKeyValueStorage({"user-storage": json.dumps({"currentUser": {"positiveRatings": -1}})})
    assert _store(storage).current_user == DEFAULT

    storage = MemoryKeyValueStorage({"user-storage": "not json"})
    assert _store(storage).current_user == DEFAULT


def test_null_for_a_required_field_is_rejected_and_profile_survives_reload():
    storage = MemoryKeyValueStorage()
    store = _store(storage)
    store.add_created_event("e1")

    with pytest.raises(ValidationError, match="bio"):
        store.update_profile({"bio": None})

    assert store.current_user.bio == ""
    assert _store(storage).current_user.created_events == ["e1"]


def test_email_and_coordinates_may_be_cleared():
    storage = MemoryKeyValueStorage()
    store = _store(storage)
    store.update_profile({"email": "me@example.com"})

    store.update_profile({"email": None, "coordinates": None})

    reloaded = _store(storage).current_user
    assert reloaded.email is None
    assert reloaded.coordinates is None
    assert reloaded.location == "Los Angeles, CA"


def test_numeric_ids_from_browser_export_are_read_as_strings():
    payload = {"state": {"currentUser": {"id": "u1", "createdEvents": [1, 2], "joinedEvents": [3]}}}
    storage = MemoryKeyValueStorage({"user-storage": json.dumps(payload)})

    user = _store(storage).current_user

    assert user.created_events == ["1", "2"]
    assert user.joined_events == ["3"]
