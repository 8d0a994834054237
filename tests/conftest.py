import pytest

from partyconnect.config.settings import get_settings
from partyconnect.core.storage import MemoryKeyValueStorage
from partyconnect.workflows.actions import Stores, build_stores


@pytest.fixture
def settings():
    base = get_settings()
    # The cached settings object is shared; always derive a copy.
    return base.model_copy(
        update={
            "storage": base.storage.model_copy(update={"backend": "memory"}),
            "catalog": base.catalog.model_copy(update={"seed_sample_events": False}),
        }
    )


@pytest.fixture
def stores(settings) -> Stores:
    return build_stores(settings, MemoryKeyValueStorage())
