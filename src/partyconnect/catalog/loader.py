"""
Sample event catalog loader.

A fresh install starts with a handful of sample events so the explore and map views
are not empty. The catalog is a JSON list of events, packaged as
`partyconnect/catalog/sample_events.json`; a different file can be configured via
`catalog.seed_path` (resolved against the project root).
"""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import Any

from partyconnect.core.env import resolve_project_path

SAMPLE_CATALOG = "sample_events.json"


def load_event_payloads(path: str | Path | None = None) -> list[dict[str, Any]]:
    """Load raw event mappings from the packaged catalog or from `path`.

    Payloads are returned unvalidated: the event store runs them through the same
    preparation (coordinate coercion, timezone attachment) as events added at runtime.
    """
    if path is None:
        text = resources.files("partyconnect.catalog").joinpath(SAMPLE_CATALOG).read_text(encoding="utf-8")
    else:
        text = resolve_project_path(path).read_text(encoding="utf-8")
    payload = json.loads(text)
    if not isinstance(payload, list):
        raise ValueError("Event catalog must be a JSON list of events.")
    return [item for item in payload if isinstance(item, dict)]
