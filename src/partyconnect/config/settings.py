# src/partyconnect/config/settings.py
"""
Application settings (Pydantic).

Source order, later wins:
1. `defaults.yaml` packaged next to this module, or the file named by
   `PARTYCONNECT_CONFIG_PATH` instead of it
2. `PARTYCONNECT_STORAGE_DIR`, `PARTYCONNECT_STORAGE_BACKEND`, `PARTYCONNECT_LOG_LEVEL`
   (from the process environment or a repo-local `.env`)

Store code takes its knobs (storage keys, radii, rating range, default profile) from
here rather than hard-coding them.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from partyconnect.core.env import load_dotenv_if_present

# env var -> (section, key, transform)
_ENV_OVERRIDES: dict[str, tuple[str, str, Any]] = {
    "PARTYCONNECT_STORAGE_DIR": ("storage", "dir", str),
    "PARTYCONNECT_STORAGE_BACKEND": ("storage", "backend", lambda v: v.strip().lower()),
    "PARTYCONNECT_LOG_LEVEL": ("app", "log_level", str),
}


def _parse_mapping(text: str, source: str) -> dict[str, Any]:
    loaded = yaml.safe_load(text)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Invalid YAML root in {source}; expected a mapping.")
    return loaded


def _packaged_yaml(filename: str) -> dict[str, Any]:
    resource = resources.files(__package__).joinpath(filename)
    return _parse_mapping(resource.read_text(encoding="utf-8"), f"partyconnect.config/{filename}")


def _external_yaml(path: str | Path) -> dict[str, Any]:
    return _parse_mapping(Path(path).read_text(encoding="utf-8"), str(path))


class AppSettings(BaseModel):
    name: str = "Party Connect"
    timezone: str = "America/Los_Angeles"
    log_level: str = "INFO"


class StorageSettings(BaseModel):
    backend: Literal["file", "memory"] = "file"
    dir: str = ".data/partyconnect"
    event_key: str = "event-storage"
    user_key: str = "user-storage"


class CatalogSettings(BaseModel):
    seed_sample_events: bool = True
    # None means the packaged sample catalog.
    seed_path: str | None = None


class GeoSettings(BaseModel):
    default_radius_km: float = Field(50.0, gt=0)
    reverse_geocode_radius_km: float = Field(50.0, gt=0)


class RatingSettings(BaseModel):
    min: float = 0
    max: float = 5


class DefaultProfileSettings(BaseModel):
    id: str = "current-user"
    name: str = "You (Current User)"
    avatar: str = "/placeholder.svg?height=100&width=100"
    bio: str = ""
    location: str = ""
    coordinates: tuple[float, float] | None = None
    preferences: str = ""


class ProfileSettings(BaseModel):
    default: DefaultProfileSettings = Field(default_factory=DefaultProfileSettings)


class ApiSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    geo: GeoSettings = Field(default_factory=GeoSettings)
    ratings: RatingSettings = Field(default_factory=RatingSettings)
    profile: ProfileSettings = Field(default_factory=ProfileSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    merged = {section: dict(values) if isinstance(values, dict) else values for section, values in raw.items()}
    for var, (section, key, transform) in _ENV_OVERRIDES.items():
        value = os.getenv(var)
        if value:
            merged.setdefault(section, {})[key] = transform(value)
    return merged


@lru_cache
def get_settings() -> Settings:
    """Validated settings; cached, so call `get_settings.cache_clear()` after changing the environment."""
    load_dotenv_if_present()
    external = os.getenv("PARTYCONNECT_CONFIG_PATH")
    raw = _external_yaml(external) if external else _packaged_yaml("defaults.yaml")
    return Settings.model_validate(_apply_env_overrides(raw))


@lru_cache
def get_logging_config() -> dict[str, Any]:
    return _packaged_yaml("logging.yaml")
