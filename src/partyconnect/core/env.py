"""
Where the project lives on disk.

The file storage backend writes under `storage.dir` (default `.data/partyconnect`) and
`catalog.seed_path` may be relative too. Both are anchored at the project root, so the
CLI and `partyconnect serve` share one data directory wherever they are started from.
A repo-local `.env` may hold `PARTYCONNECT_*` overrides.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT_VAR = "PARTYCONNECT_PROJECT_ROOT"
ENV_FILE_VAR = "PARTYCONNECT_ENV_FILE"

_ROOT_MARKERS = (".env", ".git", "pyproject.toml")


def _is_project_root(candidate: Path) -> bool:
    return any((candidate / marker).exists() for marker in _ROOT_MARKERS)


@lru_cache
def get_project_root() -> Path:
    """Explicit root, else the `.env` file's directory, else the nearest marked parent of CWD."""
    root = os.getenv(PROJECT_ROOT_VAR)
    if root:
        return Path(root).expanduser().resolve()
    env_file = os.getenv(ENV_FILE_VAR)
    if env_file:
        return Path(env_file).expanduser().resolve().parent

    cwd = Path.cwd().resolve()
    return next((p for p in (cwd, *cwd.parents) if _is_project_root(p)), cwd)


def env_file_path() -> Path:
    explicit = os.getenv(ENV_FILE_VAR)
    if explicit:
        return Path(explicit).expanduser().resolve()
    return get_project_root() / ".env"


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load the `.env` file once. Variables already in the environment win."""
    path = env_file_path()
    if not path.is_file():
        return None
    load_dotenv(dotenv_path=path, override=False)
    return path


def resolve_project_path(path: str | Path) -> Path:
    candidate = Path(path).expanduser()
    if candidate.is_absolute():
        return candidate
    return (get_project_root() / candidate).resolve()
