"""
Logging setup for the CLI and the API process.

`config/logging.yaml` is a `dictConfig` document. The effective level (explicit
argument, else `app.log_level`, which `PARTYCONNECT_LOG_LEVEL` overrides) is pushed
onto the root logger and every handler that declares one.
"""

from __future__ import annotations

import copy
import logging.config
from typing import Any

from partyconnect.config.settings import get_logging_config, get_settings


def _with_level(config: dict[str, Any], level: str) -> dict[str, Any]:
    # get_logging_config() is cached; never mutate the shared dict.
    out = copy.deepcopy(config)
    out.setdefault("root", {})["level"] = level
    for handler in out.get("handlers", {}).values():
        if "level" in handler:
            handler["level"] = level
    return out


def configure_logging(level: str | None = None) -> None:
    effective = (level or get_settings().app.log_level).upper()
    logging.config.dictConfig(_with_level(get_logging_config(), effective))
