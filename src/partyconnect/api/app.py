# src/partyconnect/api/app.py
"""
FastAPI application wiring: logging, CORS and the `/api` router.

CORS is opt-in through the environment:
- `PARTYCONNECT_CORS_ORIGINS`: comma-separated list of allowed origins
- `PARTYCONNECT_CORS_ALLOW_LOCAL=0`: drop the default allowance for localhost frontends
"""

from __future__ import annotations

import os

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from partyconnect.core.logging import configure_logging

from .routes import router

_LOCALHOST_ORIGINS = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"
_TRUTHY = {"1", "true", "yes", "y"}


def _cors_kwargs() -> dict | None:
    origins = [o.strip() for o in os.getenv("PARTYCONNECT_CORS_ORIGINS", "").split(",") if o.strip()]
    if origins:
        return {"allow_origins": origins}
    if os.getenv("PARTYCONNECT_CORS_ALLOW_LOCAL", "1").strip().lower() in _TRUTHY:
        return {"allow_origin_regex": _LOCALHOST_ORIGINS}
    return None


def create_app() -> FastAPI:
    configure_logging()
    application = FastAPI(title="Party Connect API", version="0.1.0")

    cors = _cors_kwargs()
    if cors is not None:
        application.add_middleware(CORSMiddleware, allow_methods=["*"], allow_headers=["*"], **cors)

    application.include_router(router)

    @application.get("/api/health")
    def health() -> dict:
        return {"status": "ok", "service": application.title}

    return application


app = create_app()
