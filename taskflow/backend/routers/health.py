"""Service index and liveness endpoints."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from taskflow import __version__
from taskflow.backend.log import SERVICE_NAME

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
        "version": __version__,
    }


@router.get("/")
async def index() -> dict[str, object]:
    return {
        "ok": True,
        "service": SERVICE_NAME,
        "version": __version__,
        "endpoints": {
            "health": "/health",
            "auth": "/auth",
            "users": "/users",
            "workspaces": "/workspaces",
            "projects": "/projects",
            "boards": "/boards",
            "docs": "/docs",
        },
    }
