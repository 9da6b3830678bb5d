"""
deps.py – FastAPI dependencies shared by the dashboard routes.

The row cache and settings live on ``app.state`` (created in the lifespan
handler in main.py); tests replace them through ``app.dependency_overrides``.
"""
from __future__ import annotations

from fastapi import Depends, Query, Request

from building_ops.cache import RowCache
from building_ops.config import Config


def get_settings(request: Request) -> Config:
    return request.app.state.config


def get_row_cache(request: Request) -> RowCache:
    """The process-wide sheet row cache."""
    return request.app.state.row_cache


class SheetTab:
    """The configured spreadsheet plus the ``?gid=`` tab, falling back to SHEET_GID."""

    def __init__(
        self,
        gid: str | None = Query(None, description="Google Sheet tab id (default: first tab)"),
        settings: Config = Depends(get_settings),
    ):
        self.sheet_id = settings.sheet_id
        self.gid = gid or settings.sheet_gid
