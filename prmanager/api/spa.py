"""Static UI (SPA) fallback routes."""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse, PlainTextResponse

from prmanager.api.errors import raise_http_error

router = APIRouter(include_in_schema=False)

_static_root = Path(__file__).resolve().parents[1] / "static_ui"


def _resolve_asset(full_path: str) -> Path | None:
    candidate = (_static_root / full_path).resolve()
    if _static_root.resolve() not in candidate.parents:
        return None
    return candidate if candidate.is_file() else None


@router.get("/{full_path:path}")
async def spa_fallback(full_path: str):
    """Serve built UI assets, or index.html for client-side routes."""
    if full_path == "api" or full_path.startswith("api/"):
        raise_http_error("NOT_FOUND", "Not found", 404)
    if full_path:
        asset = _resolve_asset(full_path)
        if asset is not None:
            return FileResponse(asset)
    index_path = _static_root / "index.html"
    if index_path.is_file():
        return FileResponse(index_path)
    return PlainTextResponse("UI not built", status_code=404)
