from datetime import datetime, timezone
from typing import Annotated
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import APIRouter, Depends
import logging

from app.database import get_db, ping_db
from app.dependencies import get_current_principal, get_playlist_fetcher, require_role
from app.schemas import (
    CategoryResponse,
    ChannelResponse,
    HealthResponse,
    ImportResult,
    PlaylistImportRequest,
    PlaylistResponse,
    Principal,
)
from app.services import (
    PlaylistFetcher,
    import_playlist,
    list_categories,
    list_channels,
    list_playlists,
)


logger = logging.getLogger(__name__)

main_router = APIRouter()

_started_at = datetime.now(timezone.utc)


@main_router.get("/")
async def root() -> dict:
    """Root endpoint with service information"""
    return {
        "service": "Playlist Service",
        "version": "0.1.0",
        "endpoints": {
            "import": "/playlist/import - Import an M3U playlist (POST, admin)",
            "playlists": "/playlist - List playlists",
            "categories": "/playlist/{id}/categories - List playlist categories",
            "channels": "/channels/{category_id} - List category channels",
            "health": "/health - Health check"
        }
    }


@main_router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint"""
    database = "ok"
    try:
        await ping_db()
    except (SQLAlchemyError, RuntimeError) as exc:
        logger.error(f"Health check database probe failed: {exc}")
        database = "error"

    now = datetime.now(timezone.utc)
    return HealthResponse(
        status="ok" if database == "ok" else "error",
        database=database,
        timestamp=now.isoformat(),
        uptime=int((now - _started_at).total_seconds()),
    )


@main_router.post("/playlist/import", response_model=ImportResult)
async def import_playlist_endpoint(
    request: PlaylistImportRequest,
    principal: Annotated[Principal, Depends(require_role("admin"))],
    fetcher: Annotated[PlaylistFetcher, Depends(get_playlist_fetcher)],
) -> ImportResult:
    """
    Download an M3U playlist and store its categories and channels

    Args:
        request: Playlist URL and optional name

    Returns:
        Import statistics
    """
    logger.info(f"Playlist import requested by tenant {principal.tenant_id}")
    return await import_playlist(request, principal, fetcher=fetcher)


@main_router.get("/playlist", response_model=list[PlaylistResponse])
async def get_playlists(
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[PlaylistResponse]:
    """List playlists owned by the caller's tenant"""
    return await list_playlists(db, principal)


@main_router.get("/playlist/{playlist_id}/categories", response_model=list[CategoryResponse])
async def get_categories(
    playlist_id: int,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[CategoryResponse]:
    """List categories of one of the caller's playlists"""
    return await list_categories(db, playlist_id, principal)


@main_router.get("/channels/{category_id}", response_model=list[ChannelResponse])
async def get_channels(
    category_id: int,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[ChannelResponse]:
    """List channels of one of the caller's categories"""
    return await list_channels(db, category_id, principal)
