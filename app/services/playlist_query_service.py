"""
Playlist Query Service

Tenant-scoped reads over imported playlists. Ownership is enforced by joining
through category -> playlist -> tenant, so ids belonging to another tenant
simply return nothing.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Category, Channel, Playlist
from app.schemas import CategoryResponse, ChannelResponse, PlaylistResponse, Principal


logger = logging.getLogger(__name__)


async def list_playlists(db: AsyncSession, principal: Principal) -> list[PlaylistResponse]:
    """List the caller tenant's playlists, newest first"""
    result = await db.execute(
        select(Playlist)
        .where(Playlist.tenant_id == principal.tenant_id)
        .order_by(Playlist.id.desc())
    )
    playlists = result.scalars().all()
    logger.debug(f"Tenant {principal.tenant_id} has {len(playlists)} playlists")
    return [PlaylistResponse.model_validate(playlist) for playlist in playlists]


async def list_categories(
    db: AsyncSession,
    playlist_id: int,
    principal: Principal,
) -> list[CategoryResponse]:
    """List categories of a playlist owned by the caller's tenant"""
    result = await db.execute(
        select(Category)
        .join(Playlist, Playlist.id == Category.playlist_id)
        .where(
            Category.playlist_id == playlist_id,
            Playlist.tenant_id == principal.tenant_id,
        )
        .order_by(Category.id)
    )
    return [CategoryResponse.model_validate(category) for category in result.scalars().all()]


async def list_channels(
    db: AsyncSession,
    category_id: int,
    principal: Principal,
) -> list[ChannelResponse]:
    """List channels of a category whose playlist belongs to the caller's tenant"""
    result = await db.execute(
        select(Channel)
        .join(Category, Category.id == Channel.category_id)
        .join(Playlist, Playlist.id == Category.playlist_id)
        .where(
            Channel.category_id == category_id,
            Playlist.tenant_id == principal.tenant_id,
        )
        .order_by(Channel.id)
    )
    return [ChannelResponse.model_validate(channel) for channel in result.scalars().all()]
