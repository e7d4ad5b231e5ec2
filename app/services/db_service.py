"""
Database operations for playlist imports

This module contains the insert operations used inside the import transaction.
"""
import logging
from collections.abc import Sequence
from time import perf_counter
from typing import cast

from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Category, Channel, Playlist, Tenant
from app.services.playlist_types import ChannelStoreStats, ParsedChannel


logger = logging.getLogger(__name__)


async def ensure_tenant(db: AsyncSession, tenant_id: int) -> None:
    """
    Make sure the tenant row exists before tenant-owned rows are inserted.

    Tenants are identified by the auth gateway, so the first import for a
    tenant creates its local row.
    """
    stmt = sqlite_insert(Tenant.__table__).values(
        id=tenant_id,
        name=f"tenant-{tenant_id}",
    ).on_conflict_do_nothing(index_elements=["id"])
    result = cast(CursorResult, await db.execute(stmt))
    if result.rowcount:
        logger.info(f"Registered tenant {tenant_id}")


async def create_playlist(db: AsyncSession, tenant_id: int, name: str, source_url: str) -> int:
    """
    Insert a playlist row and return its id.

    Args:
        db: Database session (inside the import transaction)
        tenant_id: Owning tenant
        name: Display name
        source_url: URL the playlist was downloaded from

    Returns:
        New playlist id
    """
    playlist = Playlist(tenant_id=tenant_id, name=name, source_url=source_url)
    db.add(playlist)
    await db.flush()
    logger.debug(f"Created playlist {playlist.id} for tenant {tenant_id}")
    return playlist.id


async def create_category(db: AsyncSession, playlist_id: int, name: str) -> int:
    """Insert a category row bound to a playlist and return its id."""
    category = Category(playlist_id=playlist_id, name=name)
    db.add(category)
    await db.flush()
    return category.id


async def store_channels(
    db: AsyncSession,
    category_id: int,
    channels: Sequence[ParsedChannel],
    *,
    chunk_size: int = 500,
) -> ChannelStoreStats:
    """
    Store a category's channels using batched inserts with ON CONFLICT DO NOTHING.

    Entries without a URL or name are counted as invalid. A stream URL already
    seen in this call, or already present in the category, is counted as a
    duplicate.

    Args:
        db: Database session (inside the import transaction)
        category_id: Category the channels belong to
        channels: Channels in parse order

    Keyword Args:
        chunk_size: Rows per executemany batch

    Returns:
        Inserted / duplicate / invalid counts
    """
    stats = ChannelStoreStats()
    if not channels:
        logger.debug(f"No channels to store for category {category_id}")
        return stats

    # Core insert, so rowcount is the executemany total
    insert_stmt = sqlite_insert(Channel.__table__).on_conflict_do_nothing(
        index_elements=["category_id", "stream_url"]
    )

    seen_urls: set[str] = set()
    payload: list[dict[str, object]] = []
    for channel in channels:
        if not channel.url or not channel.name:
            stats.invalid += 1
            continue
        if channel.url in seen_urls:
            stats.duplicates += 1
            continue
        seen_urls.add(channel.url)
        payload.append(
            {
                "category_id": category_id,
                "name": channel.name,
                "logo_url": channel.logo or None,
                "stream_url": channel.url,
            }
        )

    for start_index in range(0, len(payload), chunk_size):
        chunk = payload[start_index:start_index + chunk_size]
        execute_start = perf_counter()

        raw_result = await db.execute(insert_stmt, chunk)

        cursor_result = cast(CursorResult, raw_result)
        rowcount = cursor_result.rowcount
        if rowcount is None or rowcount < 0:
            chunk_inserted = len(chunk)
        else:
            chunk_inserted = rowcount

        stats.inserted += chunk_inserted
        stats.duplicates += len(chunk) - chunk_inserted

        logger.debug(
            f"Category {category_id} chunk persisted: payload={len(chunk)}, "
            f"inserted={chunk_inserted}, exec_time={perf_counter() - execute_start:.3f}s"
        )

    return stats
