"""
Playlist Import Service

Coordinates downloading, parsing, and transactional persistence of a
tenant's M3U playlist.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from time import perf_counter

from app.config import PlaylistImportSettings
from app.database import session_scope
from app.exceptions import EmptyPlaylistError, PlaylistTooLargeError
from app.schemas import ImportResult, PlaylistImportRequest, Principal
from app.services.db_service import create_category, create_playlist, ensure_tenant, store_channels
from app.services.m3u_parser_service import parse_m3u
from app.services.playlist_fetcher import PlaylistFetcher
from app.services.playlist_types import FetchOptions, ParsedPlaylist
from app.utils.logging_helpers import log_import_start, log_import_summary, sanitize_url_for_logging


logger = logging.getLogger(__name__)

DEFAULT_PLAYLIST_NAME = "My Playlist"


@dataclass(slots=True)
class PersistSummary:
    playlist_id: int
    categories: int = 0
    channels: int = 0
    duplicates: int = 0
    invalid: int = 0


class PlaylistImportPipeline:
    """Runs fetch, parse, validation and persistence for one import request."""

    def __init__(
        self,
        fetcher: PlaylistFetcher | None = None,
        config: PlaylistImportSettings | None = None,
    ) -> None:
        self._fetcher = fetcher or PlaylistFetcher()
        self._config = config

    async def run(self, request: PlaylistImportRequest, principal: Principal) -> ImportResult:
        config = self._config or PlaylistImportSettings()
        log_import_start(logger, principal.tenant_id, request.url)

        started_at = perf_counter()
        content = await self._fetcher.fetch_playlist(
            request.url,
            FetchOptions.from_settings(config),
        )

        parsed = parse_m3u(content)
        logger.info(
            f"Parsed playlist: {parsed.total_entries} entries in {len(parsed.groups)} groups, "
            f"{parsed.invalid_count} invalid"
        )
        self._validate(parsed, config)

        summary = await self._persist(request, principal, parsed, config)
        elapsed_ms = int((perf_counter() - started_at) * 1000)

        invalids = parsed.invalid_count + summary.invalid
        log_import_summary(
            logger,
            summary.playlist_id,
            summary.categories,
            summary.channels,
            summary.duplicates,
            invalids,
            elapsed_ms,
        )

        return ImportResult(
            status="ok",
            playlist_id=summary.playlist_id,
            categories=summary.categories,
            channels=summary.channels,
            duplicates=summary.duplicates,
            invalids=invalids,
            download_ms=elapsed_ms,
        )

    def _validate(self, parsed: ParsedPlaylist, config: PlaylistImportSettings) -> None:
        if parsed.total_entries == 0 or not parsed.groups:
            raise EmptyPlaylistError("Playlist has no valid entries")

        # Uses the parse-time count, so duplicate URLs still count toward the cap
        if parsed.total_entries > config.max_channels:
            raise PlaylistTooLargeError(
                "Playlist exceeds the channel limit",
                {"entries": parsed.total_entries, "max_channels": config.max_channels},
            )

    async def _persist(
        self,
        request: PlaylistImportRequest,
        principal: Principal,
        parsed: ParsedPlaylist,
        config: PlaylistImportSettings,
    ) -> PersistSummary:
        name = (request.name or "").strip() or DEFAULT_PLAYLIST_NAME

        try:
            async with session_scope() as session:
                await ensure_tenant(session, principal.tenant_id)
                playlist_id = await create_playlist(
                    session,
                    principal.tenant_id,
                    name,
                    request.url.strip(),
                )
                summary = PersistSummary(playlist_id=playlist_id)

                for group, channels in parsed.groups.items():
                    category_id = await create_category(session, playlist_id, group)
                    summary.categories += 1

                    stats = await store_channels(
                        session,
                        category_id,
                        channels,
                        chunk_size=config.channels_chunk_size,
                    )
                    summary.channels += stats.inserted
                    summary.duplicates += stats.duplicates
                    summary.invalid += stats.invalid
        except Exception as exc:
            logger.error(
                f"Playlist import rolled back for tenant {principal.tenant_id} "
                f"({sanitize_url_for_logging(request.url)}): {exc}",
                exc_info=True,
            )
            raise

        return summary


async def import_playlist(
    request: PlaylistImportRequest,
    principal: Principal,
    *,
    fetcher: PlaylistFetcher | None = None,
) -> ImportResult:
    """
    Main entry point for playlist imports.

    Returns:
        Import statistics

    Raises:
        PlaylistImportError: Fetch or validation failure (nothing persisted)
        Exception: Any persistence failure, after rollback
    """
    return await PlaylistImportPipeline(fetcher=fetcher).run(request, principal)
