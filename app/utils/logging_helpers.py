"""
Structured logging helpers for consistent log formatting.
"""
import logging
from urllib.parse import urlsplit, urlunsplit


def sanitize_url_for_logging(url: str) -> str:
    """Remove credentials and query string from URL for safe logging.

    Reseller playlist URLs usually carry the account's username and password,
    either as userinfo or as query parameters.
    """
    if "://" not in url:
        return url
    try:
        parts = urlsplit(url)
        netloc = parts.netloc
        if "@" in netloc:
            netloc = "***:***@" + netloc.rsplit("@", 1)[1]
        query = "***" if parts.query else ""
        return urlunsplit((parts.scheme, netloc, parts.path, query, ""))
    except ValueError:
        return url


def log_import_start(logger: logging.Logger, tenant_id: int, url: str) -> None:
    """Log the start of a playlist import."""
    logger.info(f"Playlist import started for tenant {tenant_id}: {sanitize_url_for_logging(url)}")


def log_import_summary(
    logger: logging.Logger,
    playlist_id: int,
    categories: int,
    channels: int,
    duplicates: int,
    invalids: int,
    elapsed_ms: int,
) -> None:
    """
    Log playlist import statistics.

    Args:
        logger: Logger instance
        playlist_id: Newly created playlist id
        categories: Categories inserted
        channels: Channels inserted
        duplicates: Channels skipped as duplicate stream URLs
        invalids: Malformed entries from parsing plus entries rejected at insert
        elapsed_ms: Total import duration
    """
    logger.info(
        f"Playlist {playlist_id} imported: {categories} categories, {channels} channels, "
        f"{duplicates} duplicates, {invalids} invalid ({elapsed_ms} ms)"
    )
