"""
Shared dataclasses used across the playlist import pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.config import PlaylistImportSettings


@dataclass(slots=True)
class ParsedChannel:
    """In-memory representation of a playlist entry before persistence."""
    name: str
    url: str
    group: str
    logo: str = ""


@dataclass(slots=True)
class ParsedPlaylist:
    """Parser output: channels grouped by group-title in first-seen order."""
    groups: dict[str, list[ParsedChannel]] = field(default_factory=dict)
    invalid_count: int = 0
    total_entries: int = 0


@dataclass(slots=True)
class FetchOptions:
    """Bounds applied to one remote playlist download."""
    allowlist: list[str] = field(default_factory=list)
    max_redirects: int = 2
    timeout_ms: float = 20000.0
    max_bytes: int = 5_000_000
    user_agent: str = "VLC/3.0.20 LibVLC/3.0.20"

    @classmethod
    def from_settings(cls, import_settings: PlaylistImportSettings) -> FetchOptions:
        return cls(
            allowlist=import_settings.allowed_hosts,
            max_redirects=import_settings.max_redirects,
            timeout_ms=import_settings.timeout_ms,
            max_bytes=import_settings.max_bytes,
            user_agent=import_settings.user_agent,
        )


@dataclass(slots=True)
class ChannelStoreStats:
    """Outcome of inserting one category's channels."""
    inserted: int = 0
    duplicates: int = 0
    invalid: int = 0


__all__ = ["ParsedChannel", "ParsedPlaylist", "FetchOptions", "ChannelStoreStats"]
