import logging
import re
from functools import lru_cache

from app.services.playlist_types import ParsedChannel, ParsedPlaylist

logger = logging.getLogger(__name__)

EXTINF_TAG = "#EXTINF"
DEFAULT_GROUP = "Other"
DEFAULT_CHANNEL_NAME = "No name"

_LINE_BREAKS = re.compile(r"\r\n|\r")


def parse_m3u(content: str | None) -> ParsedPlaylist:
    """
    Parse M3U playlist text into channel groups

    Each ``#EXTINF`` header is paired with the next line that is neither blank
    nor a comment. Headers without such a line are counted as invalid and
    skipped; scanning then resumes right after the header.

    Args:
        content: Raw playlist text

    Returns:
        ParsedPlaylist with groups in first-seen order
    """
    lines = _LINE_BREAKS.sub("\n", content or "").split("\n")
    playlist = ParsedPlaylist()

    for index, raw_line in enumerate(lines):
        header = raw_line.strip()
        if not header.startswith(EXTINF_TAG):
            continue

        url = _peek_data_line(lines, index + 1)
        if not url:
            playlist.invalid_count += 1
            continue

        entry = ParsedChannel(
            name=_extract_name(header) or _extract_attribute(header, "tvg-name") or DEFAULT_CHANNEL_NAME,
            url=url,
            group=_extract_attribute(header, "group-title") or DEFAULT_GROUP,
            logo=_extract_attribute(header, "tvg-logo") or "",
        )

        playlist.groups.setdefault(entry.group, []).append(entry)
        playlist.total_entries += 1

    logger.debug(
        f"M3U parsing complete: {playlist.total_entries} entries in {len(playlist.groups)} groups, "
        f"{playlist.invalid_count} invalid"
    )
    return playlist


def _peek_data_line(lines: list[str], start: int) -> str | None:
    """Return the first non-blank, non-comment line at or after start"""
    for position in range(start, len(lines)):
        line = lines[position].strip()
        if not line or line.startswith("#"):
            continue
        return line
    return None


@lru_cache(maxsize=None)
def _attribute_pattern(attribute: str) -> re.Pattern[str]:
    return re.compile(rf'{re.escape(attribute)}="(.*?)"', re.IGNORECASE)


def _extract_attribute(header: str, attribute: str) -> str | None:
    """First key="value" match, stripped; blank values count as missing"""
    match = _attribute_pattern(attribute).search(header)
    if not match:
        return None
    return match.group(1).strip() or None


def _extract_name(header: str) -> str | None:
    # Everything after the first comma, commas inside the name included
    _, separator, name = header.partition(",")
    if not separator:
        return None
    return name.strip() or None
