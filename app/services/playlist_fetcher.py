"""
Playlist Fetcher

Downloads playlist text from a client-supplied URL. Redirects are followed by
hand so that every hop goes through the URL guard before any request is sent
to it; the guard is injected so tests and callers can swap the resolver or
policy.
"""
import logging
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import urljoin

import httpx

from app.exceptions import (
    BadRedirectError,
    DownloadFailedError,
    DownloadTooLargeError,
    EmptyResponseError,
    TooManyRedirectsError,
)
from app.services.playlist_types import FetchOptions
from app.utils.logging_helpers import sanitize_url_for_logging
from app.utils.url_safety import assert_safe_url


logger = logging.getLogger(__name__)

UrlGuard = Callable[..., Awaitable[Any]]


class PlaylistFetcher:
    """Bounded HTTP retrieval with per-hop SSRF validation."""

    def __init__(
        self,
        url_guard: UrlGuard = assert_safe_url,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url_guard = url_guard
        self._transport = transport

    async def fetch_playlist(self, url: str, options: FetchOptions) -> str:
        """
        Download playlist text, following at most options.max_redirects redirects

        Args:
            url: Absolute http(s) URL
            options: Redirect, timeout, size and header settings

        Returns:
            Decoded response body

        Raises:
            InvalidUrlError, ForbiddenHostError, UnresolvableHostError: From the URL guard
            BadRedirectError: Redirect response without a Location header
            TooManyRedirectsError: Redirect budget exhausted
            EmptyResponseError: Successful response with an empty body
            DownloadTooLargeError: Body exceeds options.max_bytes
            DownloadFailedError: Error status or transport failure
        """
        current_url = url
        headers = {"User-Agent": options.user_agent, "Accept": "*/*"}
        timeout = httpx.Timeout(options.timeout_ms / 1000)

        async with httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=False,
            transport=self._transport,
        ) as client:
            for attempt in range(options.max_redirects + 1):
                await self._url_guard(current_url, allowlist=options.allowlist)
                logger.info(
                    f"Fetching playlist (attempt {attempt + 1}/{options.max_redirects + 1}): "
                    f"{sanitize_url_for_logging(current_url)}"
                )

                status_code, location, body, encoding = await self._get(
                    client, current_url, headers, options.max_bytes
                )

                if 300 <= status_code < 400:
                    if not location:
                        raise BadRedirectError(
                            "Redirect without a Location header",
                            {"status": status_code},
                        )
                    next_url = urljoin(current_url, location)
                    logger.info(f"Redirect {status_code} -> {sanitize_url_for_logging(next_url)}")
                    current_url = next_url
                    continue

                if not body:
                    raise EmptyResponseError("Empty response while downloading playlist")

                logger.info(f"Downloaded playlist: {len(body)} bytes")
                return _decode(body, encoding)

        raise TooManyRedirectsError(
            "Too many redirects",
            {"max_redirects": options.max_redirects},
        )

    async def _get(
        self,
        client: httpx.AsyncClient,
        url: str,
        headers: dict[str, str],
        max_bytes: int,
    ) -> tuple[int, str | None, bytes, str | None]:
        try:
            async with client.stream("GET", url, headers=headers) as response:
                status_code = response.status_code
                if not 200 <= status_code < 400:
                    raise DownloadFailedError(
                        f"Upstream responded with HTTP {status_code}",
                        {"status": status_code},
                    )

                if 300 <= status_code < 400:
                    return status_code, response.headers.get("location"), b"", None

                _check_declared_length(response.headers.get("content-length"), max_bytes)

                body = bytearray()
                async for chunk in response.aiter_bytes():
                    body.extend(chunk)
                    if len(body) > max_bytes:
                        raise DownloadTooLargeError(
                            "Playlist download exceeds size limit",
                            {"max_bytes": max_bytes},
                        )
                return status_code, None, bytes(body), response.charset_encoding
        except httpx.HTTPError as exc:
            logger.warning(
                f"Playlist download failed ({type(exc).__name__}): {sanitize_url_for_logging(url)}"
            )
            raise DownloadFailedError(f"Playlist download failed: {type(exc).__name__}") from exc


def _check_declared_length(raw_length: str | None, max_bytes: int) -> None:
    if not raw_length:
        return
    try:
        declared = int(raw_length)
    except ValueError:
        return
    if declared > max_bytes:
        raise DownloadTooLargeError(
            "Playlist download exceeds size limit",
            {"max_bytes": max_bytes, "content_length": declared},
        )


def _decode(body: bytes, encoding: str | None) -> str:
    try:
        return body.decode(encoding or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


async def fetch_playlist(url: str, options: FetchOptions) -> str:
    """Fetch with the default guard and transport."""
    return await PlaylistFetcher().fetch_playlist(url, options)
