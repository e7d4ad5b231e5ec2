"""
Domain errors for playlist ingestion

Every failure the import pipeline reports to a caller is a PlaylistImportError
subclass carrying a stable error code and the HTTP status it maps to.
"""


class PlaylistImportError(Exception):
    """Base class for client-facing playlist import failures"""

    code: str = "PLAYLIST_IMPORT_ERROR"
    status_code: int = 400

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(code={self.code}, message={self.message!r})>"


class InvalidUrlError(PlaylistImportError):
    code = "INVALID_URL"


class ForbiddenHostError(PlaylistImportError):
    code = "FORBIDDEN_HOST"
    status_code = 403


class UnresolvableHostError(PlaylistImportError):
    code = "UNRESOLVABLE_HOST"


class BadRedirectError(PlaylistImportError):
    code = "BAD_REDIRECT"


class TooManyRedirectsError(PlaylistImportError):
    code = "TOO_MANY_REDIRECTS"


class EmptyResponseError(PlaylistImportError):
    code = "EMPTY_RESPONSE"


class DownloadTooLargeError(PlaylistImportError):
    code = "DOWNLOAD_TOO_LARGE"


class DownloadFailedError(PlaylistImportError):
    """Upstream answered with an error status or the transport failed"""
    code = "DOWNLOAD_FAILED"
    status_code = 502


class EmptyPlaylistError(PlaylistImportError):
    code = "EMPTY_PLAYLIST"


class PlaylistTooLargeError(PlaylistImportError):
    code = "PLAYLIST_TOO_LARGE"
