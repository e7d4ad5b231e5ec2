from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Response model serialized with camelCase keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Principal(BaseModel):
    """Authenticated caller, as forwarded by the auth gateway"""
    user_id: int | None = Field(None, description="Authenticated user id")
    tenant_id: int = Field(..., description="Tenant all reads and writes are scoped to")
    role: str = Field("user", description="Caller role (e.g. 'admin')")


class PlaylistImportRequest(BaseModel):
    """Playlist import request"""
    url: str = Field(..., description="Absolute http/https URL of the M3U playlist")
    name: str | None = Field(None, max_length=255, description="Playlist display name")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Require an absolute HTTP/HTTPS URL with a host"""
        value = v.strip()
        scheme, separator, rest = value.partition("://")
        if not separator or scheme.lower() not in ("http", "https") or not rest.strip("/"):
            raise ValueError(f"Playlist URL must be an absolute HTTP/HTTPS URL: {v}")
        return value


class ImportResult(CamelModel):
    """Playlist import statistics"""
    status: str = "ok"
    playlist_id: int
    categories: int = Field(..., description="Categories inserted")
    channels: int = Field(..., description="Channels inserted")
    duplicates: int = Field(..., description="Channels skipped as duplicate stream URLs")
    invalids: int = Field(..., description="Malformed or incomplete entries skipped")
    download_ms: int = Field(..., description="Total import duration in milliseconds")


class PlaylistResponse(CamelModel):
    """Imported playlist"""
    id: int
    name: str
    source_url: str
    created_at: datetime | None = None


class CategoryResponse(CamelModel):
    """Playlist category"""
    id: int
    name: str
    created_at: datetime | None = None


class ChannelResponse(CamelModel):
    """Channel within a category"""
    id: int
    name: str
    logo_url: str | None = None
    stream_url: str


class ErrorDetail(BaseModel):
    """Standard error detail"""
    code: str = Field(..., description="Error code (e.g., 'FORBIDDEN_HOST', 'EMPTY_PLAYLIST')")
    message: str = Field(..., description="Human-readable error message")
    context: dict | None = Field(None, description="Additional context about the error")


class StandardErrorResponse(BaseModel):
    """Standardized error response for all endpoints"""
    status: str = Field("error", description="Status indicator")
    timestamp: str = Field(..., description="ISO8601 timestamp of error")
    error: ErrorDetail = Field(..., description="Error details")


class HealthResponse(BaseModel):
    """Service health"""
    status: str
    database: str
    timestamp: str
    uptime: int
