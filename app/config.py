from pathlib import Path
import logging
import math

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "VLC/3.0.20 LibVLC/3.0.20"


class CustomSettings(BaseSettings):
    """Application settings loaded from environment variables.

    Validates configuration at startup to catch misconfiguration early.
    """

    database_path: str = "./data/playlists.db"
    sqlite_journal_mode: str = "WAL"
    sqlite_cache_size_kb: int = 64000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("database_path")
    @classmethod
    def validate_database_path(cls, value: str) -> str:
        """Validate database path is accessible."""
        if value == ":memory:":
            return value
        path = Path(value)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            return value
        except (OSError, PermissionError) as exc:
            raise ValueError(f"Cannot access database path '{value}': {exc}") from exc

    @field_validator("sqlite_journal_mode")
    @classmethod
    def validate_journal_mode(cls, value: str) -> str:
        """Validate SQLite journal mode."""
        normalized = value.upper()
        allowed = {"DELETE", "TRUNCATE", "PERSIST", "MEMORY", "WAL", "OFF"}
        if normalized not in allowed:
            raise ValueError(f"sqlite_journal_mode must be one of {sorted(allowed)}")
        return normalized

    @field_validator("sqlite_cache_size_kb")
    @classmethod
    def validate_cache_size(cls, value: int) -> int:
        """Ensure the SQLite cache size is positive."""
        if value <= 0:
            raise ValueError("sqlite_cache_size_kb must be > 0")
        return value

    def __init__(self, **data):
        """Initialize settings and log configuration."""
        super().__init__(**data)

        logger.info("Configuration loaded:")
        logger.info(f"  Database: {self.database_path}")
        logger.info(f"  SQLite Journal Mode: {self.sqlite_journal_mode}")
        logger.info(f"  SQLite Cache Size (KB): {self.sqlite_cache_size_kb}")


class PlaylistImportSettings(BaseSettings):
    """Limits and policy for a single playlist import.

    Read from ``PLAYLIST_*`` environment variables each time an import starts,
    so operators can tune limits without restarting the service. Numeric values
    that cannot be parsed, or that are not finite, fall back to the default
    instead of failing the import.
    """

    allowlist: str = ""
    max_redirects: int = 2
    timeout_ms: float = 20000.0
    max_bytes: int = 5_000_000
    max_channels: int = 20000
    user_agent: str = DEFAULT_USER_AGENT
    channels_chunk_size: int = 500

    model_config = SettingsConfigDict(
        env_prefix="PLAYLIST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "max_redirects",
        "timeout_ms",
        "max_bytes",
        "max_channels",
        "channels_chunk_size",
        mode="before",
    )
    @classmethod
    def fallback_on_non_finite(cls, value, info):
        """Replace unparseable or non-finite numbers with the field default."""
        default = cls.model_fields[info.field_name].default
        env_name = f"PLAYLIST_{info.field_name.upper()}"
        try:
            number = float(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid {env_name}={value!r}, using default {default}")
            return default

        if not math.isfinite(number):
            logger.warning(f"Non-finite {env_name}={value!r}, using default {default}")
            return default

        if isinstance(default, int):
            return int(number)
        return number

    @field_validator("channels_chunk_size")
    @classmethod
    def validate_chunk_size(cls, value: int, info) -> int:
        """Fall back to the default chunk size when the value is not positive."""
        if value <= 0:
            default = cls.model_fields[info.field_name].default
            logger.warning(f"PLAYLIST_CHANNELS_CHUNK_SIZE={value} must be > 0, using default {default}")
            return default
        return value

    @field_validator("user_agent", mode="before")
    @classmethod
    def default_user_agent(cls, value):
        """Empty user agent means the default one."""
        if value is None or not str(value).strip():
            return DEFAULT_USER_AGENT
        return str(value)

    @property
    def allowed_hosts(self) -> list[str]:
        """Parse comma-separated allowlist hostnames."""
        if not self.allowlist.strip():
            return []
        return [host.strip() for host in self.allowlist.split(",") if host.strip()]


settings = CustomSettings()


def setup_logging() -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
