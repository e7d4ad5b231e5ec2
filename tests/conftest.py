import os
import tempfile

# Keep the settings singleton away from the working directory
os.environ.setdefault("DATABASE_PATH", os.path.join(tempfile.mkdtemp(prefix="playlist-tests-"), "default.db"))

import pytest

from app.database import close_db, init_db, session_scope
from app.models import Tenant
from app.schemas import Principal
from app.services.playlist_types import FetchOptions


PUBLIC_DNS = {
    "playlists.example.com": ["93.184.216.34"],
    "cdn.example.com": ["93.184.216.35", "2606:2800:220:1::1"],
    "internal.example.com": ["192.168.1.20"],
    "mixed.example.com": ["93.184.216.36", "10.0.0.7"],
}


class FakeResolver:
    """Resolves hostnames from a static table, recording every lookup."""

    def __init__(self, table: dict[str, list[str]] | None = None) -> None:
        self.table = dict(PUBLIC_DNS if table is None else table)
        self.calls: list[str] = []

    async def __call__(self, hostname: str) -> list[str]:
        self.calls.append(hostname)
        if hostname not in self.table:
            raise OSError(f"Name or service not known: {hostname}")
        return list(self.table[hostname])


class StubFetcher:
    """Fetcher returning canned playlist text."""

    def __init__(self, content: str) -> None:
        self.content = content
        self.requests: list[tuple[str, FetchOptions]] = []

    async def fetch_playlist(self, url: str, options: FetchOptions) -> str:
        self.requests.append((url, options))
        return self.content


@pytest.fixture(autouse=True)
def clean_playlist_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("PLAYLIST_"):
            monkeypatch.delenv(key)


@pytest.fixture
def fake_resolver() -> FakeResolver:
    return FakeResolver()


@pytest.fixture
async def database(tmp_path):
    await init_db(str(tmp_path / "playlists.db"))
    yield
    await close_db()


@pytest.fixture
async def tenants(database) -> list[int]:
    async with session_scope() as session:
        rows = [Tenant(name="Acme IPTV"), Tenant(name="Other Reseller")]
        session.add_all(rows)
        await session.flush()
        tenant_ids = [row.id for row in rows]
    return tenant_ids


@pytest.fixture
def admin(tenants) -> Principal:
    return Principal(user_id=1, tenant_id=tenants[0], role="admin")


@pytest.fixture
def other_admin(tenants) -> Principal:
    return Principal(user_id=2, tenant_id=tenants[1], role="admin")
