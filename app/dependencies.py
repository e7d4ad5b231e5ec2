"""
Request dependencies

Provides the authenticated principal and the playlist fetcher to route
handlers. Authentication itself happens upstream: the gateway verifies the
caller's token and forwards the resulting identity as headers. Tests override
these dependencies through ``app.dependency_overrides``.
"""
import logging
from typing import Annotated, Callable

from fastapi import Depends, Header, HTTPException

from app.schemas import Principal
from app.services.playlist_fetcher import PlaylistFetcher


logger = logging.getLogger(__name__)


async def get_current_principal(
    x_tenant_id: Annotated[str | None, Header()] = None,
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[str | None, Header()] = None,
) -> Principal:
    """
    Build the caller's principal from forwarded identity headers.

    Raises:
        HTTPException: 401 when the tenant header is missing or malformed
    """
    try:
        tenant_id = int(x_tenant_id) if x_tenant_id else None
        user_id = int(x_user_id) if x_user_id else None
    except ValueError:
        logger.warning("Rejected request with malformed identity headers")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    if tenant_id is None:
        raise HTTPException(status_code=401, detail="Missing credentials")

    return Principal(
        user_id=user_id,
        tenant_id=tenant_id,
        role=(x_user_role or "user").strip().lower(),
    )


def require_role(*roles: str) -> Callable:
    """
    Dependency factory restricting a route to the given roles.

    Args:
        roles: Accepted role names

    Returns:
        Dependency resolving to the principal when its role is accepted
    """
    accepted = {role.lower() for role in roles}

    async def dependency(
        principal: Annotated[Principal, Depends(get_current_principal)],
    ) -> Principal:
        if principal.role not in accepted:
            logger.warning(
                f"Access denied for tenant {principal.tenant_id} user {principal.user_id} "
                f"(role={principal.role})"
            )
            raise HTTPException(status_code=403, detail="Access denied")
        return principal

    return dependency


def get_playlist_fetcher() -> PlaylistFetcher:
    """Fetcher used by import requests"""
    return PlaylistFetcher()
