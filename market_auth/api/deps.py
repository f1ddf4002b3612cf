"""
market_auth.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Expose the MarketAuthClient stored on app.state.
- Resolve the request principal from the Authorization header.
- Build route-level role / approval gates.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request

from market_auth.domain.principal import Principal, Role
from market_auth.ports.policy_port import Requirement
from market_auth.sdk.client import MarketAuthClient


def auth_client(request: Request) -> MarketAuthClient:
    # Created once in `market_auth.api.app.create_app`.
    return request.app.state.auth  # type: ignore[attr-defined]


async def get_principal(
    authorization: Optional[str] = Header(default=None),
    client: MarketAuthClient = Depends(auth_client),
) -> Principal:
    return await client.verify(authorization)


async def optional_principal(
    authorization: Optional[str] = Header(default=None),
    client: MarketAuthClient = Depends(auth_client),
) -> Optional[Principal]:
    # Anonymous callers are allowed; a header that is present must still verify.
    if not authorization:
        return None
    return await client.verify(authorization)


def require(requirement: Requirement):
    """Dependency factory enforcing a policy requirement."""

    async def _dep(
        principal: Principal = Depends(get_principal),
        client: MarketAuthClient = Depends(auth_client),
    ) -> Principal:
        return await client.policy.enforce(principal, requirement)

    return _dep


def require_roles(*roles: Role):
    return require(Requirement.role(*roles))


def require_approved(role: Role):
    return require(Requirement.approved(role))


def admin_or_role(*roles: Role):
    return require(Requirement.admin_or_role(*roles))


def admin_or_approved(role: Role):
    return require(Requirement.admin_or_approved(role))


require_admin = require_roles(Role.ADMIN)
