from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Header
from starlette.status import HTTP_201_CREATED

from market_auth.api.deps import auth_client, get_principal
from market_auth.api.schemas import LoginRequest, RegisterRequest
from market_auth.domain.principal import Principal
from market_auth.sdk.client import MarketAuthClient
from market_auth.services.session_verifier import extract_bearer

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    result = await client.register(body.role, body.registration_fields())
    return {"success": True, **result}


@router.post("/login")
async def login(
    body: LoginRequest,
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    result = await client.login(body.email, body.password, body.role)
    return {"success": True, **result}


@router.post("/logout")
async def logout(
    authorization: Optional[str] = Header(default=None),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    # Always succeeds, with or without a readable token.
    token = extract_bearer(authorization)
    if token:
        client.logout(token)
    return {"success": True, "message": "Logged out successfully"}


@router.get("/me")
async def me(
    principal: Principal = Depends(get_principal),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    user = await client.authenticator.profile(principal)
    return {"success": True, "user": user}
