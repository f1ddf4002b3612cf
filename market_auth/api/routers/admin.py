"""
market_auth.api.routers.admin

Admin-only account management: approval queue and activation.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request

from market_auth.api.deps import auth_client, require_admin
from market_auth.api.listing import page_response, query_dict, role_for
from market_auth.api.schemas import RejectRequest
from market_auth.domain.principal import Principal, Role
from market_auth.resources import DELIVERERS, SELLERS
from market_auth.sdk.client import MarketAuthClient
from market_auth.services.query_builder import build_query

router = APIRouter(prefix="/admin", tags=["admin"])

APPROVABLE = (Role.SELLER, Role.DELIVERER)
LISTINGS = {Role.SELLER: SELLERS, Role.DELIVERER: DELIVERERS}


@router.get("/{collection}/pending")
async def list_pending(
    collection: str,
    request: Request,
    admin: Principal = Depends(require_admin),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    role = role_for(collection, APPROVABLE)
    spec = build_query(query_dict(request.query_params), LISTINGS[role], admin)
    records, total = await client.authenticator.list_pending(role, spec)
    return page_response([r.to_public() for r in records], total, spec.pagination)


@router.put("/{collection}/{record_id}/approve")
async def approve(
    collection: str,
    record_id: str,
    admin: Principal = Depends(require_admin),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    role = role_for(collection, APPROVABLE)
    user = await client.authenticator.approve(role, record_id, admin)
    return {"success": True, "message": f"{role.value.capitalize()} approved successfully", "user": user}


@router.put("/{collection}/{record_id}/reject")
async def reject(
    collection: str,
    record_id: str,
    body: RejectRequest,
    admin: Principal = Depends(require_admin),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    role = role_for(collection, APPROVABLE)
    user = await client.authenticator.reject(role, record_id, body.rejection_reason, admin)
    return {"success": True, "message": f"{role.value.capitalize()} rejected", "user": user}


@router.put("/{collection}/{record_id}/activate")
async def activate(
    collection: str,
    record_id: str,
    admin: Principal = Depends(require_admin),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    role = role_for(collection)
    user = await client.authenticator.set_active(role, record_id, True)
    return {"success": True, "message": f"{role.value.capitalize()} activated", "user": user}


@router.put("/{collection}/{record_id}/deactivate")
async def deactivate(
    collection: str,
    record_id: str,
    admin: Principal = Depends(require_admin),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    role = role_for(collection)
    user = await client.authenticator.set_active(role, record_id, False)
    return {"success": True, "message": f"{role.value.capitalize()} deactivated", "user": user}
