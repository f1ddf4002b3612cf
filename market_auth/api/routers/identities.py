"""
market_auth.api.routers.identities

Customer, seller and deliverer listings. Non-admin callers are scoped to
their own record by the listing's role scope.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request

from market_auth.api.deps import admin_or_role, auth_client
from market_auth.api.listing import page_response, query_dict
from market_auth.domain.principal import Principal, Role
from market_auth.domain.query import ListingSpec
from market_auth.resources import CUSTOMERS, DELIVERERS, PUBLIC_SELLERS, SELLERS
from market_auth.sdk.client import MarketAuthClient
from market_auth.services.query_builder import build_query

router = APIRouter(tags=["identities"])


async def _listing(
    client: MarketAuthClient,
    request: Request,
    role: Role,
    listing: ListingSpec,
    principal: Principal | None,
) -> dict[str, Any]:
    spec = build_query(query_dict(request.query_params), listing, principal)
    records, total = await client.authenticator.search(role, spec)
    return page_response([r.to_public() for r in records], total, spec.pagination)


async def _one(client: MarketAuthClient, role: Role, record_id: str, principal: Principal) -> dict[str, Any]:
    client.policy.ensure_owner(principal, record_id, resource=role.value)
    record = await client.authenticator.get_record(role, record_id)
    return {"success": True, "user": record.to_public()}


@router.get("/customers")
async def list_customers(
    request: Request,
    principal: Principal = Depends(admin_or_role(Role.CUSTOMER)),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    return await _listing(client, request, Role.CUSTOMER, CUSTOMERS, principal)


@router.get("/customers/{record_id}")
async def get_customer(
    record_id: str,
    principal: Principal = Depends(admin_or_role(Role.CUSTOMER)),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    return await _one(client, Role.CUSTOMER, record_id, principal)


@router.get("/sellers/public/approved")
async def list_public_sellers(
    request: Request,
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    return await _listing(client, request, Role.SELLER, PUBLIC_SELLERS, None)


@router.get("/sellers")
async def list_sellers(
    request: Request,
    principal: Principal = Depends(admin_or_role(Role.SELLER)),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    return await _listing(client, request, Role.SELLER, SELLERS, principal)


@router.get("/sellers/{record_id}")
async def get_seller(
    record_id: str,
    principal: Principal = Depends(admin_or_role(Role.SELLER)),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    return await _one(client, Role.SELLER, record_id, principal)


@router.get("/deliverers")
async def list_deliverers(
    request: Request,
    principal: Principal = Depends(admin_or_role(Role.DELIVERER)),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    return await _listing(client, request, Role.DELIVERER, DELIVERERS, principal)


@router.get("/deliverers/{record_id}")
async def get_deliverer(
    record_id: str,
    principal: Principal = Depends(admin_or_role(Role.DELIVERER)),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    return await _one(client, Role.DELIVERER, record_id, principal)
