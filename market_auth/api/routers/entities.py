"""
market_auth.api.routers.entities

Marketplace entity endpoints backed by the document store.

Responsibilities:
- Role-scoped list endpoints built with the query builder.
- By-id reads with ownership checks.
- Product writes gated on approved sellers (or admins).
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Request

from market_auth.api.deps import admin_or_approved, admin_or_role, auth_client, get_principal, optional_principal
from market_auth.api.listing import page_response, query_dict
from market_auth.api.schemas import ProductRequest, ProductUpdate
from market_auth.domain.principal import Principal, Role
from market_auth.domain.query import ListingSpec
from market_auth.errors import NotFoundError
from market_auth.resources import DELIVERIES, MY_REVIEWS, ORDERS, PAYMENTS, PRODUCTS, REVIEWS
from market_auth.sdk.client import MarketAuthClient
from market_auth.services.query_builder import build_query
from market_auth.store_calls import bounded

router = APIRouter(tags=["entities"])


async def _listing(
    client: MarketAuthClient,
    request: Request,
    collection: str,
    listing: ListingSpec,
    principal: Optional[Principal],
) -> dict[str, Any]:
    spec = build_query(query_dict(request.query_params), listing, principal)
    total = await bounded(client.documents.count(collection, spec.filter), client.store_timeout, operation="count")
    items = await bounded(
        client.documents.find(
            collection,
            spec.filter,
            sort=spec.sort.to_dict(),
            skip=spec.pagination.skip,
            limit=spec.pagination.limit,
        ),
        client.store_timeout,
        operation="find",
    )
    return page_response(items, total, spec.pagination)


async def _get(client: MarketAuthClient, collection: str, doc_id: str, label: str) -> dict[str, Any]:
    doc = await bounded(client.documents.get(collection, doc_id), client.store_timeout, operation="get")
    if doc is None:
        raise NotFoundError(f"{label.capitalize()} not found")
    return doc


# --- products -----------------------------------------------------------------


@router.get("/products")
async def list_products(
    request: Request,
    principal: Optional[Principal] = Depends(optional_principal),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    return await _listing(client, request, "products", PRODUCTS, principal)


@router.get("/products/{product_id}")
async def get_product(
    product_id: str,
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    return {"success": True, "product": await _get(client, "products", product_id, "product")}


@router.post("/products", status_code=201)
async def create_product(
    body: ProductRequest,
    principal: Principal = Depends(admin_or_approved(Role.SELLER)),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    document = body.model_dump()
    document["seller_id"] = principal.id
    product = await bounded(client.documents.insert("products", document), client.store_timeout, operation="insert")
    return {"success": True, "message": "Product created successfully", "product": product}


@router.put("/products/{product_id}")
async def update_product(
    product_id: str,
    body: ProductUpdate,
    principal: Principal = Depends(admin_or_approved(Role.SELLER)),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    product = await _get(client, "products", product_id, "product")
    client.policy.ensure_owner(principal, product.get("seller_id"), resource="product")
    changes = body.model_dump(exclude_unset=True)
    updated = await bounded(
        client.documents.update("products", product_id, changes), client.store_timeout, operation="update"
    )
    if updated is None:
        raise NotFoundError("Product not found")
    return {"success": True, "message": "Product updated successfully", "product": updated}


@router.delete("/products/{product_id}")
async def delete_product(
    product_id: str,
    principal: Principal = Depends(admin_or_approved(Role.SELLER)),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    product = await _get(client, "products", product_id, "product")
    client.policy.ensure_owner(principal, product.get("seller_id"), resource="product")
    await bounded(client.documents.delete("products", product_id), client.store_timeout, operation="delete")
    return {"success": True, "message": "Product deleted successfully"}


# --- orders -------------------------------------------------------------------


@router.get("/orders")
async def list_orders(
    request: Request,
    principal: Principal = Depends(get_principal),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    return await _listing(client, request, "orders", ORDERS, principal)


@router.get("/orders/{order_id}")
async def get_order(
    order_id: str,
    principal: Principal = Depends(get_principal),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    order = await _get(client, "orders", order_id, "order")
    client.policy.ensure_owner(principal, _order_owner(order, principal), resource="order")
    return {"success": True, "order": order}


def _order_owner(order: dict[str, Any], principal: Principal) -> Optional[str]:
    # Owning key depends on who is asking
    if principal.role == Role.SELLER:
        return principal.id if principal.id in (order.get("seller_ids") or []) else None
    if principal.role == Role.DELIVERER:
        return order.get("deliverer_id")
    return order.get("customer_id")


# --- payments -----------------------------------------------------------------


@router.get("/payments")
async def list_payments(
    request: Request,
    principal: Principal = Depends(admin_or_role(Role.CUSTOMER)),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    return await _listing(client, request, "payments", PAYMENTS, principal)


@router.get("/payments/{payment_id}")
async def get_payment(
    payment_id: str,
    principal: Principal = Depends(get_principal),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    payment = await _get(client, "payments", payment_id, "payment")
    client.policy.ensure_owner(principal, payment.get("customer_id"), resource="payment")
    return {"success": True, "payment": payment}


# --- reviews ------------------------------------------------------------------


@router.get("/reviews")
async def list_reviews(
    request: Request,
    principal: Optional[Principal] = Depends(optional_principal),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    mine = str(request.query_params.get("my_reviews", "")).lower() == "true"
    listing = MY_REVIEWS if mine else REVIEWS
    return await _listing(client, request, "reviews", listing, principal)


# --- deliveries ---------------------------------------------------------------


@router.get("/deliveries")
async def list_deliveries(
    request: Request,
    principal: Principal = Depends(admin_or_role(Role.DELIVERER, Role.CUSTOMER)),
    client: MarketAuthClient = Depends(auth_client),
) -> dict[str, Any]:
    return await _listing(client, request, "deliveries", DELIVERIES, principal)
