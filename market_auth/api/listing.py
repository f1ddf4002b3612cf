"""
market_auth.api.listing

Shared helpers for list endpoints.
"""

from __future__ import annotations

from typing import Any, Iterable

from starlette.datastructures import QueryParams

from market_auth.domain.principal import Role
from market_auth.domain.query import Pagination
from market_auth.errors import NotFoundError
from market_auth.services.query_builder import build_page_meta

# URL collection segment -> identity role
COLLECTION_ROLES = {
    "customers": Role.CUSTOMER,
    "sellers": Role.SELLER,
    "deliverers": Role.DELIVERER,
}


def role_for(collection: str, allowed: Iterable[Role] = tuple(COLLECTION_ROLES.values())) -> Role:
    role = COLLECTION_ROLES.get(collection)
    if role is None or role not in allowed:
        raise NotFoundError(f"Unknown collection '{collection}'")
    return role


def query_dict(params: QueryParams) -> dict[str, Any]:
    """Flatten query params; repeated keys become lists."""
    out: dict[str, Any] = {}
    for key in params.keys():
        values = params.getlist(key)
        out[key] = values if len(values) > 1 else values[0]
    return out


def page_response(items: list[Any], total: int, pagination: Pagination) -> dict[str, Any]:
    return {
        "success": True,
        **build_page_meta(total, pagination.page, pagination.limit),
        "items": items,
    }
