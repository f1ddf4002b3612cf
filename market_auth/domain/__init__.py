"""
Domain Models - Pure business entities.

No infrastructure dependencies. Domain logic only.
"""

from market_auth.domain.principal import Principal, Role, ApprovalStatus
from market_auth.domain.credential import (
    CredentialRecord,
    AdminRecord,
    CustomerRecord,
    SellerRecord,
    DelivererRecord,
    RECORD_TYPES,
    LOGIN_PROBE_ORDER,
)
from market_auth.domain.session import SessionClaims
from market_auth.domain.query import FieldKind, ListingSpec, QuerySpec, SortSpec, SortDirection, Pagination

__all__ = [
    "Principal",
    "Role",
    "ApprovalStatus",
    "CredentialRecord",
    "AdminRecord",
    "CustomerRecord",
    "SellerRecord",
    "DelivererRecord",
    "RECORD_TYPES",
    "LOGIN_PROBE_ORDER",
    "SessionClaims",
    "FieldKind",
    "ListingSpec",
    "QuerySpec",
    "SortSpec",
    "SortDirection",
    "Pagination",
]
