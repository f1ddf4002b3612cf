"""
Market Auth - Identity resolution and access control for a marketplace

Hexagonal architecture for authenticating admins, customers, sellers and
deliverers held in disjoint collections, gating routes on role and
approval state, and building safe list queries.

Usage:
    from market_auth import MarketAuthClient
    from market_auth.adapters import JWTTokenCodec, MemoryCredentialStore

    client = MarketAuthClient(tokens=JWTTokenCodec(secret="your-secret"))

    # Authenticate
    result = await client.login("ann@example.com", "password1")

    # Verify on every request
    principal = await client.verify(f"Bearer {result['token']}")
"""

__version__ = "0.1.0"

from market_auth.sdk.client import MarketAuthClient
from market_auth.domain.principal import Principal, Role, ApprovalStatus
from market_auth.domain.session import SessionClaims
from market_auth.domain.query import QuerySpec
from market_auth.errors import MarketAuthError

__all__ = [
    "MarketAuthClient",
    "Principal",
    "Role",
    "ApprovalStatus",
    "SessionClaims",
    "QuerySpec",
    "MarketAuthError",
]
