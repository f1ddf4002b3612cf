"""
Adapters - Implementations of ports.

Tokens & Revocation:
- JWTTokenCodec: JWT session tokens
- MemoryRevocationList: In-process revocation list with TTL eviction

Storage:
- MemoryDocumentStore: In-memory document collections (testing, local dev)
- MemoryCredentialStore: The four identity collections on top of it

Passwords:
- BcryptPasswordHasher: bcrypt hashing

Authorization:
- RolePolicyAdapter: Role, approval and ownership gates
"""

# Tokens & Revocation
from market_auth.adapters.jwt_tokens import JWTTokenCodec
from market_auth.adapters.memory_revocation import MemoryRevocationList

# Storage
from market_auth.adapters.memory_document_store import MemoryDocumentStore
from market_auth.adapters.memory_credential_store import MemoryCredentialStore

# Passwords
from market_auth.adapters.bcrypt_hasher import BcryptPasswordHasher

# Authorization
from market_auth.adapters.role_policy import RolePolicyAdapter

__all__ = [
    # Tokens & Revocation
    "JWTTokenCodec",
    "MemoryRevocationList",
    # Storage
    "MemoryDocumentStore",
    "MemoryCredentialStore",
    # Passwords
    "BcryptPasswordHasher",
    # Authorization
    "RolePolicyAdapter",
]
