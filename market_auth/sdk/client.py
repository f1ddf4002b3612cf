"""
Market Auth Client - Wires adapters and services together.

Simplifies common auth workflows for application developers.
"""

from typing import Any, Dict, Mapping, Optional

from market_auth.adapters.bcrypt_hasher import BcryptPasswordHasher
from market_auth.adapters.jwt_tokens import JWTTokenCodec
from market_auth.adapters.memory_credential_store import MemoryCredentialStore
from market_auth.adapters.memory_document_store import MemoryDocumentStore
from market_auth.adapters.memory_revocation import MemoryRevocationList
from market_auth.adapters.role_policy import RolePolicyAdapter
from market_auth.config import Settings
from market_auth.domain.principal import Principal
from market_auth.ports.credential_port import CredentialStorePort
from market_auth.ports.document_port import DocumentStorePort
from market_auth.ports.password_port import PasswordHasherPort
from market_auth.ports.policy_port import AccessPolicyPort
from market_auth.ports.revocation_port import RevocationPort
from market_auth.ports.token_port import TokenPort
from market_auth.services.authenticator import Authenticator
from market_auth.services.session_verifier import SessionVerifier
from market_auth.store_calls import DEFAULT_STORE_TIMEOUT


class MarketAuthClient:
    """
    High-level client combining authentication, session verification and policy.

    Example:
        from market_auth import MarketAuthClient
        from market_auth.adapters import JWTTokenCodec, MemoryCredentialStore

        client = MarketAuthClient(
            tokens=JWTTokenCodec(secret="secret"),
            credentials=MemoryCredentialStore(),
        )

        # Register and log in
        await client.register("customer", {...})
        result = await client.login("ann@example.com", "secret-pass")

        # Verify on each request
        principal = await client.verify(f"Bearer {result['token']}")

        # Logout
        client.logout(result["token"])
    """

    def __init__(
        self,
        tokens: TokenPort,
        credentials: Optional[CredentialStorePort] = None,
        documents: Optional[DocumentStorePort] = None,
        hasher: Optional[PasswordHasherPort] = None,
        revocations: Optional[RevocationPort] = None,
        policy: Optional[AccessPolicyPort] = None,
        store_timeout: float = DEFAULT_STORE_TIMEOUT,
    ):
        """
        Initialize client with adapters.

        Args:
            tokens: Token codec (required)
            credentials: Credential store (in-memory by default)
            documents: Document store for entity listings (in-memory by default)
            hasher: Password hasher (bcrypt by default)
            revocations: Revocation list (in-memory by default)
            policy: Access policy (role policy over `credentials` by default)
            store_timeout: Seconds allowed per store call
        """
        self.documents = documents or MemoryDocumentStore()
        self.credentials = credentials or MemoryCredentialStore()
        self.tokens = tokens
        self.hasher = hasher or BcryptPasswordHasher()
        self.revocations = revocations or MemoryRevocationList()
        self.policy = policy or RolePolicyAdapter(self.credentials, store_timeout=store_timeout)
        self.store_timeout = store_timeout

        self.authenticator = Authenticator(
            store=self.credentials,
            hasher=self.hasher,
            tokens=self.tokens,
            revocations=self.revocations,
            store_timeout=store_timeout,
        )
        self.verifier = SessionVerifier(
            tokens=self.tokens,
            revocations=self.revocations,
            store=self.credentials,
            store_timeout=store_timeout,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        credentials: Optional[CredentialStorePort] = None,
        documents: Optional[DocumentStorePort] = None,
    ) -> "MarketAuthClient":
        """
        Build a client from application settings.

        Args:
            settings: Loaded Settings
            credentials: Credential store override
            documents: Document store override

        Returns:
            Configured client
        """
        tokens = JWTTokenCodec(
            secret=settings.jwt_secret.get_secret_value(),
            algorithm=settings.jwt_algorithm,
            issuer=settings.jwt_issuer,
            default_ttl=settings.token_ttl_seconds,
        )
        if credentials is None:
            backing = documents if isinstance(documents, MemoryDocumentStore) else None
            credentials = MemoryCredentialStore(backing)
        return cls(
            tokens=tokens,
            credentials=credentials,
            documents=documents,
            hasher=BcryptPasswordHasher(rounds=settings.bcrypt_rounds),
            store_timeout=settings.store_timeout_seconds,
        )

    async def register(self, role: Any, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """Register a customer, seller or deliverer."""
        return await self.authenticator.register(role, fields)

    async def login(self, email: str, password: str, role: Any = None) -> Dict[str, Any]:
        """Log in and return {"message", "token", "user"}."""
        return await self.authenticator.login(email, password, role)

    def logout(self, token: str) -> bool:
        """
        Log out (revoke the token until it expires).

        Returns:
            True if the token was newly revoked
        """
        return self.authenticator.logout(token)

    async def verify(self, authorization: Optional[str]) -> Principal:
        """
        Verify an Authorization header and return the principal.

        Raises:
            UnauthenticatedError: If the header or token is not acceptable
        """
        return await self.verifier.verify(authorization)

    async def bootstrap_admin(self, settings: Settings) -> bool:
        """
        Provision the configured admin if settings name one.

        Returns:
            True if an admin was created
        """
        if not settings.bootstrap_admin_email or settings.bootstrap_admin_password is None:
            return False
        created = await self.authenticator.ensure_admin(
            name=settings.bootstrap_admin_name,
            email=settings.bootstrap_admin_email,
            password=settings.bootstrap_admin_password.get_secret_value(),
        )
        return created is not None
