"""
Session Verifier - Resolves a bearer token into a Principal.
"""

from typing import Optional

from market_auth.domain.principal import Principal
from market_auth.errors import UnauthenticatedError
from market_auth.observability import get_logger
from market_auth.ports.credential_port import CredentialStorePort
from market_auth.ports.revocation_port import RevocationPort
from market_auth.ports.token_port import TokenPort
from market_auth.store_calls import DEFAULT_STORE_TIMEOUT, bounded

log = get_logger(__name__)

BEARER_PREFIX = "bearer "


def extract_bearer(authorization: Optional[str]) -> Optional[str]:
    """
    Pull the token out of an Authorization header.

    Returns:
        Token string, or None if the header is absent or not a Bearer header
    """
    if not authorization or not isinstance(authorization, str):
        return None
    if not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


class SessionVerifier:
    """
    Per-request session verification.

    Steps: extract bearer, verify signature and expiry, check revocation,
    re-fetch the record by (role, id), require it to be active. The record
    is re-read on every request so deactivation takes effect immediately.

    Every failure raises UnauthenticatedError with the same client-facing
    message. The specific reason is logged only.
    """

    def __init__(
        self,
        tokens: TokenPort,
        revocations: RevocationPort,
        store: CredentialStorePort,
        store_timeout: float = DEFAULT_STORE_TIMEOUT,
    ):
        self._tokens = tokens
        self._revocations = revocations
        self._store = store
        self._timeout = store_timeout

    async def verify(self, authorization: Optional[str]) -> Principal:
        """
        Verify an Authorization header.

        Args:
            authorization: Raw header value ("Bearer <token>")

        Returns:
            Principal for the token's record

        Raises:
            UnauthenticatedError: Any verification step failed
            StoreUnavailable: Record re-fetch timed out
        """
        token = extract_bearer(authorization)
        if token is None:
            raise self._reject("missing bearer token")
        return await self.verify_token(token)

    async def verify_token(self, token: str) -> Principal:
        """Verify a bare token (no header parsing)."""
        try:
            claims = self._tokens.decode(token)
        except UnauthenticatedError as e:
            raise self._reject(e.reason)

        if self._revocations.is_revoked(token):
            raise self._reject("token revoked", principal_id=claims.principal_id)

        record = await bounded(
            self._store.find_by_id(claims.role, claims.principal_id),
            self._timeout,
            operation="session_refetch",
        )
        if record is None:
            raise self._reject("principal not found", principal_id=claims.principal_id)
        if not record.active:
            raise self._reject("principal inactive", principal_id=claims.principal_id)

        return Principal(id=record.id, role=record.role, active=record.active)

    def _reject(self, reason: str, principal_id: Optional[str] = None) -> UnauthenticatedError:
        log.info("session_rejected", reason=reason, principal_id=principal_id)
        return UnauthenticatedError(reason)
