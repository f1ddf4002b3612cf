"""
JWT Token Adapter - Implements TokenPort with signed JWTs.
"""

import secrets
from datetime import datetime, timezone
from typing import Optional

import jwt

from market_auth.domain.principal import Role
from market_auth.domain.session import SessionClaims
from market_auth.errors import UnauthenticatedError
from market_auth.ports.token_port import TokenPort

DEFAULT_TOKEN_TTL = 30 * 24 * 3600  # 30 days


class JWTTokenCodec(TokenPort):
    """
    JWT-based session tokens.

    Uses PyJWT for token creation and verification. Tokens carry only
    sub (principal id), role, iat, exp, iss and a random jti so two
    tokens issued in the same second differ. Revocation lives in a
    separate RevocationPort.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        issuer: str = "market-auth",
        default_ttl: int = DEFAULT_TOKEN_TTL,
    ):
        """
        Initialize JWT codec.

        Args:
            secret: JWT signing secret
            algorithm: JWT algorithm (default HS256)
            issuer: Token issuer claim
            default_ttl: Lifetime in seconds when create_token gets none
        """
        if not secret:
            raise ValueError("JWT secret must be non-empty")
        self._secret = secret
        self._algorithm = algorithm
        self._issuer = issuer
        self._default_ttl = default_ttl

    @property
    def default_ttl(self) -> int:
        return self._default_ttl

    def create_token(self, principal_id: str, role: Role, expires_in: Optional[int] = None) -> str:
        """
        Create a JWT for a principal.

        Args:
            principal_id: Record id
            role: Principal role
            expires_in: Token expiration in seconds

        Returns:
            JWT token string
        """
        claims = SessionClaims.issue(
            principal_id=principal_id,
            role=role,
            ttl=self._default_ttl if expires_in is None else expires_in,
        )
        payload = {
            "sub": claims.principal_id,
            "role": claims.role.value,
            "iat": claims.issued_at,
            "exp": claims.expires_at,
            "iss": self._issuer,
            "jti": secrets.token_hex(8),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> SessionClaims:
        """
        Verify a JWT and return its claims.

        Raises:
            UnauthenticatedError: Bad signature, expired, wrong issuer,
                missing claims or unknown role
        """
        if not token:
            raise UnauthenticatedError("missing token")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                options={"require": ["sub", "role", "iat", "exp", "iss"]},
            )
        except jwt.ExpiredSignatureError:
            raise UnauthenticatedError("token expired")
        except jwt.InvalidTokenError:
            raise UnauthenticatedError("invalid token")

        try:
            return SessionClaims(
                principal_id=str(payload["sub"]),
                role=Role(payload["role"]),
                issued_at=_from_timestamp(payload["iat"]),
                expires_at=_from_timestamp(payload["exp"]),
            )
        except (KeyError, ValueError, TypeError):
            raise UnauthenticatedError("invalid token claims")

    def peek_expiry(self, token: str) -> Optional[datetime]:
        """Read exp without verifying signature (used only for revocation TTL)."""
        try:
            payload = jwt.decode(token, options={"verify_signature": False})
            return _from_timestamp(payload["exp"])
        except (jwt.InvalidTokenError, KeyError, ValueError, TypeError):
            return None


def _from_timestamp(value) -> datetime:
    return datetime.fromtimestamp(int(value), tz=timezone.utc)
