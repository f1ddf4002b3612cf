"""
Token Port - Interface for issuing and decoding session tokens.

Implementations:
- JWTTokenCodec: Signed JWT tokens (PyJWT)
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from market_auth.domain.principal import Role
from market_auth.domain.session import SessionClaims


class TokenPort(ABC):
    """Port: Sign and verify session tokens."""

    @property
    @abstractmethod
    def default_ttl(self) -> int:
        """Token lifetime in seconds when create_token is given none."""
        pass

    @abstractmethod
    def create_token(self, principal_id: str, role: Role, expires_in: Optional[int] = None) -> str:
        """
        Create a signed token.

        Args:
            principal_id: Record id of the principal
            role: Role / collection of the principal
            expires_in: Lifetime in seconds (codec default when None)

        Returns:
            Token string
        """
        pass

    @abstractmethod
    def decode(self, token: str) -> SessionClaims:
        """
        Verify signature and expiry and return the claims.

        Raises:
            UnauthenticatedError: On any cryptographic, expiry or claim failure
        """
        pass

    @abstractmethod
    def peek_expiry(self, token: str) -> Optional[datetime]:
        """
        Read the expiry of a token without verifying it.

        Returns:
            Expiry datetime, or None if the token is unreadable
        """
        pass
