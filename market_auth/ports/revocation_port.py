"""
Revocation Port - Interface for the token revocation list.

Implementations:
- MemoryRevocationList: In-process TTL set (single node only)
"""

from abc import ABC, abstractmethod
from datetime import datetime


class RevocationPort(ABC):
    """Port: Remember tokens invalidated before their natural expiry."""

    @abstractmethod
    def revoke(self, token: str, expires_at: datetime) -> bool:
        """
        Mark a token as revoked.

        Args:
            token: Raw token string
            expires_at: Natural expiry; the entry may be dropped after it

        Returns:
            True if newly revoked, False if already revoked
        """
        pass

    @abstractmethod
    def is_revoked(self, token: str) -> bool:
        """
        Check if a token was revoked.

        Args:
            token: Raw token string

        Returns:
            True if revoked and not yet past natural expiry
        """
        pass

    @abstractmethod
    def cleanup_expired(self) -> int:
        """
        Drop entries past their natural expiry.

        Returns:
            Number of entries removed
        """
        pass
