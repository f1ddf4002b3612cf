"""
Session Domain Model - Claims carried by a signed session token.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from market_auth.domain.principal import Role


@dataclass(frozen=True)
class SessionClaims:
    """
    Claims bound into a session token.

    Domain rules:
    - Immutable once issued
    - Only principal_id and role are trusted downstream; everything else
      about the principal is re-read from its store on each request
    - Invalidated only by revocation or natural expiry
    """
    principal_id: str
    role: Role
    issued_at: datetime
    expires_at: datetime

    @classmethod
    def issue(
        cls,
        principal_id: str,
        role: Role,
        ttl: int,
        now: Optional[datetime] = None,
    ) -> "SessionClaims":
        """
        Build claims for a new token.

        Args:
            principal_id: Record id of the principal
            role: Collection the principal lives in
            ttl: Lifetime in seconds
            now: Issue time (defaults to current UTC time)

        Returns:
            New claims
        """
        now = now or datetime.now(timezone.utc)
        return cls(
            principal_id=principal_id,
            role=role,
            issued_at=now,
            expires_at=now + timedelta(seconds=ttl),
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at

    def remaining_seconds(self, now: Optional[datetime] = None) -> int:
        """Seconds until natural expiry (never negative)."""
        now = now or datetime.now(timezone.utc)
        return max(0, int((self.expires_at - now).total_seconds()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "principal_id": self.principal_id,
            "role": self.role.value,
            "issued_at": self.issued_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }
