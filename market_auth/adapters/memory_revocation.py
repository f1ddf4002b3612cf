"""
Memory Revocation Adapter - In-process revoked-token set with TTL eviction.
"""

import threading
from datetime import datetime, timezone
from typing import Dict, Optional

from market_auth.ports.revocation_port import RevocationPort


class MemoryRevocationList(RevocationPort):
    """
    In-memory revocation list.

    Entries are keyed by token and dropped once the token would have
    expired anyway. Guarded by a lock so logout and verification may run
    concurrently from the event loop and worker threads.

    WARNING: Single process only. Revocations are lost on restart and are
    not shared between nodes.
    """

    def __init__(self, sweep_every: int = 256):
        """
        Initialize in-memory storage.

        Args:
            sweep_every: Run cleanup_expired after this many revocations
        """
        self._entries: Dict[str, datetime] = {}
        self._lock = threading.Lock()
        self._sweep_every = max(1, sweep_every)
        self._since_sweep = 0

    def revoke(self, token: str, expires_at: datetime) -> bool:
        """Add a token to the revocation list."""
        if not token:
            return False

        with self._lock:
            if token in self._entries:
                return False
            self._entries[token] = expires_at
            self._since_sweep += 1
            sweep = self._since_sweep >= self._sweep_every

        if sweep:
            self.cleanup_expired()
        return True

    def is_revoked(self, token: str) -> bool:
        """Check a token against the list, evicting it if past expiry."""
        now = _now()
        with self._lock:
            expires_at = self._entries.get(token)
            if expires_at is None:
                return False
            if expires_at <= now:
                # Past natural expiry; signature check rejects it anyway
                del self._entries[token]
                return False
            return True

    def cleanup_expired(self, now: Optional[datetime] = None) -> int:
        """Drop entries past their natural expiry."""
        now = now or _now()
        with self._lock:
            expired = [t for t, exp in self._entries.items() if exp <= now]
            for token in expired:
                del self._entries[token]
            self._since_sweep = 0
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def _now() -> datetime:
    return datetime.now(timezone.utc)
