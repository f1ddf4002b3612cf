"""
Password Port - One-way hash + verify capability.

Implementations:
- BcryptPasswordHasher: bcrypt with configurable cost
"""

from abc import ABC, abstractmethod


class PasswordHasherPort(ABC):
    """Port: Hash passwords for storage and verify them at login."""

    @abstractmethod
    def hash(self, plain_password: str) -> str:
        """Hash a plain-text password. Never store plain passwords."""
        pass

    @abstractmethod
    def verify(self, plain_password: str, hashed: str) -> bool:
        """Verify a plain password against a stored hash."""
        pass
