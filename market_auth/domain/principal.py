"""
Principal Domain Model - The identity attached to a request.
"""

from dataclasses import dataclass
from enum import Enum


class Role(Enum):
    """Marketplace roles. Each maps to its own identity collection."""
    ADMIN = "admin"              # Platform operators, bypass approval gates
    CUSTOMER = "customer"        # Buyers, usable immediately after signup
    SELLER = "seller"            # Shops, need admin approval
    DELIVERER = "deliverer"      # Couriers, need admin approval

    @property
    def needs_approval(self) -> bool:
        return self in (Role.SELLER, Role.DELIVERER)

    @classmethod
    def parse(cls, value) -> "Role":
        """
        Parse a role from user input.

        Raises:
            ValueError: If value is not a known role
        """
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


# Roles allowed to self-register. Admins are provisioned, never registered.
SELF_REGISTERING_ROLES = frozenset({Role.CUSTOMER, Role.SELLER, Role.DELIVERER})


class ApprovalStatus(Enum):
    """Seller/deliverer approval lifecycle."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Principal:
    """
    Authenticated identity for the current request.

    Domain rules:
    - Rebuilt on every request from the token claims plus a store re-fetch
    - Approval status is deliberately not carried here; it is read fresh
      by the policy evaluator when a route needs it
    """
    id: str
    role: Role
    active: bool = True

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def has_role(self, *roles: Role) -> bool:
        """Check if the principal holds one of the given roles."""
        return self.role in roles

    def owns(self, owner_id) -> bool:
        """Check if a record's owning key points at this principal."""
        return owner_id is not None and str(owner_id) == self.id

    def to_dict(self) -> dict:
        return {"id": self.id, "role": self.role.value, "active": self.active}
