"""
Access Policy Port - Route-level authorization.

Requirements are small declarative values evaluated against a Principal.
Some of them (approval gates) need a fresh store read, so evaluation is async.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional

from market_auth.domain.principal import Principal, Role


class Decision(Enum):
    """Authorization decision."""
    ALLOW = "allow"
    DENY = "deny"


class Gate(Enum):
    """Kinds of requirement a route can declare."""
    ROLE = "role"                        # principal.role in roles
    APPROVED = "approved"                # role match + approved + active
    ADMIN_OR_ROLE = "admin_or_role"      # admin, else ROLE
    ADMIN_OR_APPROVED = "admin_or_approved"  # admin, else APPROVED


@dataclass(frozen=True)
class Requirement:
    """
    What a route requires of the caller.

    Examples:
    - Requirement.role(Role.ADMIN)
    - Requirement.approved(Role.SELLER)
    - Requirement.admin_or_approved(Role.SELLER)
    """
    gate: Gate
    roles: FrozenSet[Role]

    @classmethod
    def role(cls, *roles: Role) -> "Requirement":
        return cls(gate=Gate.ROLE, roles=frozenset(roles))

    @classmethod
    def approved(cls, role: Role) -> "Requirement":
        return cls(gate=Gate.APPROVED, roles=frozenset({role}))

    @classmethod
    def admin_or_role(cls, *roles: Role) -> "Requirement":
        return cls(gate=Gate.ADMIN_OR_ROLE, roles=frozenset(roles))

    @classmethod
    def admin_or_approved(cls, role: Role) -> "Requirement":
        return cls(gate=Gate.ADMIN_OR_APPROVED, roles=frozenset({role}))


@dataclass(frozen=True)
class PolicyDecision:
    """
    Authorization decision with the reason shown to the caller on deny.
    """
    decision: Decision
    reason: str
    status_code: int = 403

    @property
    def allowed(self) -> bool:
        return self.decision == Decision.ALLOW


class AccessPolicyPort(ABC):
    """
    Port: Decide whether a principal satisfies a route requirement.

    Admin short-circuits every admin_or_* gate before any store lookup.
    """

    @abstractmethod
    async def evaluate(self, principal: Principal, requirement: Requirement) -> PolicyDecision:
        """
        Evaluate a requirement.

        Args:
            principal: Authenticated principal
            requirement: Route requirement

        Returns:
            PolicyDecision (never raises for a plain deny)
        """
        pass

    @abstractmethod
    async def enforce(self, principal: Principal, requirement: Requirement) -> Principal:
        """
        Evaluate and raise on deny.

        Returns:
            The principal, for dependency chaining

        Raises:
            ForbiddenError: Role, approval or activation check failed
            NotFoundError: Approval gate could not find the principal's record
        """
        pass

    @abstractmethod
    def ensure_owner(self, principal: Principal, owner_id: Optional[str], resource: str = "resource") -> None:
        """
        Require that a non-admin principal owns the record.

        Raises:
            ForbiddenError: owner_id differs from principal.id
        """
        pass
