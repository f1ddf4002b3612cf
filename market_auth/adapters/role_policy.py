"""
Role Policy Adapter - Role, approval and ownership gates.

Maps route requirements onto the principal's role, re-reading seller and
deliverer approval state from the credential store on every evaluation.
"""

from typing import Optional

from market_auth.domain.credential import ApprovableRecord
from market_auth.domain.principal import Principal, Role
from market_auth.errors import ForbiddenError, NotFoundError
from market_auth.observability import get_logger
from market_auth.ports.credential_port import CredentialStorePort
from market_auth.ports.policy_port import (
    AccessPolicyPort,
    Decision,
    Gate,
    PolicyDecision,
    Requirement,
)
from market_auth.store_calls import DEFAULT_STORE_TIMEOUT, bounded

log = get_logger(__name__)


class RolePolicyAdapter(AccessPolicyPort):
    """
    Role-based access policy.

    Gates:
    - ROLE: principal.role must be one of the listed roles
    - APPROVED: role match, then a fresh store read; the record must be
      approved and active
    - ADMIN_OR_ROLE / ADMIN_OR_APPROVED: admin passes immediately,
      everyone else falls through to ROLE / APPROVED

    Approval state is never cached on the principal or in the token, so a
    seller whose approval is revoked loses access on the next request.
    """

    def __init__(self, store: CredentialStorePort, store_timeout: float = DEFAULT_STORE_TIMEOUT):
        """
        Initialize role policy.

        Args:
            store: Credential store used for approval re-checks
            store_timeout: Seconds allowed per store lookup
        """
        self._store = store
        self._timeout = store_timeout

    async def evaluate(self, principal: Principal, requirement: Requirement) -> PolicyDecision:
        """Evaluate a route requirement."""
        gate = requirement.gate

        # Admin short-circuits every admin_or_* gate
        if gate in (Gate.ADMIN_OR_ROLE, Gate.ADMIN_OR_APPROVED) and principal.is_admin:
            return _allow(f"Role {principal.role.value} bypasses {gate.value}")

        if principal.role not in requirement.roles:
            return _deny(_role_denied_reason(principal, requirement))

        if gate in (Gate.ROLE, Gate.ADMIN_OR_ROLE):
            return _allow(f"Role {principal.role.value} authorized")

        return await self._approval_decision(principal)

    async def enforce(self, principal: Principal, requirement: Requirement) -> Principal:
        """Evaluate and raise on deny."""
        decision = await self.evaluate(principal, requirement)
        if decision.allowed:
            return principal

        log.info(
            "access_denied",
            principal_id=principal.id,
            role=principal.role.value,
            gate=requirement.gate.value,
            reason=decision.reason,
        )
        if decision.status_code == 404:
            raise NotFoundError(decision.reason)
        raise ForbiddenError(decision.reason)

    def ensure_owner(self, principal: Principal, owner_id: Optional[str], resource: str = "resource") -> None:
        """Non-admins may only touch records they own."""
        if principal.is_admin or principal.owns(owner_id):
            return
        log.info("ownership_denied", principal_id=principal.id, role=principal.role.value, resource=resource)
        raise ForbiddenError(f"Not authorized to access this {resource}")

    # Convenience wrappers mirroring the route-level helpers

    async def require_role(self, principal: Principal, *roles: Role) -> Principal:
        return await self.enforce(principal, Requirement.role(*roles))

    async def require_approved(self, principal: Principal, role: Role) -> Principal:
        return await self.enforce(principal, Requirement.approved(role))

    async def admin_or_role(self, principal: Principal, *roles: Role) -> Principal:
        return await self.enforce(principal, Requirement.admin_or_role(*roles))

    async def admin_or_approved(self, principal: Principal, role: Role) -> Principal:
        return await self.enforce(principal, Requirement.admin_or_approved(role))

    async def _approval_decision(self, principal: Principal) -> PolicyDecision:
        label = principal.role.value
        record = await bounded(
            self._store.find_by_id(principal.role, principal.id),
            self._timeout,
            operation="approval_check",
        )

        if record is None:
            return PolicyDecision(Decision.DENY, f"{label.capitalize()} not found", status_code=404)

        if isinstance(record, ApprovableRecord) and not record.is_approved:
            return _deny(
                f"Your {label} account is pending approval. Please wait for admin approval."
            )

        if not record.active:
            return _deny(f"Your {label} account is deactivated")

        return _allow(f"Approved {label}")


def _allow(reason: str) -> PolicyDecision:
    return PolicyDecision(decision=Decision.ALLOW, reason=reason)


def _deny(reason: str) -> PolicyDecision:
    return PolicyDecision(decision=Decision.DENY, reason=reason)


def _role_denied_reason(principal: Principal, requirement: Requirement) -> str:
    required = " or ".join(sorted(r.value for r in requirement.roles))
    if requirement.gate in (Gate.ADMIN_OR_ROLE, Gate.ADMIN_OR_APPROVED):
        return f"Access denied. Required role: {required} or admin"
    return f"User role '{principal.role.value}' is not authorized to access this route (requires {required})"
