"""
Authenticator - Registration, login, logout and account administration.

Coordinates the credential store, password hasher, token codec and
revocation list. All store calls are bounded by the configured timeout.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, TypeVar

from market_auth.domain.credential import (
    ApprovableRecord,
    CredentialRecord,
    LOGIN_PROBE_ORDER,
    normalize_email,
)
from market_auth.domain.principal import ApprovalStatus, Principal, Role
from market_auth.domain.query import QuerySpec
from market_auth.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    PendingApprovalError,
    ValidationError,
)
from market_auth.observability import get_logger
from market_auth.ports.credential_port import CredentialStorePort
from market_auth.ports.password_port import PasswordHasherPort
from market_auth.ports.revocation_port import RevocationPort
from market_auth.ports.token_port import TokenPort
from market_auth.services.validation import (
    parse_role,
    validate_admin,
    validate_login,
    validate_registration,
)
from market_auth.store_calls import DEFAULT_STORE_TIMEOUT, bounded

log = get_logger(__name__)

T = TypeVar("T")

APPROVABLE_ROLES = frozenset({Role.SELLER, Role.DELIVERER})
MANAGED_ROLES = frozenset({Role.CUSTOMER, Role.SELLER, Role.DELIVERER})

REGISTERED_MESSAGES = {
    Role.CUSTOMER: "Customer registered successfully",
    Role.SELLER: "Seller registered successfully. Your account is pending admin approval.",
    Role.DELIVERER: "Deliverer registered successfully. Your account is pending admin approval.",
}


class Authenticator:
    """
    Account lifecycle operations.

    Example:
        auth = Authenticator(store, hasher, tokens, revocations)
        result = await auth.register("customer", {"name": "Ann Lee", ...})
        result = await auth.login("ann@example.com", "secret-pass")
        auth.logout(result["token"])
    """

    def __init__(
        self,
        store: CredentialStorePort,
        hasher: PasswordHasherPort,
        tokens: TokenPort,
        revocations: RevocationPort,
        store_timeout: float = DEFAULT_STORE_TIMEOUT,
    ):
        """
        Initialize authenticator.

        Args:
            store: Credential store over the four identity collections
            hasher: Password hashing capability
            tokens: Session token codec
            revocations: Revocation list used by logout
            store_timeout: Seconds allowed per store call
        """
        self._store = store
        self._hasher = hasher
        self._tokens = tokens
        self._revocations = revocations
        self._timeout = store_timeout

    async def register(self, role: Any, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Register a customer, seller or deliverer.

        Args:
            role: Target role (admin is refused)
            fields: Raw registration input including the plain password

        Returns:
            Customers: {"message", "token", "user"}
            Sellers/deliverers: {"message", "user", "status": "pending"}

        Raises:
            ValidationError: Bad role or one or more field rules violated
            ConflictError: Email already registered under any role
            StoreUnavailable: Store timed out
        """
        role = parse_role(role)
        record_fields = validate_registration(role, fields)
        email = record_fields["email"]

        if await self.email_exists(email):
            log.info("registration_rejected", role=role.value, reason="email_taken")
            raise ConflictError()

        record_fields["password_hash"] = await _offload(self._hasher.hash, fields["password"])
        record = await bounded(self._store.create(role, record_fields), self._timeout, operation="create")
        log.info("registered", role=role.value, principal_id=record.id)

        result: Dict[str, Any] = {"message": REGISTERED_MESSAGES[role], "user": record.to_public()}
        if role.needs_approval:
            result["status"] = ApprovalStatus.PENDING.value
        else:
            result["token"] = self._tokens.create_token(record.id, role)
        return result

    async def email_exists(self, email: str) -> bool:
        """Check all four collections concurrently."""
        lookups = [
            bounded(self._store.find_by_email(email, role), self._timeout, operation="email_check")
            for role in LOGIN_PROBE_ORDER
        ]
        found = await asyncio.gather(*lookups)
        return any(record is not None for record in found)

    async def login(self, email: Optional[str], password: Optional[str], role: Any = None) -> Dict[str, Any]:
        """
        Verify credentials and issue a session token.

        Without a role the collections are probed admin, customer, seller,
        deliverer and the first match is used.

        Returns:
            {"message", "token", "user"}

        Raises:
            ValidationError: Missing fields or unknown role
            AuthError: Unknown email, wrong password or deactivated account
            PendingApprovalError: Seller/deliverer not yet approved
        """
        email = validate_login(email, password)
        roles: Tuple[Role, ...] = LOGIN_PROBE_ORDER if role is None else (parse_role(role),)

        record = await self._find_first(email, roles)
        if record is None or not await _offload(self._hasher.verify, password, record.password_hash):
            log.info("login_failed", reason="bad_credentials", role=record.role.value if record else None)
            raise AuthError()

        if not record.active:
            log.info("login_failed", reason="inactive", role=record.role.value, principal_id=record.id)
            raise AuthError("Account is deactivated. Please contact support")

        if isinstance(record, ApprovableRecord) and not record.is_approved:
            log.info("login_failed", reason=record.status.value, role=record.role.value, principal_id=record.id)
            raise PendingApprovalError(_pending_message(record))

        token = self._tokens.create_token(record.id, record.role)
        log.info("login", role=record.role.value, principal_id=record.id)
        return {"message": "Login successful", "token": token, "user": record.to_public()}

    def logout(self, token: Optional[str]) -> bool:
        """
        Revoke a token until its natural expiry.

        Never fails. Returns True if the token was newly revoked.
        """
        if not token:
            return False
        expires_at = self._tokens.peek_expiry(token)
        if expires_at is None:
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=self._tokens.default_ttl)
        revoked = self._revocations.revoke(token, expires_at)
        log.info("logout", newly_revoked=revoked)
        return revoked

    async def provision_admin(self, name: str, email: str, password: str) -> CredentialRecord:
        """
        Create an admin account. Admins can never self-register.

        Raises:
            ValidationError: Bad name, email or password
            ConflictError: Email already registered under any role
        """
        record_fields = validate_admin({"name": name, "email": email, "password": password})
        if await self.email_exists(record_fields["email"]):
            raise ConflictError()

        record_fields["password_hash"] = await _offload(self._hasher.hash, password)
        record = await bounded(self._store.create(Role.ADMIN, record_fields), self._timeout, operation="create")
        log.info("admin_provisioned", principal_id=record.id)
        return record

    async def ensure_admin(self, name: str, email: str, password: str) -> Optional[CredentialRecord]:
        """
        Provision an admin unless the email is already registered.

        An email held by a non-admin account is left alone and logged, so a
        misconfigured bootstrap address never blocks startup.
        """
        existing = await self._find_first(normalize_email(email), LOGIN_PROBE_ORDER)
        if existing is None:
            return await self.provision_admin(name, email, password)
        if existing.role != Role.ADMIN:
            log.warning("admin_bootstrap_skipped", reason="email_taken", role=existing.role.value)
        return None

    async def profile(self, principal: Principal) -> Dict[str, Any]:
        """Fresh public profile of the calling principal."""
        record = await self._get(principal.role, principal.id)
        return record.to_public()

    async def approve(self, role: Any, record_id: str, admin: Principal) -> Dict[str, Any]:
        """
        Approve a pending or rejected seller/deliverer.

        Raises:
            ValidationError: Not an approvable role, or already approved
            NotFoundError: No such record
        """
        role = parse_role(role, allowed=APPROVABLE_ROLES)
        record = await bounded(
            self._store.update_status(role, record_id, ApprovalStatus.APPROVED, approved_by=admin.id),
            self._timeout,
            operation="update_status",
        )
        if record is None:
            raise NotFoundError(f"{role.value.capitalize()} not found")
        log.info("approved", role=role.value, principal_id=record_id, admin_id=admin.id)
        return record.to_public()

    async def reject(self, role: Any, record_id: str, reason: Optional[str], admin: Optional[Principal] = None) -> Dict[str, Any]:
        """
        Reject a seller/deliverer with a mandatory reason.

        Raises:
            ValidationError: Missing reason, not approvable, or already rejected
            NotFoundError: No such record
        """
        role = parse_role(role, allowed=APPROVABLE_ROLES)
        if not reason or not str(reason).strip():
            raise ValidationError(["Rejection reason is required"])
        record = await bounded(
            self._store.update_status(role, record_id, ApprovalStatus.REJECTED, rejection_reason=str(reason)),
            self._timeout,
            operation="update_status",
        )
        if record is None:
            raise NotFoundError(f"{role.value.capitalize()} not found")
        log.info("rejected", role=role.value, principal_id=record_id, admin_id=admin.id if admin else None)
        return record.to_public()

    async def set_active(self, role: Any, record_id: str, active: bool) -> Dict[str, Any]:
        """Activate or deactivate a customer, seller or deliverer."""
        role = parse_role(role, allowed=MANAGED_ROLES)
        record = await bounded(
            self._store.set_active(role, record_id, active), self._timeout, operation="set_active"
        )
        if record is None:
            raise NotFoundError(f"{role.value.capitalize()} not found")
        log.info("activation_changed", role=role.value, principal_id=record_id, active=active)
        return record.to_public()

    async def get_record(self, role: Any, record_id: str) -> CredentialRecord:
        """Look up one record, raising NotFoundError if absent."""
        return await self._get(parse_role(role), record_id)

    async def search(self, role: Any, spec: QuerySpec) -> Tuple[List[CredentialRecord], int]:
        """Run a built list query against one identity collection."""
        role = parse_role(role)
        return await bounded(self._store.search(role, spec), self._timeout, operation="search")

    async def list_pending(self, role: Any, spec: QuerySpec) -> Tuple[List[CredentialRecord], int]:
        """Pending sellers or deliverers."""
        role = parse_role(role, allowed=APPROVABLE_ROLES)
        filter_ = dict(spec.filter, status=ApprovalStatus.PENDING.value)
        pending = QuerySpec(filter=filter_, sort=spec.sort, pagination=spec.pagination)
        return await bounded(self._store.search(role, pending), self._timeout, operation="search")

    async def _find_first(self, email: str, roles: Tuple[Role, ...]) -> Optional[CredentialRecord]:
        for role in roles:
            record = await bounded(
                self._store.find_by_email(email, role), self._timeout, operation="find_by_email"
            )
            if record is not None:
                return record
        return None

    async def _get(self, role: Role, record_id: str) -> CredentialRecord:
        record = await bounded(self._store.find_by_id(role, record_id), self._timeout, operation="find_by_id")
        if record is None:
            raise NotFoundError(f"{role.value.capitalize()} not found")
        return record


def _pending_message(record: ApprovableRecord) -> str:
    if record.status == ApprovalStatus.REJECTED:
        reason = f" Reason: {record.rejection_reason}" if record.rejection_reason else ""
        return f"Your {record.role.value} account has been rejected.{reason}"
    return f"Your {record.role.value} account is pending admin approval. Please wait for approval"


async def _offload(fn: Callable[..., T], *args: Any) -> T:
    # Password hashing is CPU bound and must not block the event loop
    return await asyncio.to_thread(fn, *args)
