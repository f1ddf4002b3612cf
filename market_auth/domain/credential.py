"""
Credential Record Domain Models - One variant per identity collection.

Admins, customers, sellers and deliverers live in disjoint collections with
no shared schema. They are modelled as a small tagged union: every variant
knows its role, its collection and which fields make up its public profile.
"""

import secrets
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Optional, Tuple, Type

from market_auth.domain.principal import ApprovalStatus, Role
from market_auth.errors import ValidationError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_object_id() -> str:
    """Generate a 24-hex-character record id."""
    return secrets.token_hex(12)


def normalize_email(email: Optional[str]) -> str:
    """Emails are compared lower-cased and trimmed everywhere."""
    return (email or "").strip().lower()


@dataclass
class CredentialRecord:
    """
    Base credential record.

    Domain rules:
    - email is unique across ALL collections (enforced by the store)
    - password_hash never leaves the record via to_public()
    """
    id: str
    name: str
    email: str
    password_hash: str = field(default="", repr=False)
    active: bool = True
    created_at: datetime = field(default_factory=utcnow)

    role: ClassVar[Role]
    collection: ClassVar[str]
    public_fields: ClassVar[Tuple[str, ...]] = ()

    @property
    def principal_id(self) -> str:
        return self.id

    def to_public(self) -> Dict[str, Any]:
        """Role-shaped profile safe to return to clients."""
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
        }
        for name in self.public_fields:
            data[name] = _jsonable(getattr(self, name))
        return data

    def to_document(self) -> Dict[str, Any]:
        """Serialize to a store document (enums flattened to their values)."""
        doc = {}
        for f in fields(self):
            value = getattr(self, f.name)
            doc[f.name] = value.value if isinstance(value, ApprovalStatus) else value
        return doc

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "CredentialRecord":
        """Deserialize from a store document, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in doc.items() if k in known}
        if "status" in kwargs and kwargs["status"] is not None:
            kwargs["status"] = ApprovalStatus(kwargs["status"])
        return cls(**kwargs)


@dataclass
class AdminRecord(CredentialRecord):
    role: ClassVar[Role] = Role.ADMIN
    collection: ClassVar[str] = "admins"
    public_fields: ClassVar[Tuple[str, ...]] = ("active",)


@dataclass
class CustomerRecord(CredentialRecord):
    phone: str = ""
    address: str = ""

    role: ClassVar[Role] = Role.CUSTOMER
    collection: ClassVar[str] = "customers"
    public_fields: ClassVar[Tuple[str, ...]] = ("phone", "address")


@dataclass
class ApprovableRecord(CredentialRecord):
    """
    Record that must be approved by an admin before it can log in.

    Transitions: pending -> approved | rejected, rejected -> approved,
    approved -> rejected. Repeating the current state is refused.
    """
    status: ApprovalStatus = ApprovalStatus.PENDING
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    @property
    def is_approved(self) -> bool:
        return self.status == ApprovalStatus.APPROVED

    def approve(self, admin_id: str):
        """Mark approved by an admin."""
        if self.status == ApprovalStatus.APPROVED:
            raise ValidationError([f"{self.role.value.capitalize()} is already approved"])
        self.status = ApprovalStatus.APPROVED
        self.approved_by = admin_id
        self.approved_at = utcnow()
        self.rejection_reason = None

    def reject(self, reason: str):
        """Mark rejected with a mandatory reason."""
        if not reason or not reason.strip():
            raise ValidationError(["Rejection reason is required"])
        if self.status == ApprovalStatus.REJECTED:
            raise ValidationError([f"{self.role.value.capitalize()} is already rejected"])
        self.status = ApprovalStatus.REJECTED
        self.rejection_reason = reason.strip()


@dataclass
class SellerRecord(ApprovableRecord):
    shop_name: str = ""
    phone: str = ""
    address: str = ""

    role: ClassVar[Role] = Role.SELLER
    collection: ClassVar[str] = "sellers"
    public_fields: ClassVar[Tuple[str, ...]] = ("shop_name", "phone", "address", "status")


@dataclass
class DelivererRecord(ApprovableRecord):
    phone: str = ""
    address: str = ""
    vehicle_no: str = ""
    vehicle_type: str = ""

    role: ClassVar[Role] = Role.DELIVERER
    collection: ClassVar[str] = "deliverers"
    public_fields: ClassVar[Tuple[str, ...]] = ("phone", "vehicle_no", "vehicle_type", "status")


# Role -> record variant. Indexed once so handlers never branch on role names.
RECORD_TYPES: Dict[Role, Type[CredentialRecord]] = {
    Role.ADMIN: AdminRecord,
    Role.CUSTOMER: CustomerRecord,
    Role.SELLER: SellerRecord,
    Role.DELIVERER: DelivererRecord,
}

# Order in which collections are probed when login does not name a role.
LOGIN_PROBE_ORDER: Tuple[Role, ...] = (Role.ADMIN, Role.CUSTOMER, Role.SELLER, Role.DELIVERER)


def record_type(role: Role) -> Type[CredentialRecord]:
    return RECORD_TYPES[role]


def _jsonable(value: Any) -> Any:
    if isinstance(value, ApprovalStatus):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value
