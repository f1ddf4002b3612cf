"""
Memory Credential Store - Four identity collections kept in memory.
"""

import asyncio
from typing import Any, Dict, List, Optional, Tuple

from market_auth.adapters.memory_document_store import MemoryDocumentStore
from market_auth.domain.credential import (
    ApprovableRecord,
    CredentialRecord,
    RECORD_TYPES,
    normalize_email,
    record_type,
)
from market_auth.domain.principal import ApprovalStatus, Role
from market_auth.domain.query import QuerySpec
from market_auth.errors import ConflictError
from market_auth.ports.credential_port import CredentialStorePort


class MemoryCredentialStore(CredentialStorePort):
    """
    In-memory credential storage.

    Each role has its own collection inside a MemoryDocumentStore. Creation
    holds a store-wide lock across the four-collection email check and the
    insert, so two concurrent registrations of the same email cannot both
    succeed.

    WARNING: Only for testing and local development.
    """

    def __init__(self, documents: Optional[MemoryDocumentStore] = None):
        """
        Initialize credential storage.

        Args:
            documents: Backing document store (a private one by default)
        """
        self._documents = documents or MemoryDocumentStore()
        self._create_lock = asyncio.Lock()

    async def find_by_email(self, email: str, role: Role) -> Optional[CredentialRecord]:
        cls = record_type(role)
        docs = await self._documents.find(cls.collection, {"email": normalize_email(email)}, limit=1)
        return cls.from_document(docs[0]) if docs else None

    async def find_by_id(self, role: Role, record_id: str) -> Optional[CredentialRecord]:
        cls = record_type(role)
        doc = await self._documents.get(cls.collection, record_id)
        return cls.from_document(doc) if doc else None

    async def create(self, role: Role, fields: Dict[str, Any]) -> CredentialRecord:
        """Check global email uniqueness and insert under one lock."""
        cls = record_type(role)
        email = normalize_email(fields.get("email"))

        async with self._create_lock:
            for other in RECORD_TYPES.values():
                if await self._documents.count(other.collection, {"email": email}):
                    raise ConflictError()

            document = dict(fields, email=email)
            document.pop("id", None)
            # Stored explicitly so `active` filters match new accounts
            document.setdefault("active", True)
            if issubclass(cls, ApprovableRecord):
                document.setdefault("status", ApprovalStatus.PENDING.value)
            inserted = await self._documents.insert(cls.collection, document)

        return cls.from_document(inserted)

    async def update_status(
        self,
        role: Role,
        record_id: str,
        status: ApprovalStatus,
        approved_by: Optional[str] = None,
        rejection_reason: Optional[str] = None,
    ) -> Optional[CredentialRecord]:
        cls = record_type(role)
        if not issubclass(cls, ApprovableRecord):
            raise ValueError(f"Role {role.value} has no approval status")

        record = await self.find_by_id(role, record_id)
        if record is None:
            return None

        if status == ApprovalStatus.APPROVED:
            record.approve(approved_by)
        elif status == ApprovalStatus.REJECTED:
            record.reject(rejection_reason or "")
        else:
            record.status = status

        changes = {
            "status": record.status.value,
            "approved_by": record.approved_by,
            "approved_at": record.approved_at,
            "rejection_reason": record.rejection_reason,
        }
        doc = await self._documents.update(cls.collection, record_id, changes)
        return cls.from_document(doc) if doc else None

    async def set_active(self, role: Role, record_id: str, active: bool) -> Optional[CredentialRecord]:
        cls = record_type(role)
        doc = await self._documents.update(cls.collection, record_id, {"active": bool(active)})
        return cls.from_document(doc) if doc else None

    async def search(self, role: Role, spec: QuerySpec) -> Tuple[List[CredentialRecord], int]:
        cls = record_type(role)
        total = await self._documents.count(cls.collection, spec.filter)
        docs = await self._documents.find(
            cls.collection,
            spec.filter,
            sort=spec.sort.to_dict(),
            skip=spec.pagination.skip,
            limit=spec.pagination.limit,
        )
        return [cls.from_document(doc) for doc in docs], total
