"""
Credential Store Port - Interface over the four identity collections.

Implementations:
- MemoryCredentialStore: In-memory collections (testing, local dev)
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from market_auth.domain.credential import CredentialRecord
from market_auth.domain.principal import ApprovalStatus, Role
from market_auth.domain.query import QuerySpec


class CredentialStorePort(ABC):
    """Port: Look up and create principals across disjoint collections."""

    @abstractmethod
    async def find_by_email(self, email: str, role: Role) -> Optional[CredentialRecord]:
        """
        Find a record by normalized email in one collection.

        Args:
            email: Lower-cased, trimmed email
            role: Collection to search

        Returns:
            Record if found (including password_hash), None otherwise
        """
        pass

    @abstractmethod
    async def find_by_id(self, role: Role, record_id: str) -> Optional[CredentialRecord]:
        """
        Find a record by id in one collection.

        Returns:
            Record if found, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, role: Role, fields: Dict[str, Any]) -> CredentialRecord:
        """
        Create a record in a single atomic operation.

        The store assigns id and created_at. Implementations must re-check
        email uniqueness across every collection as part of the same
        operation.

        Args:
            role: Collection to insert into
            fields: Normalized record fields, password already hashed

        Returns:
            Created record

        Raises:
            ConflictError: If the email exists in any collection
        """
        pass

    @abstractmethod
    async def update_status(
        self,
        role: Role,
        record_id: str,
        status: ApprovalStatus,
        approved_by: Optional[str] = None,
        rejection_reason: Optional[str] = None,
    ) -> Optional[CredentialRecord]:
        """
        Persist an approval transition (seller/deliverer only).

        Returns:
            Updated record, or None if not found
        """
        pass

    @abstractmethod
    async def set_active(self, role: Role, record_id: str, active: bool) -> Optional[CredentialRecord]:
        """
        Activate or deactivate an account.

        Returns:
            Updated record, or None if not found
        """
        pass

    @abstractmethod
    async def search(self, role: Role, spec: QuerySpec) -> Tuple[List[CredentialRecord], int]:
        """
        Run a list query against one collection.

        Returns:
            (records for the requested page, total matching count)
        """
        pass
