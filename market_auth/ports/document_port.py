"""
Document Store Port - Generic entity storage (products, orders, ...).

Implementations:
- MemoryDocumentStore: In-memory collections (testing, local dev)
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class DocumentStorePort(ABC):
    """Port: Find/insert/update/delete documents by filter."""

    @abstractmethod
    async def find(
        self,
        collection: str,
        filter: Dict[str, Any],
        sort: Optional[Dict[str, int]] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Find documents matching a filter.

        Args:
            collection: Collection name
            filter: Filter expression (see QuerySpec)
            sort: {field: 1 | -1}
            skip: Documents to skip
            limit: Max documents to return (None for all)

        Returns:
            Matching documents (copies)
        """
        pass

    @abstractmethod
    async def count(self, collection: str, filter: Dict[str, Any]) -> int:
        """Count documents matching a filter."""
        pass

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Get one document by id, or None."""
        pass

    @abstractmethod
    async def insert(self, collection: str, document: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a document. Assigns id and created_at when missing.

        Returns:
            Inserted document
        """
        pass

    @abstractmethod
    async def update(self, collection: str, doc_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Merge changes into a document.

        Returns:
            Updated document, or None if not found
        """
        pass

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> bool:
        """
        Delete a document.

        Returns:
            True if deleted, False if not found
        """
        pass
