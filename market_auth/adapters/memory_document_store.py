"""
Memory Document Store - In-memory collections with filter evaluation.
"""

import asyncio
import copy
import re
from typing import Any, Dict, List, Optional

from market_auth.domain.credential import new_object_id, utcnow
from market_auth.ports.document_port import DocumentStorePort


class MemoryDocumentStore(DocumentStorePort):
    """
    In-memory document storage.

    Understands the filter operators produced by the query builder:
    equality, $regex/$options, $in, $gte/$lte/$gt/$lt, $ne and top-level
    $or/$and. Equality against a list-valued field means membership.

    WARNING: Only for testing and local development. Data is lost on restart.
    """

    def __init__(self, latency: float = 0.0):
        """
        Initialize in-memory storage.

        Args:
            latency: Artificial delay per call in seconds (for timeout tests)
        """
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = asyncio.Lock()
        self._latency = latency

    async def _pause(self):
        if self._latency:
            await asyncio.sleep(self._latency)

    def _docs(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(collection, {})

    async def find(
        self,
        collection: str,
        filter: Dict[str, Any],
        sort: Optional[Dict[str, int]] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Find documents matching a filter."""
        await self._pause()
        found = [doc for doc in self._docs(collection).values() if matches(doc, filter)]

        for field_name, direction in reversed(list((sort or {}).items())):
            found = _sorted(found, field_name, descending=direction < 0)

        end = None if limit is None else skip + limit
        return [copy.deepcopy(doc) for doc in found[skip:end]]

    async def count(self, collection: str, filter: Dict[str, Any]) -> int:
        await self._pause()
        return sum(1 for doc in self._docs(collection).values() if matches(doc, filter))

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        await self._pause()
        doc = self._docs(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def insert(self, collection: str, document: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a document, assigning id and created_at when missing."""
        await self._pause()
        doc = copy.deepcopy(document)
        doc.setdefault("id", new_object_id())
        doc.setdefault("created_at", utcnow())
        async with self._lock:
            self._docs(collection)[doc["id"]] = doc
        return copy.deepcopy(doc)

    async def update(self, collection: str, doc_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        await self._pause()
        async with self._lock:
            doc = self._docs(collection).get(doc_id)
            if doc is None:
                return None
            doc.update(copy.deepcopy(changes))
            doc["id"] = doc_id
            return copy.deepcopy(doc)

    async def delete(self, collection: str, doc_id: str) -> bool:
        await self._pause()
        async with self._lock:
            return self._docs(collection).pop(doc_id, None) is not None


def matches(doc: Dict[str, Any], filter: Dict[str, Any]) -> bool:
    """Evaluate a filter expression against one document."""
    for key, condition in filter.items():
        if key == "$or":
            if not any(matches(doc, sub) for sub in condition):
                return False
        elif key == "$and":
            if not all(matches(doc, sub) for sub in condition):
                return False
        elif not _match_value(_resolve(doc, key), condition):
            return False
    return True


def _resolve(doc: Dict[str, Any], path: str) -> Any:
    """Resolve a dotted path; list values along the way are flattened."""
    value: Any = doc
    for part in path.split("."):
        if isinstance(value, list):
            value = [item.get(part) for item in value if isinstance(item, dict)]
        elif isinstance(value, dict):
            value = value.get(part)
        else:
            return None
    return value


def _is_operator_dict(condition: Any) -> bool:
    return isinstance(condition, dict) and bool(condition) and all(k.startswith("$") for k in condition)


def _match_value(value: Any, condition: Any) -> bool:
    if not _is_operator_dict(condition):
        if isinstance(value, list) and not isinstance(condition, list):
            return condition in value
        return value == condition

    for op, arg in condition.items():
        if op == "$options":
            continue
        if op == "$regex":
            flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
            candidates = value if isinstance(value, list) else [value]
            if not any(isinstance(c, str) and re.search(arg, c, flags) for c in candidates):
                return False
        elif op == "$in":
            if isinstance(value, list):
                if not any(v in arg for v in value):
                    return False
            elif value not in arg:
                return False
        elif op == "$ne":
            if value == arg:
                return False
        elif op in _COMPARATORS:
            if value is None:
                return False
            try:
                if not _COMPARATORS[op](value, arg):
                    return False
            except TypeError:
                return False
        else:
            raise ValueError(f"Unsupported filter operator: {op}")
    return True


_COMPARATORS = {
    "$gte": lambda a, b: a >= b,
    "$lte": lambda a, b: a <= b,
    "$gt": lambda a, b: a > b,
    "$lt": lambda a, b: a < b,
}


def _sorted(docs: List[Dict[str, Any]], field_name: str, descending: bool) -> List[Dict[str, Any]]:
    present = [d for d in docs if _resolve(d, field_name) is not None]
    missing = [d for d in docs if _resolve(d, field_name) is None]
    try:
        present.sort(key=lambda d: _resolve(d, field_name), reverse=descending)
    except TypeError:
        present.sort(key=lambda d: str(_resolve(d, field_name)), reverse=descending)
    return present + missing
