"""
Query Domain Models - Typed description of a list query.

A ListingSpec is declared once per resource. The query builder combines it
with raw request parameters and the principal to produce a QuerySpec.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Tuple

from market_auth.domain.principal import Principal, Role

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100  # Hard cap regardless of caller input
DEFAULT_SORT_FIELD = "created_at"


class FieldKind(Enum):
    """How a filterable field interprets its query parameter(s)."""
    STRING = "string"              # case-insensitive substring
    BOOLEAN = "boolean"            # "true" / "false"
    NUMBER = "number"              # exact numeric match
    NUMBER_RANGE = "numberRange"   # {field}_min / {field}_max, inclusive
    DATE_RANGE = "dateRange"       # {field}_from / {field}_to, _to = end of day
    OBJECT_ID = "objectId"         # 24 hex chars, ignored when malformed
    ARRAY = "array"                # comma separated or list -> membership


class SortDirection(Enum):
    ASC = 1
    DESC = -1

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortDirection":
        """Anything other than 'asc' sorts descending."""
        if isinstance(value, str) and value.strip().lower() == "asc":
            return cls.ASC
        return cls.DESC


# Produces the mandatory filter fragment for a principal of a given role.
ScopeFactory = Callable[[Principal], Dict[str, Any]]


@dataclass(frozen=True)
class ListingSpec:
    """
    Per-resource query configuration.

    Domain rules:
    - default_filters and role_scopes are never overridable by caller input
    - sorting is only allowed on declared fields
    """
    fields: Mapping[str, FieldKind] = field(default_factory=dict)
    search_fields: Tuple[str, ...] = ()
    default_filters: Mapping[str, Any] = field(default_factory=dict)
    role_scopes: Mapping[Role, ScopeFactory] = field(default_factory=dict)
    sortable: FrozenSet[str] = frozenset()
    default_sort: Tuple[str, "SortDirection"] = (DEFAULT_SORT_FIELD, SortDirection.DESC)

    def can_sort_by(self, name: str) -> bool:
        return name == DEFAULT_SORT_FIELD or name in self.sortable or name in self.fields

    def scope_for(self, principal: Optional[Principal]) -> Dict[str, Any]:
        """Mandatory filter fragment for the principal (empty if none)."""
        if principal is None:
            return {}
        factory = self.role_scopes.get(principal.role)
        if factory is None:
            return {}
        return dict(factory(principal))


@dataclass(frozen=True)
class SortSpec:
    field: str
    direction: SortDirection = SortDirection.DESC

    def to_dict(self) -> Dict[str, int]:
        return {self.field: self.direction.value}


@dataclass(frozen=True)
class Pagination:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def to_dict(self) -> Dict[str, int]:
        return {"page": self.page, "limit": self.limit, "skip": self.skip}


@dataclass(frozen=True)
class QuerySpec:
    """
    Validated {filter, sort, pagination} triple for one list request.

    filter uses document-store operators: plain values for equality,
    {"$regex", "$options"}, {"$gte", "$lte"}, {"$in"} and a top-level "$or".
    """
    filter: Dict[str, Any]
    sort: SortSpec
    pagination: Pagination

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filter": self.filter,
            "sort": self.sort.to_dict(),
            "pagination": self.pagination.to_dict(),
        }
