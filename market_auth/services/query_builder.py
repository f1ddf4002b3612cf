"""
Query Builder - Turns raw list-request parameters into a QuerySpec.

Never raises on caller input. Malformed values are dropped and logged at
debug level so a bad query string degrades to a broader, still-scoped
listing instead of an error.
"""

import math
import re
from datetime import datetime, time, timezone
from typing import Any, Dict, List, Mapping, Optional

from market_auth.domain.principal import Principal
from market_auth.domain.query import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    FieldKind,
    ListingSpec,
    Pagination,
    QuerySpec,
    SortDirection,
    SortSpec,
)
from market_auth.observability import get_logger

log = get_logger(__name__)

OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")
LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def build_query(
    params: Mapping[str, Any],
    listing: ListingSpec,
    principal: Optional[Principal] = None,
) -> QuerySpec:
    """
    Build a filter/sort/pagination triple for one list request.

    Default filters and the principal's role scope are placed first. Caller
    filters only fill keys those left unset, so a customer passing
    ``customer_id=<someone else>`` still only sees their own records.

    Args:
        params: Raw query parameters (str values, or lists for repeats)
        listing: Resource configuration
        principal: Caller identity, None for public listings

    Returns:
        QuerySpec ready for a DocumentStorePort or CredentialStorePort
    """
    params = params or {}
    filter_: Dict[str, Any] = dict(listing.default_filters)
    filter_.update(listing.scope_for(principal))

    for name, kind in listing.fields.items():
        predicate = _field_predicate(name, kind, params)
        if predicate is None:
            continue
        # Mandatory keys already placed win over caller input
        filter_.setdefault(name, predicate)

    search = _search_clause(params.get("search"), listing.search_fields)
    if search is not None:
        filter_["$or"] = search

    return QuerySpec(
        filter=filter_,
        sort=build_sort(params, listing),
        pagination=build_pagination(params),
    )


def build_sort(params: Mapping[str, Any], listing: ListingSpec) -> SortSpec:
    """Sort on a declared field, falling back to the listing default."""
    field_name = _first(params.get("sort"))
    if isinstance(field_name, str) and field_name.strip() and listing.can_sort_by(field_name.strip()):
        return SortSpec(field_name.strip(), SortDirection.parse(_first(params.get("sortOrder"))))

    default_field, default_direction = listing.default_sort
    return SortSpec(default_field, default_direction)


def build_pagination(params: Mapping[str, Any]) -> Pagination:
    """page >= 1, 1 <= limit <= MAX_PAGE_SIZE."""
    page = _positive_int(params.get("page"), default=1)
    limit = _positive_int(params.get("limit"), default=DEFAULT_PAGE_SIZE)
    return Pagination(page=page, limit=min(limit, MAX_PAGE_SIZE))


def build_page_meta(total: int, page: int, limit: int) -> Dict[str, Any]:
    """Pagination envelope returned alongside list results."""
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": total_pages,
        "hasNextPage": page < total_pages,
        "hasPrevPage": page > 1,
    }


def _field_predicate(name: str, kind: FieldKind, params: Mapping[str, Any]) -> Any:
    if kind == FieldKind.NUMBER_RANGE:
        return _number_range(name, params)
    if kind == FieldKind.DATE_RANGE:
        return _date_range(name, params)

    raw = params.get(name)
    if raw is None or raw == "" or raw == []:
        return None

    if kind == FieldKind.STRING:
        value = _first(raw)
        if not isinstance(value, str) or not value.strip():
            return None
        return _contains(value.strip())

    if kind == FieldKind.BOOLEAN:
        value = str(_first(raw)).strip().lower()
        if value == "true":
            return True
        if value == "false":
            return False
        log.debug("query_param_dropped", field=name, reason="not a boolean")
        return None

    if kind == FieldKind.NUMBER:
        number = _number(_first(raw))
        if number is None:
            log.debug("query_param_dropped", field=name, reason="not a number")
        return number

    if kind == FieldKind.OBJECT_ID:
        value = str(_first(raw)).strip()
        if OBJECT_ID_RE.match(value):
            return value
        log.debug("query_param_dropped", field=name, reason="malformed object id")
        return None

    if kind == FieldKind.ARRAY:
        values = _split(raw)
        if not values:
            return None
        if len(values) == 1:
            return values[0]
        return {"$in": values}

    return None


def _number_range(name: str, params: Mapping[str, Any]) -> Optional[Any]:
    low = _number(_first(params.get(f"{name}_min")))
    high = _number(_first(params.get(f"{name}_max")))
    if low is not None or high is not None:
        bounds = {}
        if low is not None:
            bounds["$gte"] = low
        if high is not None:
            bounds["$lte"] = high
        return bounds
    # Exact match when no bounds are given
    return _number(_first(params.get(name)))


def _date_range(name: str, params: Mapping[str, Any]) -> Optional[Dict[str, datetime]]:
    start = _date(_first(params.get(f"{name}_from")))
    end = _date(_first(params.get(f"{name}_to")))
    bounds = {}
    if start is not None:
        bounds["$gte"] = start
    if end is not None:
        # Inclusive of the whole end day
        bounds["$lte"] = datetime.combine(end.date(), time.max, tzinfo=end.tzinfo)
    return bounds or None


def _search_clause(raw: Any, search_fields) -> Optional[List[Dict[str, Any]]]:
    term = _first(raw)
    if not search_fields or not isinstance(term, str) or not term.strip():
        return None
    pattern = _contains(term.strip())
    return [{name: dict(pattern)} for name in search_fields]


def _contains(value: str) -> Dict[str, str]:
    return {"$regex": re.escape(value), "$options": "i"}


def _first(raw: Any) -> Any:
    if isinstance(raw, (list, tuple)):
        return raw[0] if raw else None
    return raw


def _split(raw: Any) -> List[str]:
    items = raw if isinstance(raw, (list, tuple)) else [raw]
    values = []
    for item in items:
        for part in str(item).split(","):
            part = part.strip()
            if part:
                values.append(part)
    return values


def _number(raw: Any) -> Optional[float]:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(str(raw).strip())
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return int(value) if value.is_integer() else value


def _positive_int(raw: Any, default: int) -> int:
    # Leading digits count ("2.5" -> 2); missing or zero means the default
    match = LEADING_INT_RE.match(str(_first(raw))) if raw is not None else None
    value = int(match.group(1)) if match else 0
    return max(1, value or default)


def _date(raw: Any) -> Optional[datetime]:
    if not isinstance(raw, str) or not raw.strip():
        return None
    text = raw.strip()
    if text[-1] in "Zz":
        text = text[:-1] + "+00:00"
    try:
        value = datetime.fromisoformat(text)
    except ValueError:
        log.debug("query_param_dropped", value=raw, reason="malformed date")
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value
