"""
Canonical cache keys for read queries.

Listing keys look like::

    cache:list:<resource>:<scope>:<digest>

where ``scope`` is ``owner=<id>`` for owner-scoped listings or ``all`` for
unscoped ones, and ``digest`` is a SHA-256 over the canonical JSON of the
resolved query. The structural prefix (everything before the digest) is what
write paths sweep with a glob pattern, so prefix components are restricted to
characters that carry no glob meaning.
"""

from __future__ import annotations

import hashlib
import json
import re
from dataclasses import dataclass, field
from typing import Iterable, Literal, Mapping, Sequence

KEY_NAMESPACE = "cache"
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
DEFAULT_SORT_FIELD = "createdAt"

SortDirection = Literal["asc", "desc"]

_SAFE_COMPONENT = re.compile(r"^[A-Za-z0-9_.@-]+$")

ParamValue = str | Sequence[str] | None


def _component(value: str, what: str) -> str:
    if not _SAFE_COMPONENT.match(value):
        raise ValueError(f"unsafe {what} for cache key: {value!r}")
    return value


def _to_int(raw: ParamValue, default: int) -> int:
    if isinstance(raw, (list, tuple)):
        raw = raw[0] if raw else None
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return default


def _first(raw: ParamValue) -> str | None:
    if isinstance(raw, (list, tuple)):
        return raw[0] if raw else None
    return raw


@dataclass(frozen=True)
class ListingQuery:
    resource: str
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    sort_field: str = DEFAULT_SORT_FIELD
    sort_direction: SortDirection = "desc"
    filters: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    owner: str | None = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def canonical(self) -> str:
        payload = {
            "resource": self.resource,
            "page": self.page,
            "page_size": self.page_size,
            "sort": [self.sort_field, self.sort_direction],
            "filters": [list(pair) for pair in self.filters],
            "owner": self.owner,
        }
        return json.dumps(payload, sort_keys=True, separators=(",", ":"))


def build_listing_query(
    resource: str,
    params: Mapping[str, ParamValue],
    *,
    owner: str | None = None,
    allowed_filters: Iterable[str] = (),
    multi_value_filters: Iterable[str] = (),
    allowed_sorts: Iterable[str] = (DEFAULT_SORT_FIELD,),
    default_sort: str = DEFAULT_SORT_FIELD,
    max_page_size: int = MAX_PAGE_SIZE,
) -> ListingQuery:
    """
    Resolve raw request parameters into a ListingQuery.

    Only whitelisted filter names survive; anything else in ``params`` is
    ignored so it cannot split the cache. Multi-valued filters (list input or
    comma-separated) are de-duplicated and sorted.
    """
    allowed = set(allowed_filters)
    multi = set(multi_value_filters)
    sorts = set(allowed_sorts) | {default_sort}

    page = max(_to_int(params.get("page"), 1), 1)
    page_size = _to_int(params.get("limit"), DEFAULT_PAGE_SIZE)
    page_size = min(max(page_size, 1), max_page_size)

    sort_field = _first(params.get("sort")) or default_sort
    if sort_field not in sorts:
        sort_field = default_sort
    direction: SortDirection = "asc" if _first(params.get("order")) == "asc" else "desc"

    filters: list[tuple[str, str]] = []
    for name in sorted(allowed):
        raw = params.get(name)
        if raw is None:
            continue
        if name in multi or isinstance(raw, (list, tuple)):
            parts = raw if isinstance(raw, (list, tuple)) else str(raw).split(",")
            values = sorted({p.strip() for p in parts if p and p.strip()})
            if values:
                filters.append((name, ",".join(values)))
        else:
            value = str(raw).strip()
            if value:
                filters.append((name, value))

    return ListingQuery(
        resource=_component(resource, "resource"),
        page=page,
        page_size=page_size,
        sort_field=sort_field,
        sort_direction=direction,
        filters=tuple(filters),
        owner=_component(owner, "owner") if owner is not None else None,
    )


def _scope(owner: str | None) -> str:
    return f"owner={_component(owner, 'owner')}" if owner is not None else "all"


def listing_fingerprint(query: ListingQuery) -> str:
    digest = hashlib.sha256(query.canonical().encode("utf-8")).hexdigest()[:32]
    return f"{listing_prefix(query.resource, query.owner)}{digest}"


def listing_prefix(resource: str, owner: str | None = None) -> str:
    """Structural prefix shared by every listing of ``resource`` in one scope."""
    return f"{KEY_NAMESPACE}:list:{_component(resource, 'resource')}:{_scope(owner)}:"


def listing_pattern(resource: str, owner: str | None = None) -> str:
    return listing_prefix(resource, owner) + "*"


def resource_pattern(resource: str) -> str:
    """Every listing of ``resource`` regardless of scope."""
    return f"{KEY_NAMESPACE}:list:{_component(resource, 'resource')}:*"


def item_key(resource: str, record_id: str) -> str:
    return (
        f"{KEY_NAMESPACE}:item:{_component(resource, 'resource')}:"
        f"{_component(record_id, 'record id')}"
    )
