"""
Paging primitives shared by the repositories and the REST layer.

A ``PageRequest`` describes which slice of a result set the client
asked for (``page``, ``size`` and an optional list of ``sort`` orders);
a ``Page`` is the slice the repository returned together with the total
number of matching rows.  ``pagination_headers`` turns a page into the
``X-Total-Count`` and ``Link`` headers clients use to navigate.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Generic, List, Mapping, Optional, Tuple, TypeVar
from urllib.parse import urlencode

from fastapi import Query

from .config import settings


T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    """Zero-based page index, page size and sort orders."""

    page: int = 0
    size: int = 20
    sort: Tuple[Tuple[str, str], ...] = ()

    @property
    def offset(self) -> int:
        return self.page * self.size

    @classmethod
    def parse_sort(cls, values: Optional[List[str]]) -> Tuple[Tuple[str, str], ...]:
        """Parse ``field,asc|desc`` strings; direction defaults to ascending."""
        orders: List[Tuple[str, str]] = []
        for value in values or []:
            name, _, direction = value.partition(",")
            name = name.strip()
            if not name:
                continue
            direction = "DESC" if direction.strip().lower() == "desc" else "ASC"
            orders.append((name, direction))
        return tuple(orders)

    def order_by(self, columns: Mapping[str, str], default: str) -> str:
        """Build an ``ORDER BY`` body from the requested sort orders.

        Only fields present in ``columns`` are honoured, which keeps
        user input out of the SQL text.  ``columns`` maps the public
        field name to its SQL expression; ``default`` is used when no
        requested field is allowed.
        """
        clauses = [f"{columns[name]} {direction}" for name, direction in self.sort if name in columns]
        if not clauses:
            clauses = [f"{default} ASC"]
        return ", ".join(clauses)


@dataclass
class Page(Generic[T]):
    """One page of results plus the total number of matching rows."""

    content: List[T]
    total: int
    request: PageRequest = field(default_factory=PageRequest)

    @property
    def number(self) -> int:
        return self.request.page

    @property
    def total_pages(self) -> int:
        if self.request.size <= 0:
            return 0
        return math.ceil(self.total / self.request.size)


def page_request(
    page: int = Query(0, ge=0, description="Zero-based page index"),
    size: Optional[int] = Query(None, ge=1, le=settings.max_page_size, description="Page size"),
    sort: Optional[List[str]] = Query(None, description="Sort order, e.g. 'start_time,desc'"),
) -> PageRequest:
    """FastAPI dependency building a ``PageRequest`` from query parameters."""
    return PageRequest(
        page=page,
        size=size or settings.default_page_size,
        sort=PageRequest.parse_sort(sort),
    )


def _page_link(base_url: str, page: int, size: int, rel: str) -> str:
    query = urlencode({"page": page, "size": size})
    return f'<{base_url}?{query}>; rel="{rel}"'


def pagination_headers(page: Page, base_url: str) -> Dict[str, str]:
    """Return the ``X-Total-Count`` and ``Link`` headers for ``page``.

    ``next`` and ``prev`` links are only emitted when such a page exists;
    ``last`` and ``first`` are always present.
    """
    size = page.request.size
    links: List[str] = []
    if page.number + 1 < page.total_pages:
        links.append(_page_link(base_url, page.number + 1, size, "next"))
    if page.number > 0:
        links.append(_page_link(base_url, page.number - 1, size, "prev"))
    last_page = page.total_pages - 1 if page.total_pages > 0 else 0
    links.append(_page_link(base_url, last_page, size, "last"))
    links.append(_page_link(base_url, 0, size, "first"))
    return {
        "X-Total-Count": str(page.total),
        "Link": ",".join(links),
    }


def entity_alert_headers(entity_name: str, action: str, param: str) -> Dict[str, str]:
    """Headers announcing that an entity was created, updated or deleted."""
    app = settings.app_name
    return {
        f"X-{app}-alert": f"{app}.{entity_name}.{action}",
        f"X-{app}-params": param,
    }
