"""Cursor pagination over Fivetran listing endpoints.

A listing answers ``{"data": {"items": [...], "next_cursor": "..."}}``. The
first page is requested without query parameters; every following page is
requested with ``?cursor=<next_cursor>&limit=<page_size>`` until the cursor
comes back empty.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Set

import httpx

from .errors import ApiError, PaginationFault, ResponseDecodeError
from .filters import compile_filters
from .http_call import HttpCaller, ParamBuilder
from .types import DoneReason, Page, QueryResult

logger = logging.getLogger(__name__)

__all__ = [
    "CursorPager",
    "check_page_size",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
]

MAX_PAGE_SIZE: int = 1000  # Largest page the Fivetran API serves
DEFAULT_PAGE_SIZE: int = MAX_PAGE_SIZE


def check_page_size(page_size: int) -> int:
    """Return *page_size* if the API accepts it as a ``limit``, else raise ``ValueError``."""
    if isinstance(page_size, bool) or not isinstance(page_size, int):
        raise ValueError(f"page size must be a whole number, got {page_size!r}")
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        raise ValueError(f"page size {page_size} is outside the API range 1..{MAX_PAGE_SIZE}")
    return page_size


def _decode_page(response: httpx.Response) -> Page:
    try:
        payload = response.json()
    except ValueError as exc:
        raise ResponseDecodeError(f"Listing response is not JSON: {exc}") from exc
    return Page.from_payload(payload)


class CursorPager:
    """Walks a cursor-linked listing and collects the items passing a filter.

    Each ``run`` owns its accumulator and cursor bookkeeping, so one pager
    can serve any number of sequential queries.
    """

    def __init__(self, caller: HttpCaller, params: ParamBuilder, page_size: int = DEFAULT_PAGE_SIZE):
        self.caller = caller
        self.params = params
        self.page_size = check_page_size(page_size)

    def run(
        self,
        url: str,
        filters: Optional[Iterable[Any]] = None,
        exit_on_first_match: bool = True,
    ) -> QueryResult:
        """Query *url* page by page and return the matching items.

        Errors on the first page propagate. Errors on any later page end the
        query with ``DoneReason.FETCH_FAILED`` and whatever was collected.
        """
        get_params = self.params.build("GET")
        page = _decode_page(self.caller.call(url, get_params))
        pages = 1

        filter_required, predicate = compile_filters(filters)

        items: List[Any] = []
        seen: Set[str] = set()

        while True:
            if not filter_required:
                items.extend(page.items)
            else:
                for item in page.items:
                    if not predicate(item):
                        continue
                    items.append(item)
                    if exit_on_first_match:
                        logger.debug("Match found on page %d of %s", pages, url)
                        return QueryResult(items=items, reason=DoneReason.MATCH_FOUND, pages=pages)

            if not page.has_next:
                return QueryResult(items=items, reason=DoneReason.EXHAUSTED, pages=pages)
            cursor = page.next_cursor
            if cursor in seen:
                logger.warning("Cursor %r repeated while paging %s; stopping", cursor, url)
                return QueryResult(items=items, reason=DoneReason.CURSOR_REPEATED, pages=pages)
            seen.add(cursor)

            try:
                response = self.caller.call(
                    url,
                    get_params,
                    query={"cursor": cursor, "limit": self.page_size},
                    quiet=True,
                )
                page = _decode_page(response)
            except (ApiError, ResponseDecodeError, httpx.HTTPError) as exc:
                fault = PaginationFault(cursor, exc)
                logger.warning("%s; returning %d items from %d pages", fault, len(items), pages)
                return QueryResult(items=items, reason=DoneReason.FETCH_FAILED, pages=pages, error=str(fault))
            pages += 1
