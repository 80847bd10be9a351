"""
Cursor pagination over Square list/search endpoints.

Pages are requested strictly one after another (each needs the previous
cursor) and never more than `max_pages` per call. Hitting the cap while a
cursor is still pending means the result is incomplete: it is logged and
flagged as truncated. A failed page raises and nothing is returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from app.core.logging import square_logger

DEFAULT_MAX_PAGES = 20

FetchPage = Callable[[Optional[str]], Awaitable[Dict[str, Any]]]


@dataclass
class PagedResult:
    items: List[Dict[str, Any]] = field(default_factory=list)
    pages: int = 0
    truncated: bool = False


async def fetch_all_pages(
    fetch_page: FetchPage,
    items_key: str,
    *,
    max_pages: int = DEFAULT_MAX_PAGES,
    label: str = "records",
) -> PagedResult:
    log = square_logger.bind(resource=label)
    result = PagedResult()
    cursor: Optional[str] = None

    while result.pages < max_pages:
        data = await fetch_page(cursor)
        batch = data.get(items_key) or []
        result.items.extend(batch)
        result.pages += 1
        cursor = data.get("cursor") or None

        log.debug(
            "Fetched page",
            page=result.pages,
            count=len(batch),
            has_cursor=cursor is not None,
        )
        if cursor is None:
            return result

    result.truncated = True
    log.warning(
        "Reached page limit, results are incomplete",
        max_pages=max_pages,
        fetched=len(result.items),
    )
    return result
