"""Page draining for alias listing endpoints."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

T = TypeVar("T")

PAGE_SIZE = 20


def drain_pages(
    fetch_page: Callable[[Any, int, dict], list[T]],
    api: Any,
    filters: dict,
    *,
    start_page: int = 0,
    fetch_all: bool = False,
    on_page: Callable[[int], None] | None = None,
) -> list[T]:
    """Fetch one page, or every page from ``start_page`` on when ``fetch_all`` is set.

    The service returns ``PAGE_SIZE`` items per page, so the first shorter page
    is the last one. Items keep the order in which the pages returned them.
    """
    if not fetch_all:
        return list(fetch_page(api, start_page, filters))

    items: list[T] = []
    page_id = start_page
    while True:
        if on_page is not None:
            on_page(page_id)
        page = list(fetch_page(api, page_id, filters))
        items.extend(page)
        if len(page) < PAGE_SIZE:
            return items
        page_id += 1
