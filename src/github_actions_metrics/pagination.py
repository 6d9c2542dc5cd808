# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Generic loop over paginated API listings."""

import logging
from typing import Callable, Generic, NamedTuple, Sequence, TypeVar

logger = logging.getLogger(__name__)

# The GitHub API numbers pages from 1, page 0 never exists.
FIRST_PAGE = 1
NO_MORE_PAGES = 0

ItemT = TypeVar("ItemT")


class Page(NamedTuple, Generic[ItemT]):
    """A single page of a listing.

    Attributes:
        items: The items on the page.
        next_page: The page to fetch next, NO_MORE_PAGES if this is the last page.
    """

    items: Sequence[ItemT]
    next_page: int


def collect_pages(
    fetch: Callable[[int], Page[ItemT]], first_page: int = FIRST_PAGE
) -> list[ItemT]:
    """Fetch every page of a listing and accumulate the items.

    The loop stops when a page is empty or when the page signals there is no next page. Errors
    raised by the fetch function are not handled: the caller gets either all items or the error,
    never a partial listing.

    Args:
        fetch: Function fetching the page with the given number.
        first_page: The page to start from.

    Returns:
        The items of all pages in fetch order.
    """
    items: list[ItemT] = []
    page_number = first_page
    while True:
        page = fetch(page_number)
        logger.debug("Fetched page %s with %s items", page_number, len(page.items))
        if not page.items:
            break
        items.extend(page.items)
        if page.next_page == NO_MORE_PAGES:
            break
        page_number = page.next_page
    return items
