"""
Pagination/Windowing Controller.

Turns a fully ranked list into a forward-growing window of pages.
"""

import logging
from dataclasses import dataclass, field
from typing import Generic, Hashable, Iterator, List, Optional, Sequence, TypeVar

import config.settings as settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    items: List[T] = field(default_factory=list)
    has_more: bool = False


def _validate(page_size: int, page_count: int) -> None:
    if page_size <= 0:
        raise ValueError(f"Invalid page_size: {page_size}. Must be > 0")
    if page_count < 1:
        raise ValueError(f"Invalid page_count: {page_count}. Must be >= 1")


def paginate(
    ordered: Sequence[T],
    page_size: int = settings.DEFAULT_PAGE_SIZE,
    page_count: int = 1
) -> Page[T]:
    """
    Return the first `page_count` pages as one prefix.

    Requesting more than is available returns everything without error.

    Raises:
        ValueError: If page_size is not positive or page_count < 1
    """
    _validate(page_size, page_count)
    visible = page_size * page_count
    return Page(items=list(ordered[:visible]), has_more=len(ordered) > visible)


def iter_pages(ordered: Sequence[T], page_size: int = settings.DEFAULT_PAGE_SIZE) -> Iterator[List[T]]:
    """Yield successive disjoint pages covering `ordered` exactly once."""
    _validate(page_size, 1)
    for start in range(0, len(ordered), page_size):
        yield list(ordered[start:start + page_size])


@dataclass(frozen=True)
class FeedWindow:
    """
    How many pages of a feed the viewer has loaded.

    The window only grows forward and starts over whenever the ordering
    criteria (mode, filters, topic focus) change.
    """
    criteria: Optional[Hashable] = None
    page_size: int = settings.DEFAULT_PAGE_SIZE
    page_count: int = 1

    def __post_init__(self):
        _validate(self.page_size, self.page_count)

    def next(self) -> "FeedWindow":
        return FeedWindow(self.criteria, self.page_size, self.page_count + 1)

    def for_criteria(self, criteria: Hashable) -> "FeedWindow":
        """Same window if criteria are unchanged, otherwise back to the first page."""
        if criteria == self.criteria:
            return self
        logger.debug("Feed criteria changed, resetting window to first page")
        return FeedWindow(criteria, self.page_size, 1)

    def apply(self, ordered: Sequence[T]) -> Page[T]:
        return paginate(ordered, self.page_size, self.page_count)
