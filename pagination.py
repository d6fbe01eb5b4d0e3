"""Pagination metadata for filtered search results."""

from __future__ import annotations

from collections.abc import Sequence

from models import Preprint, SearchResult


def normalize_result(records: Sequence[Preprint], cursor: str | None) -> SearchResult:
    """Build a fresh result whose total counts the filtered records.

    The upstream total counted records before relevance filtering, so it is
    never carried over.
    """
    return SearchResult(records=tuple(records), total=len(records), cursor=cursor or "0")


def display_window(result: SearchResult) -> tuple[int, int] | None:
    """Advisory ``(start, end)`` range to show, or None when there is nothing further.

    Filtering changes the set size, so this does not track upstream paging
    exactly.
    """
    try:
        cursor = int(result.cursor)
    except ValueError:
        return None
    if cursor <= 0 or cursor >= result.total:
        return None
    start = max(cursor - len(result.records) + 1, 1)
    return start, cursor
