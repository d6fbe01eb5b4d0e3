"""Caller-facing bioRxiv operations: validate, run, and render as text.

Every function here returns a string. Validation and upstream failures are
turned into readable error text so nothing escapes to the tool transport.
"""

from __future__ import annotations

import logging
import re
from datetime import date

from biorxiv_client import BiorxivClient
from categories import default_date_range
from errors import BiorxivError, ValidationError
from formatting import (
    format_categories,
    format_not_found,
    format_preprint_details,
    format_search_results,
)
from models import DateRange, SearchQuery
from search import SearchOrchestrator

LOGGER = logging.getLogger(__name__)

DEFAULT_LIMIT = 25
MAX_LIMIT = 100
SOURCES = ("biorxiv", "medrxiv")

_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")

_client: BiorxivClient | None = None


def get_client() -> BiorxivClient:
    """Process-wide client, created on first use."""
    global _client
    if _client is None:
        _client = BiorxivClient()
    return _client


def parse_date(value: str, field: str) -> date:
    if not _DATE_PATTERN.fullmatch(value):
        raise ValidationError(f"Invalid {field} format. Use YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid {field}: {value} is not a calendar date") from exc


def build_query(
    query: str,
    from_date: str | None = None,
    to_date: str | None = None,
    limit: int = DEFAULT_LIMIT,
    cursor: str | None = None,
) -> SearchQuery:
    """Validate raw tool arguments into a SearchQuery; raises ValidationError."""
    if not query or not query.strip():
        raise ValidationError("Search query cannot be empty")
    if not 1 <= limit <= MAX_LIMIT:
        raise ValidationError(f"limit must be between 1 and {MAX_LIMIT}")
    if cursor and not cursor.isdigit():
        raise ValidationError("cursor must be a non-negative integer string")

    window = default_date_range()
    start = parse_date(from_date, "from_date") if from_date else window.start
    end = parse_date(to_date, "to_date") if to_date else window.end
    if start > end:
        raise ValidationError("from_date must not be after to_date")

    return SearchQuery(
        text=query,
        date_range=DateRange(start=start, end=end),
        limit=limit,
        cursor=cursor or None,
    )


def search_papers(
    query: str,
    from_date: str | None = None,
    to_date: str | None = None,
    limit: int = DEFAULT_LIMIT,
    cursor: str | None = None,
    client: BiorxivClient | None = None,
) -> str:
    """Keyword search, ranked by relevance, rendered as text."""
    try:
        search_query = build_query(query, from_date, to_date, limit, cursor)
        result = SearchOrchestrator(client or get_client()).search(search_query)
    except BiorxivError as exc:
        LOGGER.error("Error searching bioRxiv papers: %s", exc)
        return f"Error searching bioRxiv papers: {exc}"

    return format_search_results(query, result)


def get_paper_details(
    doi: str,
    server: str = "biorxiv",
    client: BiorxivClient | None = None,
) -> str:
    """Full record for one DOI, or a not-found message."""
    try:
        if not doi or not doi.strip() or "/" not in doi:
            raise ValidationError("Invalid DOI format. Expected format: 10.1101/XXXXXXX")
        if server not in SOURCES:
            raise ValidationError(f"server must be one of: {', '.join(SOURCES)}")
        records = (client or get_client()).get_details(doi.strip(), source=server)
    except BiorxivError as exc:
        LOGGER.error("Error fetching paper details: %s", exc)
        return f"Error fetching paper details: {exc}"

    if not records:
        return format_not_found(doi)
    # The API lists every posted version; the last entry is the latest.
    return format_preprint_details(records[-1], source=server)


def get_categories() -> str:
    return format_categories()
