"""Keyword search over the bioRxiv details API.

The upstream has no full-text search endpoint, only date-range listing
filtered by category and lookup by DOI. A search therefore runs as a fixed
sequence of stages, each producing a ``StageOutcome``:

1. primary listing for the resolved category, ranked by keyword relevance;
2. direct DOI lookup when the query contains a DOI (wins outright);
3. fallback broadening when the primary listing matched nothing: bioRxiv
   over its full history plus medRxiv over the default window, merged and
   ranked again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from biorxiv_client import BiorxivClient
from categories import (
    PRIMARY_SOURCE,
    SECONDARY_SOURCE,
    default_date_range,
    find_doi,
    full_history_range,
    query_as_category,
    resolve_endpoint,
)
from errors import ApiError, TransientUpstreamError
from models import EndpointPlan, Preprint, SearchQuery, SearchResult
from pagination import normalize_result
from scoring import rank_preprints

LOGGER = logging.getLogger(__name__)


class OutcomeKind(Enum):
    SUCCESS = "success"
    EMPTY = "empty"
    TRANSIENT_FAILURE = "transient_failure"
    FATAL_FAILURE = "fatal_failure"


@dataclass(frozen=True, slots=True)
class StageOutcome:
    kind: OutcomeKind
    records: tuple[Preprint, ...] = ()
    error: ApiError | None = None

    @classmethod
    def from_records(cls, records: list[Preprint]) -> StageOutcome:
        if records:
            return cls(OutcomeKind.SUCCESS, tuple(records))
        return cls(OutcomeKind.EMPTY)

    @classmethod
    def from_error(cls, error: ApiError) -> StageOutcome:
        kind = (
            OutcomeKind.TRANSIENT_FAILURE
            if isinstance(error, TransientUpstreamError)
            else OutcomeKind.FATAL_FAILURE
        )
        return cls(kind, error=error)

    @property
    def failed(self) -> bool:
        return self.kind in (OutcomeKind.TRANSIENT_FAILURE, OutcomeKind.FATAL_FAILURE)


NOT_ATTEMPTED = StageOutcome(OutcomeKind.EMPTY)


def select_outcome(primary: StageOutcome, doi_lookup: StageOutcome) -> StageOutcome:
    """Combine the primary listing with the DOI lookup.

    A successful DOI lookup supersedes the primary listing whatever its
    outcome. Otherwise a failed primary listing is raised, and an empty or
    successful one passes through unchanged. Transient and fatal failures
    are raised alike; the distinction only sets the log level when the
    failure is recorded.
    """
    if doi_lookup.kind is OutcomeKind.SUCCESS:
        return doi_lookup
    if primary.failed and primary.error is not None:
        raise primary.error
    return primary


class SearchOrchestrator:
    """Runs one keyword search against a ``BiorxivClient``."""

    def __init__(self, client: BiorxivClient) -> None:
        self.client = client

    def search(self, query: SearchQuery) -> SearchResult:
        plan = resolve_endpoint(query.text, query.date_range)

        primary = self._primary_stage(query, plan)
        doi_lookup = self._doi_stage(query.text)
        outcome = select_outcome(primary, doi_lookup)

        if outcome.kind is OutcomeKind.SUCCESS:
            LOGGER.info("Returning %s record(s) for %r", len(outcome.records), query.text)
            return normalize_result(outcome.records, query.cursor)

        LOGGER.info("No results in initial search for %r; trying broader search strategies", query.text)
        fallback = self._fallback_stage(query)
        if fallback.kind is OutcomeKind.SUCCESS:
            LOGGER.info("Found %s papers in broader search", len(fallback.records))
            return normalize_result(fallback.records, query.cursor)

        return SearchResult.empty(query.cursor or "0")

    def _primary_stage(self, query: SearchQuery, plan: EndpointPlan) -> StageOutcome:
        try:
            collection = self.client.list_details(plan, cursor=query.cursor, limit=query.limit)
        except ApiError as exc:
            outcome = StageOutcome.from_error(exc)
            level = logging.WARNING if outcome.kind is OutcomeKind.TRANSIENT_FAILURE else logging.ERROR
            LOGGER.log(level, "Primary listing failed (%s) for %r: %s", outcome.kind.value, query.text, exc)
            return outcome

        LOGGER.info("Got %s papers from API, filtering for %r", len(collection), query.text)
        return StageOutcome.from_records(rank_preprints(collection, query.text))

    def _doi_stage(self, text: str) -> StageOutcome:
        doi = find_doi(text)
        if doi is None:
            return NOT_ATTEMPTED
        try:
            records = self.client.get_details(doi)
        except ApiError as exc:
            # Non-fatal: the category search result stands.
            LOGGER.warning("DOI lookup failed for %s, falling back to standard search: %s", doi, exc)
            return StageOutcome.from_error(exc)
        return StageOutcome.from_records(records)

    def _fallback_stage(self, query: SearchQuery) -> StageOutcome:
        category = query_as_category(query.text)

        LOGGER.info("Fallback 1: bioRxiv over full posting history")
        broad = self.client.list_details(
            EndpointPlan(PRIMARY_SOURCE, category, full_history_range()),
            cursor=query.cursor,
            limit=query.limit,
        )
        LOGGER.info("Fallback 2: medRxiv over the default window")
        medical = self.client.list_details(
            EndpointPlan(SECONDARY_SOURCE, category, default_date_range()),
        )

        merged = broad + medical
        LOGGER.info("Searching through %s papers from combined sources", len(merged))
        return StageOutcome.from_records(rank_preprints(merged, query.text))
