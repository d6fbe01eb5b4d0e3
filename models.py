"""Shared typed models for the preprint search service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True, slots=True)
class Category:
    """One bioRxiv subject area: machine name plus display name."""

    name: str
    description: str


@dataclass(frozen=True, slots=True)
class DateRange:
    start: date
    end: date

    def as_path(self) -> str:
        return f"{self.start.isoformat()}/{self.end.isoformat()}"


@dataclass(frozen=True, slots=True)
class EndpointPlan:
    """Where a listing request goes: upstream server, category filter, window."""

    source: str
    category: str
    date_range: DateRange


@dataclass(frozen=True, slots=True)
class SearchQuery:
    """Validated caller arguments for one search call."""

    text: str
    date_range: DateRange
    limit: int = 25
    cursor: str | None = None


@dataclass(frozen=True, slots=True)
class Preprint:
    """Normalized preprint record as returned by the details endpoint."""

    doi: str
    title: str
    authors: str
    abstract: str
    date: str
    category: str = ""
    type: str = ""
    version: str = ""
    published: str = ""
    license: str = ""
    author_corresponding: str = ""
    author_corresponding_institution: str = ""
    server: str = ""


@dataclass(frozen=True, slots=True)
class SearchResult:
    records: tuple[Preprint, ...]
    total: int
    cursor: str

    @classmethod
    def empty(cls, cursor: str = "0") -> SearchResult:
        return cls(records=(), total=0, cursor=cursor)
