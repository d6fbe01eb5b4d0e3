"""bioRxiv subject catalog and query-to-endpoint resolution."""

from __future__ import annotations

import logging
import re
from datetime import UTC, date, datetime
from types import MappingProxyType

from models import Category, DateRange, EndpointPlan

LOGGER = logging.getLogger(__name__)

PRIMARY_SOURCE = "biorxiv"
SECONDARY_SOURCE = "medrxiv"

# First day of bioRxiv postings; used when broadening a search to all time.
EARLIEST_POSTING_DATE = date(2013, 1, 1)
DEFAULT_WINDOW_YEARS = 5

CARDIOVASCULAR_CATEGORY = "cardiovascular_medicine"

_MEDICAL_TRIGGERS: tuple[str, ...] = ("cardio", "heart", "medical", "medicine")
_CARDIOVASCULAR_TRIGGERS: tuple[str, ...] = ("cardiovascular", "cardio")

_DOI_PATTERN = re.compile(r"10\.\d{4,9}/[^\s\"'<>]+")

# Keyed by machine name, kept in the upstream's alphabetical order; scan order
# decides which category wins when a query contains several display names.
CATEGORIES: MappingProxyType[str, Category] = MappingProxyType({
    category.name: category
    for category in (
        Category("animal_behavior_and_cognition", "Animal Behavior and Cognition"),
        Category("biochemistry", "Biochemistry"),
        Category("bioengineering", "Bioengineering"),
        Category("bioinformatics", "Bioinformatics"),
        Category("biophysics", "Biophysics"),
        Category("cancer_biology", "Cancer Biology"),
        Category("cell_biology", "Cell Biology"),
        Category("clinical_trials", "Clinical Trials"),
        Category("developmental_biology", "Developmental Biology"),
        Category("ecology", "Ecology"),
        Category("epidemiology", "Epidemiology"),
        Category("evolutionary_biology", "Evolutionary Biology"),
        Category("genetics", "Genetics"),
        Category("genomics", "Genomics"),
        Category("immunology", "Immunology"),
        Category("microbiology", "Microbiology"),
        Category("molecular_biology", "Molecular Biology"),
        Category("neuroscience", "Neuroscience"),
        Category("paleontology", "Paleontology"),
        Category("pathology", "Pathology"),
        Category("pharmacology_and_toxicology", "Pharmacology and Toxicology"),
        Category("physiology", "Physiology"),
        Category("plant_biology", "Plant Biology"),
        Category("scientific_communication_and_education", "Scientific Communication and Education"),
        Category("synthetic_biology", "Synthetic Biology"),
        Category("systems_biology", "Systems Biology"),
        Category("zoology", "Zoology"),
    )
})


def sorted_categories() -> list[Category]:
    """Catalog entries ordered by display name."""
    return sorted(CATEGORIES.values(), key=lambda c: c.description.lower())


def today_utc() -> date:
    return datetime.now(UTC).date()


def default_date_range(today: date | None = None) -> DateRange:
    """Trailing five-year window ending today."""
    end = today or today_utc()
    try:
        start = end.replace(year=end.year - DEFAULT_WINDOW_YEARS)
    except ValueError:
        # Feb 29 has no counterpart five years back.
        start = end.replace(year=end.year - DEFAULT_WINDOW_YEARS, day=28)
    return DateRange(start=start, end=end)


def full_history_range(today: date | None = None) -> DateRange:
    return DateRange(start=EARLIEST_POSTING_DATE, end=today or today_utc())


def query_as_category(text: str) -> str:
    return text.replace(" ", "_")


def match_category(text: str) -> Category | None:
    """Return the first catalog entry named by the query, if any."""
    lowered = text.lower()
    for category in CATEGORIES.values():
        display = category.description.lower()
        machine = category.name.lower()
        if lowered in (display, machine) or display in lowered or machine in lowered:
            return category
    return None


def resolve_endpoint(text: str, date_range: DateRange) -> EndpointPlan:
    """Pick the upstream server and category filter for a free-text query.

    Resolution order, first match wins:
    1. the query names a catalog category -> bioRxiv with that category;
    2. the query mentions a medical trigger -> medRxiv, pinned to
       cardiovascular medicine when a cardiovascular trigger is present;
    3. otherwise bioRxiv with the raw query as the category.
    """
    lowered = text.lower()

    matched = match_category(text)
    if matched is not None:
        LOGGER.info("Query %r matches category %r", text, matched.description)
        return EndpointPlan(source=PRIMARY_SOURCE, category=matched.name, date_range=date_range)

    if any(trigger in lowered for trigger in _MEDICAL_TRIGGERS):
        if any(trigger in lowered for trigger in _CARDIOVASCULAR_TRIGGERS):
            LOGGER.info("Medical topic detected; using medRxiv %s", CARDIOVASCULAR_CATEGORY)
            category = CARDIOVASCULAR_CATEGORY
        else:
            LOGGER.info("Medical topic detected; using medRxiv with query as category")
            category = query_as_category(text)
        return EndpointPlan(source=SECONDARY_SOURCE, category=category, date_range=date_range)

    LOGGER.info("Using query %r as category parameter", text)
    return EndpointPlan(source=PRIMARY_SOURCE, category=query_as_category(text), date_range=date_range)


def find_doi(text: str) -> str | None:
    """Return the first DOI-shaped token in the query, or None."""
    match = _DOI_PATTERN.search(text)
    if match is None:
        return None
    # Sentence punctuation directly after a DOI is not part of it.
    return match.group(0).rstrip(".,;:)]")
