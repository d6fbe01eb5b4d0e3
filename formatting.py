"""Plain-text renderings returned to tool callers."""

from __future__ import annotations

import re

from categories import sorted_categories
from models import Preprint, SearchResult
from pagination import display_window

ABSTRACT_PREVIEW_CHARS = 200

_SURROUNDING_QUOTES = re.compile(r'^\s*"|"\s*$')


def clean_title(title: str) -> str:
    return _SURROUNDING_QUOTES.sub("", title).strip()


def is_published(preprint: Preprint) -> bool:
    # The API reports unpublished preprints as "NA".
    return bool(preprint.published) and preprint.published.upper() != "NA"


def format_search_results(query: str, result: SearchResult) -> str:
    """Render ranked search results, or the no-results guidance."""
    if not result.records:
        return format_no_results(query)

    lines = [f'# Search Results for "{query}"', "", f"Found {result.total} results.", ""]

    window = display_window(result)
    if window is not None:
        start, end = window
        lines.append(f"Showing results {start} to {end} of {result.total}.")
        lines.append(f'For more results, use cursor: "{result.cursor}"')
        lines.append("")

    for index, preprint in enumerate(result.records, start=1):
        lines.append(f"## {index}. {clean_title(preprint.title)}")
        lines.append("")
        lines.append(f"**Authors:** {preprint.authors}")
        lines.append("")
        lines.append(f"**DOI:** {preprint.doi}")
        lines.append(f"**URL:** https://doi.org/{preprint.doi}")
        lines.append(f"**Posted:** {preprint.date}")
        if preprint.category:
            lines.append(f"**Category:** {preprint.category}")
        if preprint.type:
            lines.append(f"**Type:** {preprint.type}")
        if preprint.abstract:
            preview = preprint.abstract[:ABSTRACT_PREVIEW_CHARS]
            ellipsis = "..." if len(preprint.abstract) > ABSTRACT_PREVIEW_CHARS else ""
            lines.append("")
            lines.append(f"**Abstract Preview:** {preview}{ellipsis}")
        lines.append("")
        lines.append(f"To view full details, use `get_paper_details` with DOI: {preprint.doi}")
        lines.append("")
        if index < len(result.records):
            lines.append("---")
            lines.append("")

    return "\n".join(lines)


def format_no_results(query: str) -> str:
    return "\n".join([
        f'No results found for "{query}".',
        "",
        "Suggestions:",
        "- Try using more general keywords",
        "- Check the spelling of your search terms",
        "- Try removing filters like date ranges",
        "",
    ])


def format_preprint_details(preprint: Preprint, source: str = "biorxiv") -> str:
    """Render the full record for one preprint, including a citation line."""
    title = clean_title(preprint.title)
    lines = [
        f"# {title}",
        "",
        "## Authors",
        preprint.authors,
        "",
        "## Abstract",
        preprint.abstract,
        "",
        "## Paper Details",
        "",
        f"**DOI:** {preprint.doi}",
        f"**URL:** https://doi.org/{preprint.doi}",
        f"**Posted Date:** {preprint.date}",
    ]
    if preprint.version:
        lines.append(f"**Version:** {preprint.version}")
    if preprint.category:
        lines.append(f"**Category:** {preprint.category}")
    if preprint.type:
        lines.append(f"**Type:** {preprint.type}")

    lines += ["", "## Publication Status", ""]
    if is_published(preprint):
        lines.append(f"This preprint has been published in: {preprint.published}")
    else:
        lines.append("This preprint has not yet been published in a peer-reviewed journal.")

    if preprint.license:
        lines += ["", "## License", "", preprint.license]

    server_label = "medRxiv" if source == "medrxiv" else "bioRxiv"
    lines += [
        "",
        "## Citation",
        "",
        f'{preprint.authors}. "{title}". {server_label} {preprint.date[:4]}. DOI: {preprint.doi}',
        "",
        "## Links",
        "",
        f"- [View on {server_label}](https://doi.org/{preprint.doi})",
        f"- [PDF](https://www.{source}.org/content/{preprint.doi.removeprefix('10.1101/')}.full.pdf)",
        "",
    ]
    return "\n".join(lines)


def format_not_found(doi: str) -> str:
    return (
        f'No paper found with DOI "{doi}".\n\n'
        "Please check that the DOI is correct and try again. "
        'DOIs for bioRxiv papers typically start with "10.1101/".'
    )


def format_categories() -> str:
    """Render the subject catalog sorted by display name, with usage hints."""
    lines = [
        "# bioRxiv Categories",
        "",
        "Use these categories in your search queries for more targeted results.",
        "",
        "## Available Categories",
        "",
    ]
    lines += [f"- **{category.description}** ({category.name})" for category in sorted_categories()]
    lines += [
        "",
        "## Usage Examples",
        "",
        "You can use these categories in your searches with the `search_papers` tool "
        "by including them in your query string.",
        "",
        "Examples:",
        "- `CRISPR neuroscience` - Search for CRISPR papers in neuroscience",
        "- `machine learning bioinformatics` - Search for machine learning papers in bioinformatics",
        "- `COVID-19 immunology` - Search for COVID-19 papers in immunology",
        "",
    ]
    return "\n".join(lines)
