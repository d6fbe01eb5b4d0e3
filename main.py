"""CLI entrypoint for the bioRxiv search and bio part tool servers."""

from __future__ import annotations

import argparse
import logging

from dotenv import load_dotenv


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="bioRxiv preprint search and bio part lookup")
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run an MCP tool server over stdio")
    serve.add_argument(
        "--server",
        choices=["biorxiv", "bio-parts"],
        default="biorxiv",
        help="Which tool server to run (default: biorxiv)",
    )

    search = subparsers.add_parser("search", help="Search bioRxiv/medRxiv by keyword")
    search.add_argument("query", help="Keywords, a category name, or a DOI")
    search.add_argument("--from-date", default=None, help="Start date, YYYY-MM-DD (default: five years ago)")
    search.add_argument("--to-date", default=None, help="End date, YYYY-MM-DD (default: today)")
    search.add_argument("--limit", type=int, default=25, help="Maximum number of results (1-100)")
    search.add_argument("--cursor", default=None, help="Pagination cursor from a previous search")

    details = subparsers.add_parser("details", help="Show one preprint by DOI")
    details.add_argument("doi")
    details.add_argument("--server", choices=["biorxiv", "medrxiv"], default="biorxiv")

    subparsers.add_parser("categories", help="List bioRxiv subject categories")

    parts = subparsers.add_parser("parts", help="List bio part SVG ids matching a substring")
    parts.add_argument("query", nargs="?", default="")

    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> str | None:
    """Execute one CLI command; returns the text to print, if any."""
    # Imported late so .env values are visible to module-level config.
    import tools  # noqa: PLC0415
    from parts_index import PartsIndex, parts_as_json  # noqa: PLC0415

    if args.command == "serve":
        from server import run_server  # noqa: PLC0415
        run_server(args.server)
        return None
    if args.command == "search":
        return tools.search_papers(
            args.query,
            from_date=args.from_date,
            to_date=args.to_date,
            limit=args.limit,
            cursor=args.cursor,
        )
    if args.command == "details":
        return tools.get_paper_details(args.doi, server=args.server)
    if args.command == "categories":
        return tools.get_categories()
    return parts_as_json(PartsIndex.load().search(args.query))


def main(argv: list[str] | None = None) -> None:
    """Initialize config and execute the requested command."""
    load_dotenv()
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    output = run(args)
    if output is not None:
        print(output)


if __name__ == "__main__":
    main()
