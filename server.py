"""MCP tool servers: bioRxiv search and the bio part SVG index."""

from __future__ import annotations

import logging
from typing import Annotated

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

import tools
from parts_index import PartNotFoundError, PartsIndex, parts_as_json

LOGGER = logging.getLogger(__name__)


def create_biorxiv_server() -> FastMCP:
    mcp = FastMCP("mcp-biorxiv")

    @mcp.tool()
    def search_papers(
        query: Annotated[str, Field(description="Search query string (e.g., 'CRISPR', 'machine learning')")],
        from_date: Annotated[
            str | None, Field(description="Start date in YYYY-MM-DD format (e.g., '2023-01-01')")
        ] = None,
        to_date: Annotated[
            str | None, Field(description="End date in YYYY-MM-DD format (e.g., '2023-12-31')")
        ] = None,
        limit: Annotated[int, Field(ge=1, le=100, description="Maximum number of results to return (1-100)")] = 25,
        cursor: Annotated[
            str | None, Field(description="Cursor for pagination from previous search results")
        ] = None,
    ) -> str:
        """Search for papers on bioRxiv by keywords, date range, and other criteria"""
        return tools.search_papers(query, from_date=from_date, to_date=to_date, limit=limit, cursor=cursor)

    @mcp.tool()
    def get_paper_details(
        doi: Annotated[str, Field(description="DOI of the paper (e.g., '10.1101/2023.01.01.12345')")],
        server: Annotated[str, Field(description="Preprint server: 'biorxiv' or 'medrxiv'")] = "biorxiv",
    ) -> str:
        """Get detailed information about a specific paper by DOI"""
        return tools.get_paper_details(doi, server=server)

    @mcp.tool()
    def get_categories() -> str:
        """List all available categories on bioRxiv for more targeted searches"""
        return tools.get_categories()

    return mcp


def create_parts_server(index: PartsIndex) -> FastMCP:
    mcp = FastMCP("bio-part-search")

    @mcp.tool()
    def search_bio_parts(
        query: Annotated[str, Field(description="Substring to filter part IDs (optional).")] = "",
    ) -> str:
        """List or search available bio part SVGs by ID."""
        return parts_as_json(index.search(query))

    @mcp.tool()
    def get_bio_part_svg(id: Annotated[str, Field(description="ID of the bio part to retrieve.")]) -> str:  # noqa: A002
        """Retrieve the raw SVG content for a bio part by ID."""
        try:
            return index.get_svg(id)
        except PartNotFoundError:
            raise ToolError(f'Error: part "{id}" not found.') from None

    @mcp.tool()
    def list_all_bio_parts() -> str:
        """List all available bio part SVG IDs."""
        return parts_as_json(index.search())

    return mcp


def run_server(name: str) -> None:
    """Serve one of the tool servers over stdio until the client disconnects."""
    if name == "bio-parts":
        mcp = create_parts_server(PartsIndex.load())
    else:
        mcp = create_biorxiv_server()
    LOGGER.info("%s MCP server running on stdio", name)
    mcp.run("stdio")
