"""
OTI Search — MCP Server

Exposes the study, tree and tree-node searches as read-only tools over
the Neo4j-hosted study graph, plus a listing of the searchable
properties.  Every tool returns a JSON string.

Run as:  python -m oti.search.server        (SSE transport via uvicorn)
"""

import json
from typing import Any

from mcp.server.fastmcp import FastMCP

from oti.search.aggregator import SearchAggregator
from oti.search.config import SearchSettings
from oti.search.factory import create_neo4j_aggregator
from oti.search.models import EntityClass, SearchPredicate
from oti.search.properties import vocabulary
from oti.shared.database import Neo4jHandler
from oti.shared.exceptions import OTIError
from oti.shared.logging import correlation_logger, setup_logging

logger = setup_logging("oti.search.server", level="INFO")

mcp = FastMCP("OTISearch")

# ─── Shared resources (lazy init) ─────────────────────────

_settings: SearchSettings | None = None
_aggregator: SearchAggregator | None = None
_handler: Neo4jHandler | None = None


def _get_settings() -> SearchSettings:
    """Lazy-initialise settings from environment variables."""
    global _settings
    if _settings is None:
        _settings = SearchSettings()
    return _settings


def _get_aggregator() -> SearchAggregator:
    """Connect to Neo4j and build the aggregator on first tool call."""
    global _aggregator, _handler
    if _aggregator is None:
        _aggregator, _handler = create_neo4j_aggregator(_get_settings())
    return _aggregator


def _run_search(
    entity_class: EntityClass,
    property_name: str,
    search_value: str,
    match_exact: bool,
    match_fulltext: bool,
) -> str:
    log = correlation_logger(logger)
    predicate = SearchPredicate(
        property_name=property_name,
        search_value=search_value,
        match_exact=match_exact,
        match_fulltext=match_fulltext,
    )
    log.info("search %s %s=%r", entity_class.value, property_name, search_value)
    try:
        results = _get_aggregator().search(predicate, entity_class)
    except OTIError as exc:
        log.warning("search failed: %s", exc)
        payload: Any = {"error": str(exc), "kind": type(exc).__name__}
    else:
        payload = [r.to_dict() for r in results]
    return json.dumps(payload, default=str)


# ─── Tool 1 ──────────────────────────────────────────────


@mcp.tool()
def search_studies(
    property_name: str,
    search_value: str,
    match_exact: bool = True,
    match_fulltext: bool = True,
) -> str:
    """Find studies whose metadata matches a value.

    Matching is fuzzy: short values must match exactly, longer values
    tolerate one or two typos.

    Args:
        property_name: Study property, e.g. "ot:studyId", "ot:curatorName",
              "ot:studyPublicationReference".  See list_searchable_properties.
        search_value: Value to look for, e.g. "Smith2020".
        match_exact: Search the exact-token index.
        match_fulltext: Search the tokenised free-text index.

    Returns: JSON list of {"ot:studyId": ...} records.
    """
    return _run_search(
        EntityClass.STUDY, property_name, search_value, match_exact, match_fulltext,
    )


# ─── Tool 2 ──────────────────────────────────────────────


@mcp.tool()
def search_trees(
    property_name: str,
    search_value: str,
    match_exact: bool = True,
    match_fulltext: bool = True,
) -> str:
    """Find trees whose root carries a matching property.

    Args:
        property_name: Tree property, e.g. "ot:branchLengthMode",
              "ot:inGroupClade", "tree_id".
        search_value: Value to look for.
        match_exact: Search the exact-token index.
        match_fulltext: Search the tokenised free-text index.

    Returns: JSON list of {"tree_id", "nexson_id", "ot:studyId"} records.
    """
    return _run_search(
        EntityClass.TREE, property_name, search_value, match_exact, match_fulltext,
    )


# ─── Tool 3 ──────────────────────────────────────────────


@mcp.tool()
def search_tree_nodes(
    property_name: str,
    search_value: str,
    match_exact: bool = True,
    match_fulltext: bool = True,
) -> str:
    """Find tree nodes matching a value, grouped by the tree they belong to.

    Args:
        property_name: Node property, e.g. "ot:ottTaxonName", "ot:ottId",
              "ot:originalLabel".
        search_value: Value to look for, e.g. "Homo sapiens".
        match_exact: Search the exact-token index.
        match_fulltext: Search the tokenised free-text index.

    Returns: JSON list with one record per tree:
        {"nexson_id", "ot:studyId", "matched_nodes": [{"nexson_id"}, ...]}.
    """
    return _run_search(
        EntityClass.TREE_NODE, property_name, search_value, match_exact, match_fulltext,
    )


# ─── Tool 4 ──────────────────────────────────────────────


@mcp.tool()
def list_searchable_properties() -> str:
    """List the properties that can be searched, by entity class.

    Each property states whether it is in the exact index, the fulltext
    index, or both.
    """
    return json.dumps(vocabulary())


# ─── Entry point ──────────────────────────────────────────

# Create the ASGI app for uvicorn
app = mcp.sse_app()

if __name__ == "__main__":
    import uvicorn

    settings = _get_settings()
    logger.info(f"Starting OTI search MCP server (SSE transport on {settings.host}:{settings.port})")

    uvicorn.run(
        "oti.search.server:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
