"""
Entry point — runs a single search against Neo4j and prints the results.

This bypasses the MCP server and calls the aggregator directly.  Useful
for checking the indexes after a study load.

Usage:
    python main.py --ensure-indexes
    python main.py studies ot:studyId Smith2020
    python main.py nodes ot:ottTaxonName "Homo sapiens" --fulltext-only

``--ensure-indexes`` creates the six fulltext indexes on a fresh
database; combined with a search it runs before the search.

For MCP server mode (SSE transport):
    python -m oti.search.server
"""

import argparse
import json
import logging
import sys

from oti.search.config import SearchSettings
from oti.search.factory import create_neo4j_aggregator
from oti.search.index_service import Neo4jIndexService
from oti.search.models import EntityClass, SearchPredicate
from oti.shared.database import Neo4jHandler
from oti.shared.exceptions import OTIError
from oti.shared.logging import setup_logging

ENTITY_CLASSES = {
    "studies": EntityClass.STUDY,
    "trees": EntityClass.TREE,
    "nodes": EntityClass.TREE_NODE,
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search the OTI study graph.")
    parser.add_argument("entity", nargs="?", choices=sorted(ENTITY_CLASSES))
    parser.add_argument("property_name", nargs="?")
    parser.add_argument("search_value", nargs="?")
    parser.add_argument(
        "--ensure-indexes", action="store_true",
        help="create the fulltext indexes if they don't exist",
    )
    modes = parser.add_mutually_exclusive_group()
    modes.add_argument("--exact-only", action="store_true")
    modes.add_argument("--fulltext-only", action="store_true")
    args = parser.parse_args(argv)

    if args.entity is None:
        if not args.ensure_indexes:
            parser.error("entity, property_name and search_value are required")
    elif args.search_value is None:
        parser.error("property_name and search_value are required")
    return args


def ensure_indexes(settings: SearchSettings, logger: logging.Logger) -> list[str]:
    """Connect, create any missing fulltext index, and disconnect."""
    with Neo4jHandler.from_settings(settings) as handler:
        declared = Neo4jIndexService(handler, settings).ensure_indexes()
    logger.info("%d fulltext indexes ready", len(declared))
    return declared


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = SearchSettings()
    logger = setup_logging("oti.main", level=settings.log_level, log_file=settings.log_file)

    if args.ensure_indexes:
        try:
            ensure_indexes(settings, logger)
        except OTIError as exc:
            logger.error("Index setup failed: %s", exc)
            return 1
        if args.entity is None:
            return 0

    predicate = SearchPredicate(
        property_name=args.property_name,
        search_value=args.search_value,
        match_exact=not args.fulltext_only,
        match_fulltext=not args.exact_only,
    )

    try:
        aggregator, handler = create_neo4j_aggregator(settings)
    except OTIError as exc:
        logger.error("%s", exc)
        return 1

    try:
        results = aggregator.search(predicate, ENTITY_CLASSES[args.entity])
    except OTIError as exc:
        logger.error("Search failed: %s", exc)
        return 1
    finally:
        handler.close()

    print(json.dumps([r.to_dict() for r in results], indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
