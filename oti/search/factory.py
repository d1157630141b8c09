"""Wires the search aggregator to its Neo4j collaborators."""

import logging

from langchain_neo4j import Neo4jGraph

from oti.search.aggregator import SearchAggregator
from oti.search.config import SearchSettings
from oti.search.graph_store import Neo4jGraphStore
from oti.search.index_service import Neo4jIndexService
from oti.shared.database import Neo4jHandler
from oti.shared.exceptions import DatabaseConnectionError, OTIError

logger = logging.getLogger("oti.search.factory")


def create_neo4j_aggregator(
    settings: SearchSettings | None = None,
) -> tuple[SearchAggregator, Neo4jHandler]:
    """Connect to Neo4j and build an aggregator over its indexes.

    Returns:
        The aggregator and the connected handler; the caller closes the
        handler when done.

    Raises:
        DatabaseConnectionError: If credentials are missing or Neo4j
            cannot be reached.
    """
    settings = settings or SearchSettings()
    handler = Neo4jHandler.from_settings(settings).connect()
    try:
        graph = Neo4jGraph(
            url=handler.uri,
            username=handler.username,
            password=handler.password,
            database=handler.database,
            refresh_schema=False,
        )
        aggregator = SearchAggregator(
            index=Neo4jIndexService(handler, settings),
            graph=Neo4jGraphStore(settings, graph=graph),
            strict_properties=settings.strict_properties,
        )
    except OTIError:
        handler.close()
        raise
    except ValueError as exc:
        # langchain_neo4j reports connection and auth failures as ValueError
        handler.close()
        raise DatabaseConnectionError(str(exc)) from exc
    logger.info("Search aggregator ready (db=%s)", handler.database)
    return aggregator, handler
