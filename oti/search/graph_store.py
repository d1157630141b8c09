"""
Graph Store — Neo4j lookups for the search aggregator.

Uses ``langchain_neo4j.Neo4jGraph`` for the two read-only operations the
aggregator needs: reading one property of a node, and walking from a
tree node up to the root of the tree that contains it.
"""

import logging
import re
from typing import Any

from langchain_neo4j import Neo4jGraph
from neo4j.exceptions import DriverError, Neo4jError

from oti.search.config import SearchSettings
from oti.shared.exceptions import SearchError

logger = logging.getLogger("oti.search.graph_store")

# Relationship types are injected into f-string Cypher
_SAFE_REL_TYPE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class Neo4jGraphStore:
    """Read-only property and traversal access to the study graph."""

    def __init__(self, settings: SearchSettings | None = None, graph: Neo4jGraph | None = None):
        settings = settings or SearchSettings()
        if not _SAFE_REL_TYPE.match(settings.tree_edge_type):
            raise SearchError(f"Invalid tree edge type: {settings.tree_edge_type!r}")
        self._graph = graph or Neo4jGraph(
            url=settings.neo4j_uri,
            username=settings.neo4j_username,
            password=settings.neo4j_password,
            database=settings.neo4j_database,
            refresh_schema=False,
        )
        self._edge = settings.tree_edge_type

    def _query(self, cypher: str, params: dict | None = None) -> list[dict[str, Any]]:
        try:
            return self._graph.query(cypher, params or {})
        except (Neo4jError, DriverError, ValueError) as exc:
            # langchain_neo4j re-raises rejected Cypher as ValueError
            logger.warning("Graph query failed: %s", exc)
            raise

    def get_property(self, entity_id: str, property_name: str) -> str | None:
        """Return ``property_name`` of the node, or None if node or property is absent."""
        rows = self._query(
            "MATCH (n) WHERE elementId(n) = $id "
            "RETURN n[$prop] AS value LIMIT 1",
            {"id": entity_id, "prop": property_name},
        )
        if not rows or rows[0]["value"] is None:
            return None
        return str(rows[0]["value"])

    def get_containing_root(self, entity_id: str) -> str | None:
        """Return the id of the root of the tree containing the node.

        A node that has no outgoing tree edge is its own root.  Returns None
        when the node does not exist.
        """
        rows = self._query(
            "MATCH (n) WHERE elementId(n) = $id "
            f"MATCH (n)-[:{self._edge}*0..]->(root) "
            f"WHERE NOT (root)-[:{self._edge}]->() "
            "RETURN elementId(root) AS root_id LIMIT 1",
            {"id": entity_id},
        )
        if not rows:
            logger.debug("No root found for node %s", entity_id)
            return None
        return rows[0]["root_id"]
