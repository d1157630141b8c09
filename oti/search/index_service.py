"""
Index Service — Neo4j fulltext indexes for the search aggregator.

Six Lucene-backed fulltext indexes, one per entity class and mode, are
queried through ``db.index.fulltext.queryNodes``.  Each query holds its
own driver session for as long as the returned ``Neo4jIndexHits`` is
open, so hits stream from the server instead of being materialised.
"""

import logging
from typing import Iterator

from neo4j import Result, Session
from neo4j.exceptions import Neo4jError, ServiceUnavailable

from oti.search.config import SearchSettings
from oti.search.fuzzy import FuzzyQuery
from oti.search.models import EntityClass, IndexHit, IndexMode
from oti.search.properties import searchable_properties
from oti.shared.database import Neo4jHandler
from oti.shared.exceptions import IndexUnavailable

logger = logging.getLogger("oti.search.index_service")

_QUERY_NODES = (
    "CALL db.index.fulltext.queryNodes($index, $query) "
    "YIELD node "
    "RETURN elementId(node) AS id, properties(node) AS props"
)

_ANALYZERS: dict[IndexMode, str] = {
    IndexMode.EXACT: "keyword",
    IndexMode.FULLTEXT: "standard-no-stop-words",
}

# The keyword analyser stores values as typed, without lower-casing
_PRESERVES_CASE: dict[IndexMode, bool] = {
    IndexMode.EXACT: True,
    IndexMode.FULLTEXT: False,
}


class Neo4jIndexHits:
    """Streaming hits of one index query, bound to a dedicated session."""

    def __init__(self, index_name: str, session: Session, result: Result):
        self._index_name = index_name
        self._session = session
        self._result = result
        self._closed = False

    @property
    def index_name(self) -> str:
        return self._index_name

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[IndexHit]:
        try:
            for record in self._result:
                yield IndexHit(entity_id=record["id"], properties=dict(record["props"]))
        except (Neo4jError, ServiceUnavailable) as exc:
            logger.warning("Reading hits from %s failed: %s", self._index_name, exc)
            raise IndexUnavailable(self._index_name, str(exc)) from exc

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._result.consume()
        except (Neo4jError, ServiceUnavailable) as exc:
            logger.debug("Discarding unread hits from %s failed: %s", self._index_name, exc)
        finally:
            self._session.close()


class Neo4jIndexService:
    """Fulltext index access over a shared ``Neo4jHandler``."""

    def __init__(self, handler: Neo4jHandler, settings: SearchSettings | None = None):
        self._handler = handler
        self._settings = settings or SearchSettings()

    def index_name(self, entity_class: EntityClass, mode: IndexMode) -> str:
        s = self._settings
        names = {
            (EntityClass.STUDY, IndexMode.EXACT): s.study_meta_index_exact,
            (EntityClass.STUDY, IndexMode.FULLTEXT): s.study_meta_index_fulltext,
            (EntityClass.TREE, IndexMode.EXACT): s.tree_root_index_exact,
            (EntityClass.TREE, IndexMode.FULLTEXT): s.tree_root_index_fulltext,
            (EntityClass.TREE_NODE, IndexMode.EXACT): s.tree_node_index_exact,
            (EntityClass.TREE_NODE, IndexMode.FULLTEXT): s.tree_node_index_fulltext,
        }
        return names[(entity_class, mode)]

    def label(self, entity_class: EntityClass) -> str:
        s = self._settings
        return {
            EntityClass.STUDY: s.study_meta_label,
            EntityClass.TREE: s.tree_root_label,
            EntityClass.TREE_NODE: s.tree_node_label,
        }[entity_class]

    def query(
        self, entity_class: EntityClass, mode: IndexMode, query: FuzzyQuery,
    ) -> Neo4jIndexHits:
        """Open a query on the index for ``entity_class`` and ``mode``.

        Raises:
            IndexUnavailable: If the session cannot be opened or the query
                is rejected (e.g. the index does not exist).
        """
        index_name = self.index_name(entity_class, mode)
        lucene = query.to_lucene(preserve_case=_PRESERVES_CASE[mode])
        logger.debug("Querying %s with %s", index_name, lucene)

        try:
            session = self._handler.session()
        except (Neo4jError, ServiceUnavailable, RuntimeError) as exc:
            logger.warning("Cannot open a session for %s: %s", index_name, exc)
            raise IndexUnavailable(index_name, str(exc)) from exc

        try:
            result = session.run(_QUERY_NODES, {"index": index_name, "query": lucene})
        except (Neo4jError, ServiceUnavailable) as exc:
            session.close()
            logger.warning("Query on %s failed: %s", index_name, exc)
            raise IndexUnavailable(index_name, str(exc)) from exc

        return Neo4jIndexHits(index_name, session, result)

    # ─── Schema ────────────────────────────────────────────

    def ensure_indexes(self) -> list[str]:
        """Create the six fulltext indexes if they don't exist.

        Returns:
            Names of the indexes that were declared.

        Raises:
            IndexUnavailable: If an index cannot be created.
        """
        declared: list[str] = []
        for entity_class in EntityClass:
            props = searchable_properties(entity_class)
            for mode in IndexMode:
                names = [
                    p.name for p in props
                    if (p.exact if mode is IndexMode.EXACT else p.fulltext)
                ]
                if not names:
                    continue
                index_name = self.index_name(entity_class, mode)
                fields = ", ".join(f"n.`{name}`" for name in names)
                try:
                    self._handler.run(
                        f"CREATE FULLTEXT INDEX {index_name} IF NOT EXISTS "
                        f"FOR (n:{self.label(entity_class)}) ON EACH [{fields}] "
                        f"OPTIONS {{indexConfig: {{`fulltext.analyzer`: '{_ANALYZERS[mode]}'}}}}"
                    )
                except (Neo4jError, ServiceUnavailable) as exc:
                    logger.warning("Creating %s failed: %s", index_name, exc)
                    raise IndexUnavailable(index_name, str(exc)) from exc
                declared.append(index_name)
                logger.info("Fulltext index %s ready (%d properties)", index_name, len(names))
        return declared
