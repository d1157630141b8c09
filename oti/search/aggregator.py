"""
Search Aggregator — folds raw index hits into entity-level results.

One routine serves all three searches.  It builds the fuzzy query, runs
it against the exact and/or fulltext index of the requested entity
class, and feeds every hit into a result shape that owns the grouping
rule for that class:

* study:     hits are study metadata nodes, keyed by study id
* tree:      hits are tree roots, keyed by root identity
* tree node: hits are nodes, grouped under the root of their tree

Both passes feed the same shape, so an entity hit by the exact and the
fulltext index is reported once.
"""

import logging
from contextlib import closing
from typing import Any

from oti.search.fuzzy import build_fuzzy_query
from oti.search.interfaces import GraphStore, IndexService
from oti.search.models import (
    NEXSON_ID,
    OT_STUDY_ID,
    TREE_ID,
    EntityClass,
    IndexHit,
    IndexMode,
    MatchedNode,
    SearchPredicate,
    StudyResult,
    TreeNodeSearchResult,
    TreeResult,
)
from oti.search.properties import lookup
from oti.shared.exceptions import InvalidPredicate, MissingProperty, RootResolutionFailure

logger = logging.getLogger("oti.search.aggregator")


def _require(graph: GraphStore, entity_id: str, property_name: str) -> str:
    value = graph.get_property(entity_id, property_name)
    if value is None:
        raise MissingProperty(entity_id, property_name)
    return value


# ─── Result shapes ────────────────────────────────────────


class _StudyShape:
    # study ids come straight from the hit; every shape takes the graph
    def __init__(self, _graph: GraphStore):
        self._studies: dict[str, StudyResult] = {}

    def fold(self, hit: IndexHit) -> None:
        study_id = hit.get(OT_STUDY_ID)
        if study_id is None:
            raise MissingProperty(hit.entity_id, OT_STUDY_ID)
        study_id = str(study_id)
        # same key always maps to an equal record
        self._studies[study_id] = StudyResult(study_id)

    def results(self) -> list[StudyResult]:
        return list(self._studies.values())


class _TreeShape:
    def __init__(self, graph: GraphStore):
        self._graph = graph
        self._root_ids: set[str] = set()

    def fold(self, hit: IndexHit) -> None:
        self._root_ids.add(hit.entity_id)

    def results(self) -> list[TreeResult]:
        return [
            TreeResult(
                tree_id=_require(self._graph, root_id, TREE_ID),
                nexson_id=_require(self._graph, root_id, NEXSON_ID),
                study_id=_require(self._graph, root_id, OT_STUDY_ID),
            )
            for root_id in self._root_ids
        ]


class _TreeNodeShape:
    def __init__(self, graph: GraphStore):
        self._graph = graph
        self._nodes_by_root: dict[str, set[str]] = {}

    def fold(self, hit: IndexHit) -> None:
        root_id = self._graph.get_containing_root(hit.entity_id)
        if root_id is None:
            raise RootResolutionFailure(hit.entity_id)
        self._nodes_by_root.setdefault(root_id, set()).add(hit.entity_id)

    def results(self) -> list[TreeNodeSearchResult]:
        results = []
        for root_id, node_ids in self._nodes_by_root.items():
            results.append(TreeNodeSearchResult(
                nexson_id=_require(self._graph, root_id, NEXSON_ID),
                study_id=_require(self._graph, root_id, OT_STUDY_ID),
                matched_nodes=[
                    MatchedNode(_require(self._graph, node_id, NEXSON_ID))
                    for node_id in node_ids
                ],
            ))
        return results


_SHAPES = {
    EntityClass.STUDY: _StudyShape,
    EntityClass.TREE: _TreeShape,
    EntityClass.TREE_NODE: _TreeNodeShape,
}


# ─── Aggregator ───────────────────────────────────────────


class SearchAggregator:
    """Resolves search predicates into study, tree or tree-node results."""

    def __init__(
        self,
        index: IndexService,
        graph: GraphStore,
        strict_properties: bool = True,
    ):
        self._index = index
        self._graph = graph
        self._strict_properties = strict_properties

    def _validate(self, predicate: SearchPredicate, entity_class: EntityClass) -> None:
        name = predicate.property_name
        if not name or not name.strip():
            raise InvalidPredicate(name, "property name must not be blank")
        if self._strict_properties and lookup(entity_class, name) is None:
            raise InvalidPredicate(name, f"not a searchable {entity_class.value} property")

    def search(self, predicate: SearchPredicate, entity_class: EntityClass) -> list[Any]:
        """Run ``predicate`` against the indexes of ``entity_class``.

        Returns:
            Result records for the entity class, in no particular order.
            Empty when the predicate enables neither match mode.

        Raises:
            InvalidPredicate: If the property name is blank or not searchable.
            IndexUnavailable: If an index query fails.
            MissingProperty: If a matched entity lacks a required property.
            RootResolutionFailure: If a tree node has no resolvable root.
        """
        if not predicate.has_mode:
            return []
        self._validate(predicate, entity_class)

        query = build_fuzzy_query(predicate.property_name, predicate.search_value)
        shape = _SHAPES[entity_class](self._graph)

        modes = []
        if predicate.match_exact:
            modes.append(IndexMode.EXACT)
        if predicate.match_fulltext:
            modes.append(IndexMode.FULLTEXT)

        for mode in modes:
            count = 0
            with closing(self._index.query(entity_class, mode, query)) as hits:
                for hit in hits:
                    shape.fold(hit)
                    count += 1
            logger.debug("%s %s pass: %d hits", entity_class.value, mode.value, count)

        results = shape.results()
        logger.info(
            "Search %s %s=%r: %d results",
            entity_class.value, predicate.property_name, predicate.search_value, len(results),
        )
        return results

    def search_studies(self, predicate: SearchPredicate) -> list[StudyResult]:
        return self.search(predicate, EntityClass.STUDY)

    def search_trees(self, predicate: SearchPredicate) -> list[TreeResult]:
        return self.search(predicate, EntityClass.TREE)

    def search_tree_nodes(self, predicate: SearchPredicate) -> list[TreeNodeSearchResult]:
        return self.search(predicate, EntityClass.TREE_NODE)
