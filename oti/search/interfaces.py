"""
Collaborator contracts consumed by the search aggregator.

The aggregator only depends on these protocols; the Neo4j adapters in
``index_service`` and ``graph_store`` implement them, and tests provide
in-memory doubles.
"""

from typing import Iterator, Protocol

from oti.search.fuzzy import FuzzyQuery
from oti.search.models import EntityClass, IndexHit, IndexMode


class IndexHits(Protocol):
    """An open index result. Must be closed once enumeration is over."""

    def __iter__(self) -> Iterator[IndexHit]: ...

    def close(self) -> None: ...


class IndexService(Protocol):
    def query(
        self, entity_class: EntityClass, mode: IndexMode, query: FuzzyQuery,
    ) -> IndexHits: ...


class GraphStore(Protocol):
    def get_property(self, entity_id: str, property_name: str) -> str | None: ...

    def get_containing_root(self, entity_id: str) -> str | None: ...
