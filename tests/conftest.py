"""
Shared fixtures: in-memory doubles for the index service and graph store.

The fake index returns canned hits per (entity class, mode) and records
every handle it opens so tests can check that each one was closed.
"""

import pytest

from oti.search.models import EntityClass, IndexHit, IndexMode


class FakeHits:
    def __init__(self, hits, fail_after=None, error=None):
        self._hits = list(hits)
        self._fail_after = fail_after
        self._error = error
        self.close_count = 0

    def __iter__(self):
        for i, hit in enumerate(self._hits):
            if self._fail_after is not None and i == self._fail_after:
                raise self._error
            yield hit

    def close(self):
        self.close_count += 1


class FakeIndexService:
    def __init__(self):
        self.hits: dict[tuple[EntityClass, IndexMode], list[IndexHit]] = {}
        self.failures: dict[tuple[EntityClass, IndexMode], tuple[int, Exception]] = {}
        self.opened: list[tuple[EntityClass, IndexMode, FakeHits]] = []
        self.queries = []

    def add(self, entity_class, mode, *hits):
        self.hits.setdefault((entity_class, mode), []).extend(hits)

    def fail(self, entity_class, mode, after, error):
        self.failures[(entity_class, mode)] = (after, error)

    def query(self, entity_class, mode, query):
        self.queries.append((entity_class, mode, query))
        fail_after, error = self.failures.get((entity_class, mode), (None, None))
        handle = FakeHits(self.hits.get((entity_class, mode), []), fail_after, error)
        self.opened.append((entity_class, mode, handle))
        return handle


class FakeGraphStore:
    def __init__(self):
        self.properties: dict[str, dict[str, str]] = {}
        self.roots: dict[str, str] = {}

    def add_node(self, entity_id, props, root_id=None):
        self.properties[entity_id] = dict(props)
        if root_id is not None:
            self.roots[entity_id] = root_id

    def get_property(self, entity_id, property_name):
        return self.properties.get(entity_id, {}).get(property_name)

    def get_containing_root(self, entity_id):
        return self.roots.get(entity_id)


@pytest.fixture
def index():
    return FakeIndexService()


@pytest.fixture
def graph():
    return FakeGraphStore()
