"""
Searchable property vocabulary.

Lists, per entity class, the node properties that are written into the
exact and/or fulltext indexes. Property names follow the Open Tree
``ot:`` vocabulary; ``tree_id`` and ``nexson_id`` are identifiers set
when a study is loaded.
"""

from dataclasses import dataclass
from typing import Any

from oti.search.models import NEXSON_ID, OT_STUDY_ID, TREE_ID, EntityClass


@dataclass(frozen=True)
class SearchableProperty:
    """A property indexed for one entity class."""

    name: str
    exact: bool = True
    fulltext: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "exact": self.exact, "fulltext": self.fulltext}


_STUDY_PROPERTIES = (
    SearchableProperty(OT_STUDY_ID),
    SearchableProperty("ot:studyPublicationReference", exact=False, fulltext=True),
    SearchableProperty("ot:studyPublication"),
    SearchableProperty("ot:curatorName", fulltext=True),
    SearchableProperty("ot:dataDeposit"),
    SearchableProperty("ot:studyYear"),
    SearchableProperty("ot:focalClade"),
    SearchableProperty("ot:focalCladeOTTTaxonName", fulltext=True),
    SearchableProperty("ot:tag", fulltext=True),
    SearchableProperty("ot:comment", exact=False, fulltext=True),
)

_TREE_PROPERTIES = (
    SearchableProperty(TREE_ID),
    SearchableProperty(NEXSON_ID),
    SearchableProperty(OT_STUDY_ID),
    SearchableProperty("ot:branchLengthMode"),
    SearchableProperty("ot:branchLengthDescription", exact=False, fulltext=True),
    SearchableProperty("ot:inGroupClade"),
    SearchableProperty("ot:curatedType", fulltext=True),
    SearchableProperty("ot:specifiedRoot"),
    SearchableProperty("ot:tag", fulltext=True),
)

_TREE_NODE_PROPERTIES = (
    SearchableProperty(NEXSON_ID),
    SearchableProperty("ot:ottId"),
    SearchableProperty("ot:ottTaxonName", fulltext=True),
    SearchableProperty("ot:originalLabel", fulltext=True),
    SearchableProperty("ot:treebaseOTUId"),
)

_VOCABULARY: dict[EntityClass, tuple[SearchableProperty, ...]] = {
    EntityClass.STUDY: _STUDY_PROPERTIES,
    EntityClass.TREE: _TREE_PROPERTIES,
    EntityClass.TREE_NODE: _TREE_NODE_PROPERTIES,
}


def searchable_properties(entity_class: EntityClass) -> tuple[SearchableProperty, ...]:
    return _VOCABULARY[entity_class]


def lookup(entity_class: EntityClass, name: str) -> SearchableProperty | None:
    """Return the searchable property called ``name``, or None."""
    for prop in _VOCABULARY[entity_class]:
        if prop.name == name:
            return prop
    return None


def vocabulary() -> dict[str, list[dict[str, Any]]]:
    """JSON-ready listing of every searchable property by entity class."""
    return {
        entity_class.value: [prop.to_dict() for prop in props]
        for entity_class, props in _VOCABULARY.items()
    }
