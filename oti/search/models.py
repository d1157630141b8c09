"""
Search Models

The search predicate accepted from callers, the index hit handle handed
back by the index service, and the result records built per query.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

# Graph properties read off study, tree root and tree node entities
OT_STUDY_ID = "ot:studyId"
TREE_ID = "tree_id"
NEXSON_ID = "nexson_id"


class EntityClass(str, Enum):
    """The kind of entity a search resolves to."""

    STUDY = "study"
    TREE = "tree"
    TREE_NODE = "tree_node"


class IndexMode(str, Enum):
    """Which physical index a query runs against."""

    EXACT = "exact"
    FULLTEXT = "fulltext"


class SearchPredicate(BaseModel):
    """A (property, value, match-mode) search request."""

    property_name: str = Field(description="Name of the indexed property, e.g. 'ot:studyId'")
    search_value: str = Field(description="Value to match, fuzzily, against the property")
    match_exact: bool = Field(default=True, description="Query the exact-token index")
    match_fulltext: bool = Field(default=True, description="Query the tokenised fulltext index")

    @property
    def has_mode(self) -> bool:
        return self.match_exact or self.match_fulltext


@dataclass(frozen=True)
class IndexHit:
    """A graph entity returned by an index query."""

    entity_id: str
    properties: dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    def get(self, name: str) -> Any | None:
        return self.properties.get(name)


@dataclass(frozen=True)
class StudyResult:
    study_id: str

    def to_dict(self) -> dict[str, Any]:
        return {OT_STUDY_ID: self.study_id}


@dataclass(frozen=True)
class TreeResult:
    tree_id: str
    nexson_id: str
    study_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            TREE_ID: self.tree_id,
            NEXSON_ID: self.nexson_id,
            OT_STUDY_ID: self.study_id,
        }


@dataclass(frozen=True)
class MatchedNode:
    """A single matched node inside a tree."""

    nexson_id: str

    def to_dict(self) -> dict[str, Any]:
        return {NEXSON_ID: self.nexson_id}


@dataclass
class TreeNodeSearchResult:
    """All matched nodes of one tree, identified by the tree root."""

    nexson_id: str
    study_id: str
    matched_nodes: list[MatchedNode] = field(default_factory=list)

    @property
    def matched_nexson_ids(self) -> set[str]:
        return {node.nexson_id for node in self.matched_nodes}

    def to_dict(self) -> dict[str, Any]:
        return {
            NEXSON_ID: self.nexson_id,
            OT_STUDY_ID: self.study_id,
            "matched_nodes": [node.to_dict() for node in self.matched_nodes],
        }
