"""OTI Search — resolves property searches into studies, trees and tree nodes."""

from oti.search.aggregator import SearchAggregator
from oti.search.models import (
    EntityClass,
    MatchedNode,
    SearchPredicate,
    StudyResult,
    TreeNodeSearchResult,
    TreeResult,
)

__all__ = [
    "SearchAggregator",
    "EntityClass",
    "MatchedNode",
    "SearchPredicate",
    "StudyResult",
    "TreeNodeSearchResult",
    "TreeResult",
]
