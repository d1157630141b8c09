"""
Custom exception hierarchy for the OTI search service.

All service errors inherit from OTIError so they can be caught
uniformly at the tool server or CLI level.
"""


class OTIError(Exception):
    """Base exception for all OTI errors."""

    def __init__(self, message: str, component: str = "unknown"):
        self.component = component
        super().__init__(f"[{component}] {message}")


class SearchError(OTIError):
    """Errors raised while resolving a search."""

    def __init__(self, message: str):
        super().__init__(message, component="search")


class InvalidPredicate(SearchError):
    """The search predicate names a property that cannot be searched."""

    def __init__(self, property_name: str, reason: str):
        self.property_name = property_name
        super().__init__(f"Invalid property {property_name!r}: {reason}")


class IndexUnavailable(SearchError):
    """An index query could not be executed or enumerated."""

    def __init__(self, index_name: str, message: str):
        self.index_name = index_name
        super().__init__(f"Index {index_name!r} unavailable: {message}")


class MissingProperty(SearchError):
    """A matched entity lacks a property required to build its result."""

    def __init__(self, entity_id: str, property_name: str):
        self.entity_id = entity_id
        self.property_name = property_name
        super().__init__(f"Entity {entity_id} has no {property_name!r} property")


class RootResolutionFailure(SearchError):
    """No containing tree root could be found for a tree node."""

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(f"Could not resolve the tree root containing node {entity_id}")


class DatabaseConnectionError(OTIError):
    """Failed to connect to Neo4j."""

    def __init__(self, message: str):
        super().__init__(message, component="database")
