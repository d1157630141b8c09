"""
Neo4j Connection Handler

Centralised Neo4j driver management.
Reads credentials from environment variables (or settings) and exposes a
driver that is shared by the index service and any other component that
needs raw sessions.
"""

import os
import logging
from typing import Any

from dotenv import load_dotenv
from neo4j import Driver, GraphDatabase, Session
from neo4j.exceptions import Neo4jError, ServiceUnavailable

from oti.shared.config import BaseServiceSettings
from oti.shared.exceptions import DatabaseConnectionError

load_dotenv()

logger = logging.getLogger("oti.shared.neo4j_handler")


class Neo4jHandler:
    """
    Manages a single Neo4j driver backed by .env configuration.

    Usage
    -----
    handler = Neo4jHandler()          # reads from .env
    handler.connect()
    with handler.session() as session:
        session.run("MATCH (n) RETURN n LIMIT 5")
    handler.close()

    The handler can also be used as a context-manager:

        with Neo4jHandler() as handler:
            handler.run(...)
    """

    def __init__(
        self,
        uri: str | None = None,
        username: str | None = None,
        password: str | None = None,
        database: str | None = None,
    ):
        self._uri = uri or os.getenv("NEO4J_URI")
        self._username = username or os.getenv("NEO4J_USERNAME")
        self._password = password or os.getenv("NEO4J_PASSWORD")
        self._database = database or os.getenv("NEO4J_DATABASE", "neo4j")
        self._driver: Driver | None = None

        if not self._uri:
            raise DatabaseConnectionError("NEO4J_URI is not set (env or argument)")
        if not self._username:
            raise DatabaseConnectionError("NEO4J_USERNAME is not set (env or argument)")
        if not self._password:
            raise DatabaseConnectionError("NEO4J_PASSWORD is not set (env or argument)")

    @classmethod
    def from_settings(cls, settings: BaseServiceSettings) -> "Neo4jHandler":
        """Build a handler from service settings, falling back to the environment."""
        return cls(
            uri=settings.neo4j_uri or None,
            username=settings.neo4j_username or None,
            password=settings.neo4j_password or None,
            database=settings.neo4j_database or None,
        )

    # ─── Lifecycle ──────────────────────────────────────────

    def connect(self) -> "Neo4jHandler":
        """Create the driver and verify connectivity.

        Returns:
            Self for method chaining.

        Raises:
            DatabaseConnectionError: If the connection cannot be established.
        """
        if self._driver is not None:
            return self

        self._driver = GraphDatabase.driver(
            self._uri, auth=(self._username, self._password)
        )
        try:
            self._driver.verify_connectivity()
            logger.info("Connected to Neo4j at %s (db=%s)", self._uri, self._database)
        except (Neo4jError, ServiceUnavailable) as exc:
            logger.error("Failed to connect to Neo4j at %s", self._uri)
            self._driver.close()
            self._driver = None
            raise DatabaseConnectionError(f"Cannot reach {self._uri}: {exc}") from exc
        return self

    def close(self) -> None:
        """Close the underlying driver."""
        if self._driver:
            self._driver.close()
            self._driver = None
            logger.info("Neo4j connection closed")

    def __enter__(self) -> "Neo4jHandler":
        return self.connect()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ─── Properties ─────────────────────────────────────────

    @property
    def driver(self) -> Driver:
        """Return the raw driver.

        Raises:
            RuntimeError: If handler is not connected (call connect() first).
        """
        if self._driver is None:
            raise RuntimeError("Neo4jHandler is not connected — call connect() first")
        return self._driver

    @property
    def database(self) -> str:
        return self._database

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def username(self) -> str:
        return self._username

    @property
    def password(self) -> str:
        return self._password

    # ─── Sessions and query helpers ─────────────────────────

    def session(self) -> Session:
        """Open a new session on the configured database.

        The caller owns the session and must close it.
        """
        return self.driver.session(database=self._database)

    def run(self, query: str, params: dict[str, Any] | None = None) -> list[dict]:
        """Execute a Cypher query and return all results as dicts."""
        with self.session() as session:
            result = session.run(query, params or {})
            return [record.data() for record in result]

    def verify(self) -> bool:
        """Quick health-check: returns True if the database is reachable."""
        if self._driver is None:
            return False
        try:
            self._driver.verify_connectivity()
            return True
        except (Neo4jError, ServiceUnavailable):
            return False
