"""
Unit tests for the shared layer: exceptions, settings and the Neo4j handler.
"""

import logging

import pytest
from unittest.mock import MagicMock, patch

from neo4j.exceptions import ServiceUnavailable

from oti.search.config import SearchSettings
from oti.shared.database import Neo4jHandler
from oti.shared.exceptions import (
    DatabaseConnectionError,
    IndexUnavailable,
    MissingProperty,
    OTIError,
    RootResolutionFailure,
    SearchError,
)
from oti.shared.logging import correlation_logger, generate_correlation_id, setup_logging


class TestExceptions:

    def test_search_errors_share_base(self):
        for exc in (
            IndexUnavailable("idx", "down"),
            MissingProperty("1", "tree_id"),
            RootResolutionFailure("1"),
        ):
            assert isinstance(exc, SearchError)
            assert isinstance(exc, OTIError)
            assert exc.component == "search"
            assert str(exc).startswith("[search] ")

    def test_missing_property_message(self):
        exc = MissingProperty("4:x:9", "ot:studyId")

        assert "4:x:9" in str(exc)
        assert "'ot:studyId'" in str(exc)


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("OTI_SEARCH_PORT", raising=False)
        settings = SearchSettings()

        assert settings.port == 8010
        assert settings.tree_edge_type == "CHILDOF"
        assert settings.strict_properties is True

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("OTI_SEARCH_PORT", "9100")
        monkeypatch.setenv("OTI_SEARCH_STRICT_PROPERTIES", "false")

        settings = SearchSettings()

        assert settings.port == 9100
        assert settings.strict_properties is False


class TestNeo4jHandler:

    def test_missing_uri_rejected(self, monkeypatch):
        monkeypatch.delenv("NEO4J_URI", raising=False)

        with pytest.raises(DatabaseConnectionError, match="NEO4J_URI"):
            Neo4jHandler(username="neo4j", password="pw")

    def test_missing_password_rejected(self, monkeypatch):
        monkeypatch.delenv("NEO4J_PASSWORD", raising=False)

        with pytest.raises(DatabaseConnectionError) as exc_info:
            Neo4jHandler(uri="bolt://db", username="neo4j")

        assert isinstance(exc_info.value, OTIError)
        assert exc_info.value.component == "database"

    def test_not_connected_driver_access(self):
        handler = Neo4jHandler(uri="bolt://db", username="neo4j", password="pw")

        with pytest.raises(RuntimeError):
            handler.driver

    def test_connect_failure_raises_database_error(self):
        handler = Neo4jHandler(uri="bolt://db", username="neo4j", password="pw")
        driver = MagicMock()
        driver.verify_connectivity.side_effect = ServiceUnavailable("down")

        with patch("oti.shared.database.neo4j_handler.GraphDatabase.driver", return_value=driver):
            with pytest.raises(DatabaseConnectionError):
                handler.connect()

        driver.close.assert_called_once()
        assert handler.verify() is False

    def test_context_manager_connects_and_closes(self):
        driver = MagicMock()
        with patch("oti.shared.database.neo4j_handler.GraphDatabase.driver", return_value=driver):
            with Neo4jHandler(uri="bolt://db", username="neo4j", password="pw", database="oti") as handler:
                handler.session()
                driver.session.assert_called_once_with(database="oti")

        driver.close.assert_called_once()

    def test_from_settings(self):
        settings = SearchSettings(neo4j_uri="bolt://db:7687", neo4j_password="pw")

        handler = Neo4jHandler.from_settings(settings)

        assert handler.uri == "bolt://db:7687"
        assert handler.username == "neo4j"
        assert handler.database == "neo4j"


def test_correlation_ids_are_short_and_unique():
    first, second = generate_correlation_id(), generate_correlation_id()

    assert len(first) == 12
    assert first != second


class TestLogging:

    def test_correlation_logger_prefixes_messages(self, caplog):
        log = correlation_logger(logging.getLogger("oti.test"), "abc123")

        with caplog.at_level(logging.INFO, logger="oti.test"):
            log.info("search %s", "study")

        record = caplog.records[-1]
        assert record.getMessage() == "[abc123] search study"
        assert record.cid == "abc123"

    def test_correlation_logger_generates_id(self):
        log = correlation_logger(logging.getLogger("oti.test"))

        assert len(log.extra["cid"]) == 12

    def test_driver_loggers_quietened(self):
        setup_logging("oti.test", level="DEBUG")

        assert logging.getLogger("neo4j").level == logging.WARNING

    def test_driver_level_configurable(self):
        setup_logging("oti.test", driver_level="ERROR")

        assert logging.getLogger("neo4j").level == logging.ERROR
