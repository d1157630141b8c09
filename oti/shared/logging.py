"""
Logging setup shared by the search server and the CLI.

Gives every entry point the same format so that a tool call can be
followed through the aggregator and the Neo4j adapters.  Lines logged
for one tool call carry its correlation id as a ``[cid]`` prefix.
"""

import logging
import uuid
from pathlib import Path
from typing import Any, MutableMapping

LOG_FORMAT = "%(asctime)s  %(name)-30s  %(levelname)-7s  %(message)s"

# Third-party loggers that are chatty at INFO
_NOISY_LOGGERS = ("neo4j", "httpx")


def setup_logging(
    name: str,
    level: str = "INFO",
    log_file: str | None = None,
    driver_level: str = "WARNING",
) -> logging.Logger:
    """
    Configure process-wide logging and return a named logger.

    Args:
        name: Logger name (e.g. 'oti.search.server').
        level: Log level string (e.g. 'INFO', 'DEBUG').
        log_file: Optional path; log lines are also appended there.
        driver_level: Level for the Neo4j driver's own loggers, which
            otherwise report every routing table refresh.

    Returns:
        Configured logger instance.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    logging.basicConfig(
        level=_level(level),
        format=LOG_FORMAT,
        handlers=handlers,
    )
    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(_level(driver_level, logging.WARNING))
    return logging.getLogger(name)


def _level(name: str, default: int = logging.INFO) -> int:
    value = getattr(logging, name.upper(), None)
    return value if isinstance(value, int) else default


def generate_correlation_id() -> str:
    """Generate a short unique id used to tag the log lines of one tool call."""
    return uuid.uuid4().hex[:12]


class CorrelationAdapter(logging.LoggerAdapter):
    """Prefixes every message with ``[cid]`` and exposes it as ``record.cid``."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        cid = self.extra["cid"]
        kwargs.setdefault("extra", {})["cid"] = cid
        return f"[{cid}] {msg}", kwargs


def correlation_logger(logger: logging.Logger, cid: str | None = None) -> CorrelationAdapter:
    """Wrap ``logger`` so its lines carry ``cid`` (a fresh id if omitted)."""
    return CorrelationAdapter(logger, {"cid": cid or generate_correlation_id()})
