"""
Infrastructure adapter: standard-library logging → IEventEmitter.

Entrypoints call configure_logging() once at startup; every event then becomes
one log line of the form ``<event> key=value key=value``.
"""

import json
import logging
import sys
from typing import Any, Optional

from chunk_pipeline.domain.ports.observability_port import IEventEmitter

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


def configure_logging(
    level: int | str = logging.INFO,
    fmt: str = DEFAULT_FORMAT,
    stream=sys.stderr,
) -> None:
    """Install a single root stream handler; later calls only change the level."""
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(handler)
    root.setLevel(level)


class LoggingEventEmitter(IEventEmitter):
    """Writes structured events to a logger as key=value pairs."""

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        level: int = logging.INFO,
    ) -> None:
        self._logger = logger or logging.getLogger("chunk_pipeline.events")
        self._level = level

    def emit(self, event: str, **fields: Any) -> None:
        if not self._logger.isEnabledFor(self._level):
            return
        pairs = " ".join(f"{key}={_format_value(value)}" for key, value in fields.items())
        self._logger.log(self._level, "%s %s", event, pairs)


def _format_value(value: Any) -> str:
    if isinstance(value, str) and value and not any(ch.isspace() or ch in "\"=" for ch in value):
        return value
    if isinstance(value, (str, int, float, bool)) or value is None:
        return json.dumps(value, ensure_ascii=False)
    return json.dumps(str(value), ensure_ascii=False)
