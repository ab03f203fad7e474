"""Structured event sink backed by the standard ``logging`` module."""

from __future__ import annotations

import logging
from typing import Any


class LoggingEventSink:
    """Renders ``event key=value ...`` and attaches the raw fields as ``extra``.

    Each orchestrator / service instance gets its own sink, so there is no
    process-wide logging side channel in the core.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("src.events")

    def info(self, event: str, **fields: Any) -> None:
        self._emit(logging.INFO, event, fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._emit(logging.WARNING, event, fields)

    def error(
        self, event: str, *, exc: BaseException | None = None, **fields: Any
    ) -> None:
        self._emit(logging.ERROR, event, fields, exc)

    def _emit(
        self,
        level: int,
        event: str,
        fields: dict[str, Any],
        exc: BaseException | None = None,
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return
        rendered = " ".join(f"{k}={v}" for k, v in fields.items())
        self.logger.log(
            level,
            "%s %s",
            event,
            rendered,
            exc_info=exc,
            extra={"event": event, "fields": fields},
        )
