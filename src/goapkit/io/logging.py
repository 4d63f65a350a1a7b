"""Structured logging for planner and CLI events."""

from __future__ import annotations

import json
import sys
from collections.abc import Mapping
from datetime import datetime, UTC
from enum import Enum
from typing import Any, TextIO, cast

from pydantic import BaseModel

from goapkit.core.models import LogLevel


_LEVEL_RANKS = {
    LogLevel.debug: 10,
    LogLevel.info: 20,
    LogLevel.warning: 30,
    LogLevel.error: 40,
}


def _to_primitive(value: Any) -> Any:
    """Reduce a field value to something ``json.dumps`` accepts."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        mapping = cast("Mapping[Any, Any]", value)
        return {str(key): _to_primitive(item) for key, item in mapping.items()}
    if isinstance(value, (list, tuple)):
        return [_to_primitive(item) for item in cast("list[Any] | tuple[Any, ...]", value)]
    if isinstance(value, (set, frozenset)):
        # sort after conversion so output does not depend on hash order
        return sorted((_to_primitive(item) for item in cast("set[Any]", value)), key=repr)
    return value


class StructuredLogger:
    """Logger writing one JSON object or one text line per event.

    Events below ``level`` are dropped. :meth:`bind` returns a child logger that
    adds fixed fields to every event it emits.
    """

    def __init__(
        self,
        *,
        name: str,
        json_mode: bool = False,
        stream: TextIO | None = None,
        level: LogLevel | str = LogLevel.debug,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        """Create a logger writing to ``stream`` (standard error by default)."""
        self._name = name
        self._json_mode = json_mode
        self._stream: TextIO = stream if stream is not None else sys.stderr
        self._level = LogLevel(level)
        self._context: dict[str, Any] = dict(context or {})

    @property
    def name(self) -> str:
        """Return the logger name."""
        return self._name

    @property
    def json_mode(self) -> bool:
        """Return whether JSON mode is enabled."""
        return self._json_mode

    @property
    def level(self) -> LogLevel:
        """Return the minimum level that is emitted."""
        return self._level

    def bind(self, **context: Any) -> StructuredLogger:
        """Return a logger sharing this one's output with extra ``context`` fields."""
        return StructuredLogger(
            name=self._name,
            json_mode=self._json_mode,
            stream=self._stream,
            level=self._level,
            context={**self._context, **context},
        )

    def debug(self, message: str, **fields: Any) -> None:
        """Log a DEBUG-level message."""
        self._emit(LogLevel.debug, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        """Log an INFO-level message."""
        self._emit(LogLevel.info, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        """Log a WARNING-level message."""
        self._emit(LogLevel.warning, message, fields)

    def error(self, message: str, **fields: Any) -> None:
        """Log an ERROR-level message."""
        self._emit(LogLevel.error, message, fields)

    def _emit(self, level: LogLevel, message: str, fields: dict[str, Any]) -> None:
        if _LEVEL_RANKS[level] < _LEVEL_RANKS[self._level]:
            return
        merged = {**self._context, **fields}
        data = {key: _to_primitive(value) for key, value in merged.items()}
        timestamp = datetime.now(UTC).isoformat()
        label = level.value.upper()
        if self._json_mode:
            record: dict[str, Any] = {
                "timestamp": timestamp,
                "level": label,
                "logger": self._name,
                "message": message,
                **data,
            }
            line = json.dumps(record, ensure_ascii=False)
        else:
            line = f"[{timestamp}] {label:<7} {self._name}: {message}"
            if data:
                pairs = (f"{key}={json.dumps(value, ensure_ascii=False)}" for key, value in data.items())
                line = f"{line} | {' '.join(pairs)}"
        self._stream.write(line + "\n")
        self._stream.flush()


__all__ = ["LogLevel", "StructuredLogger"]
