"""Structured logging setup with JSON-lines or plain-text output."""

from __future__ import annotations

import json
import logging
import math
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Final, TextIO
from uuid import UUID

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

DEFAULT_LOGGER_NAME: Final[str] = "workgraph"
LOG_FORMATS: Final[tuple[str, ...]] = ("json", "text")

_HANDLER_MARKER: Final[str] = "_workgraph_handler"

_STANDARD_LOG_RECORD_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "thread",
        "threadName",
        "taskName",
    }
)


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Resolved settings for :func:`setup_structured_logging`."""

    logger_name: str = DEFAULT_LOGGER_NAME
    level: int | str = "INFO"
    log_format: str = "json"
    log_to_stdout: bool = False


class JsonLineFormatter(logging.Formatter):
    """Formatter that emits one canonical JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, JSONValue] = {
            "timestamp": _iso8601z_from_epoch(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = _extract_extra_fields(record)
        if extras:
            event["fields"] = extras

        if record.exc_info is not None:
            event["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            event["stack"] = str(record.stack_info)

        return json.dumps(event, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Human-readable formatter; extra fields are appended as ``key=value`` pairs."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: N802
        return _iso8601z_from_epoch(record.created)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = _extract_extra_fields(record)
        if not extras:
            return line
        rendered = " ".join(
            f"{key}={json.dumps(value, sort_keys=True, ensure_ascii=False)}"
            for key, value in sorted(extras.items())
        )
        head, sep, tail = line.partition("\n")
        return f"{head} {rendered}{sep}{tail}"


def setup_logging(
    observability_config: Mapping[str, object] | None = None,
    *,
    logger_name: str = DEFAULT_LOGGER_NAME,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure logging from an ``[observability]`` config section and return the logger.

    Parameters
    ----------
    observability_config:
        Mapping compatible with ``[observability]`` settings in ``workgraph.toml``.
    logger_name:
        Logger name to configure; every ``workgraph.*`` module logger propagates to it.
    stream:
        Optional stream override, mostly for tests.
    """

    cfg = dict(observability_config or {})
    raw_level = cfg.get("log_level", "INFO")
    raw_format = cfg.get("log_format", "json")
    return setup_structured_logging(
        LoggingConfig(
            logger_name=logger_name,
            level=raw_level if isinstance(raw_level, (int, str)) else "INFO",
            log_format=raw_format if isinstance(raw_format, str) else "json",
            log_to_stdout=bool(cfg.get("log_to_stdout", False)),
        ),
        stream=stream,
    )


def setup_structured_logging(
    config: LoggingConfig,
    *,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Attach a single formatted stream handler to ``config.logger_name``.

    Calling this again replaces the handler installed by the previous call.
    """

    logger_name = _validate_logger_name(config.logger_name)
    level = _parse_log_level(config.level)
    formatter = _build_formatter(config.log_format)

    if stream is None:
        stream = sys.stdout if config.log_to_stdout else sys.stderr

    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    setattr(handler, _HANDLER_MARKER, True)

    logger = logging.getLogger(logger_name)
    _remove_installed_handlers(logger)
    logger.setLevel(level)
    logger.propagate = False
    logger.addHandler(handler)
    return logger


def shutdown_logging(logger_name: str = DEFAULT_LOGGER_NAME) -> None:
    """Remove handlers installed by :func:`setup_structured_logging` and restore propagation."""

    logger = logging.getLogger(logger_name)
    _remove_installed_handlers(logger)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def _remove_installed_handlers(logger: logging.Logger) -> None:
    for existing in list(logger.handlers):
        if getattr(existing, _HANDLER_MARKER, False):
            logger.removeHandler(existing)
            existing.close()


def _build_formatter(log_format: str) -> logging.Formatter:
    normalized = log_format.strip().lower()
    if normalized == "json":
        return JsonLineFormatter()
    if normalized == "text":
        return TextFormatter()
    expected = ", ".join(LOG_FORMATS)
    raise ValueError(f"unsupported log format {log_format!r}; expected one of: {expected}")


def _validate_logger_name(logger_name: str) -> str:
    if not isinstance(logger_name, str):
        raise ValueError(f"logger_name must be a string, got {type(logger_name).__name__}")
    normalized = logger_name.strip()
    if not normalized:
        raise ValueError("logger_name must not be empty")
    return normalized


def _parse_log_level(value: int | str) -> int:
    if isinstance(value, int):
        return value

    if not isinstance(value, str):
        raise ValueError(f"level must be int or str, got {type(value).__name__}")

    normalized = value.strip().upper()
    parsed = logging.getLevelName(normalized)
    if isinstance(parsed, int):
        return parsed

    raise ValueError(f"unsupported logging level {value!r}")


def _iso8601z_from_epoch(epoch_seconds: float) -> str:
    timestamp = datetime.fromtimestamp(epoch_seconds, tz=UTC)
    return timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _extract_extra_fields(record: logging.LogRecord) -> dict[str, JSONValue]:
    fields: dict[str, JSONValue] = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_LOG_RECORD_FIELDS:
            continue
        if key.startswith("_"):
            continue
        fields[key] = _normalize_json_value(value)
    return fields


def _normalize_json_value(value: object) -> JSONValue:
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else repr(value)
    if isinstance(value, Enum):
        return _normalize_json_value(value.value)
    if isinstance(value, (UUID, Path)):
        return str(value)
    if isinstance(value, datetime):
        if value.tzinfo is None or value.utcoffset() is None:
            normalized = value.replace(tzinfo=UTC)
        else:
            normalized = value.astimezone(UTC)
        return normalized.isoformat(timespec="microseconds").replace("+00:00", "Z")
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, Mapping):
        return {str(key): _normalize_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize_json_value(item) for item in value]
    if isinstance(value, (set, frozenset)):
        normalized_items = [_normalize_json_value(item) for item in value]
        return sorted(
            normalized_items,
            key=lambda item: json.dumps(
                item, sort_keys=True, separators=(",", ":"), ensure_ascii=False
            ),
        )
    return repr(value)


__all__ = [
    "DEFAULT_LOGGER_NAME",
    "JsonLineFormatter",
    "LoggingConfig",
    "TextFormatter",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
