from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Keys the pipeline, providers and upload store attach through ``extra=``.
LOG_FIELDS = ("request_id", "kind", "provider", "status_code", "file_path")

_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def record_fields(record: logging.LogRecord) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for key in LOG_FIELDS:
        value = getattr(record, key, None)
        if value is not None:
            fields[key] = value
    return fields


class JsonFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message, then the analysis fields."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **record_fields(record),
        }
        if record.exc_info:
            payload["error"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class PlainFormatter(logging.Formatter):
    """Human-readable lines with the analysis fields appended as ``key=value``."""

    def __init__(self) -> None:
        super().__init__(_PLAIN_FORMAT)

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        line = super().format(record)
        fields = record_fields(record)
        if not fields:
            return line
        suffix = " ".join(f"{key}={value}" for key, value in fields.items())
        first, sep, rest = line.partition("\n")
        return f"{first} [{suffix}]{sep}{rest}"


def configure_logging(*, level: str = "INFO", json_logs: bool = False) -> None:
    level_value = logging.getLevelName(level.strip().upper())
    if not isinstance(level_value, int):
        level_value = logging.INFO
    root = logging.getLogger()
    root.setLevel(level_value)

    # Tests reload main in the same process.
    for existing in list(root.handlers):
        root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter() if json_logs else PlainFormatter())
    root.addHandler(handler)

    # httpx logs every provider request at INFO.
    logging.getLogger("httpx").setLevel(max(level_value, logging.WARNING))
