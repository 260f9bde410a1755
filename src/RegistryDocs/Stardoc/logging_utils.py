# === NAVMAP v1 ===
# {
#   "module": "RegistryDocs.Stardoc.logging_utils",
#   "purpose": "Structured logging helpers shared across Stardoc components",
#   "sections": [
#     {"id": "mask-sensitive-data", "name": "mask_sensitive_data", "anchor": "function-mask-sensitive-data", "kind": "function"},
#     {"id": "jsonformatter", "name": "JSONFormatter", "anchor": "class-jsonformatter", "kind": "class"},
#     {"id": "setup-logging", "name": "setup_logging", "anchor": "function-setup-logging", "kind": "function"},
#     {"id": "log-event", "name": "log_event", "anchor": "function-log-event", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""
Structured Logging Utilities

Centralizes logging setup for the Stardoc pipeline. Every component logs
through a ``RegistryDocs.Stardoc.*`` logger and attaches machine-readable
context through the ``extra_fields`` convention; :class:`JSONFormatter`
flattens that context into one JSON object per line for build logs, while the
console handler keeps a terse human format by default.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional

__all__ = [
    "LOGGER_NAME",
    "JSONFormatter",
    "mask_sensitive_data",
    "setup_logging",
    "log_event",
]

LOGGER_NAME = "RegistryDocs.Stardoc"

_SENSITIVE_KEYS = {"authorization", "api_key", "apikey", "token", "secret", "password"}


def mask_sensitive_data(payload: Dict[str, object]) -> Dict[str, object]:
    """Return a copy of ``payload`` with common secret fields masked.

    Examples:
        >>> mask_sensitive_data({"token": "secret", "status": "ok"})
        {'token': '***masked***', 'status': 'ok'}
    """
    masked: Dict[str, object] = {}
    for key, value in payload.items():
        lower = key.lower()
        if lower in _SENSITIVE_KEYS:
            masked[key] = "***masked***"
        elif isinstance(value, str) and "bearer " in value.lower():
            masked[key] = "***masked***"
        else:
            masked[key] = value
    return masked


class JSONFormatter(logging.Formatter):
    """Formatter emitting masked JSON log entries."""

    def format(self, record: logging.LogRecord) -> str:
        """Render ``record`` as a JSON string with pipeline-specific fields."""

        now = datetime.now(timezone.utc)
        payload: Dict[str, object] = {
            "timestamp": now.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "stage": getattr(record, "stage", None),
        }
        if hasattr(record, "extra_fields") and isinstance(record.extra_fields, dict):
            payload.update(record.extra_fields)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(mask_sensitive_data(payload), default=str)


def setup_logging(
    *,
    level: str = "INFO",
    log_format: str = "console",
    log_dir: Optional[Path] = None,
    max_log_size_mb: int = 10,
) -> logging.Logger:
    """Configure the package logger with a console handler and optional JSONL file.

    Repeated calls replace the handlers installed by earlier calls so the CLI
    callback can be re-entered in tests without duplicating output.

    Args:
        level: Logging level name.
        log_format: ``"console"`` for ``LEVEL: message`` or ``"json"`` for
            :class:`JSONFormatter` output on stderr.
        log_dir: Optional directory receiving a rotating ``stardoc.jsonl`` file.
        max_log_size_mb: Rotation threshold for the JSONL file.

    Returns:
        The configured ``RegistryDocs.Stardoc`` logger.
    """

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    for handler in list(logger.handlers):
        if getattr(handler, "_stardoc_managed", False):
            logger.removeHandler(handler)
            handler.close()

    stream_handler = logging.StreamHandler(sys.stderr)
    if str(log_format).lower() == "json":
        stream_handler.setFormatter(JSONFormatter())
    else:
        stream_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    stream_handler._stardoc_managed = True  # type: ignore[attr-defined]
    logger.addHandler(stream_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / "stardoc.jsonl",
            maxBytes=int(max_log_size_mb * 1024 * 1024),
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(JSONFormatter())
        file_handler._stardoc_managed = True  # type: ignore[attr-defined]
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def log_event(logger: logging.Logger, level: str, message: str, **fields: object) -> None:
    """Emit a structured log record using the ``extra_fields`` convention.

    Warnings and errors always carry ``stage`` and an upper-case ``error_code``
    so build logs can be grouped by failure category.
    """

    normalised_level = str(level).lower()
    if normalised_level in {"warning", "error"}:
        fields.setdefault("stage", "unknown")
        error_code = fields.get("error_code")
        fields["error_code"] = str(error_code).upper() if error_code else "UNKNOWN"

    emitter = getattr(logger, normalised_level, None)
    if not callable(emitter):
        raise AttributeError(f"Logger has no level '{level}'")
    emitter(message, extra={"stage": fields.get("stage"), "extra_fields": fields})
