"""Utilities: logging.

Entrypoints (the ``greenload-run`` CLI and the API app) call
``setup_logging`` once; library modules only call ``get_logger`` and never
touch handlers, so embedding GreenLoad in another application leaves that
application's logging alone.

Fields passed through ``extra=`` (for example the alert codes raised by
``build_system_alerts``) are carried into the JSON output as top-level keys.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

LOG_LEVEL_ENV = "GREENLOAD_LOG_LEVEL"
LOG_FORMAT_ENV = "GREENLOAD_LOG_FORMAT"
TEXT_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"

_RESERVED = set(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {"message", "asctime", "taskName"}


def record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    """Attributes attached to a record through ``extra=``."""
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED and not k.startswith("_")}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record_extras(record).items():
            payload.setdefault(key, value)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def setup_logging(
    *,
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    stream: Optional[object] = None,
    file_path: Optional[str] = None,
    force: bool = False,
) -> None:
    """Configure the root logger from arguments or ``GREENLOAD_LOG_*`` variables.

    Repeated calls are no-ops unless ``force`` is set.
    """
    root = logging.getLogger()
    if getattr(root, "_greenload_configured", False) and not force:
        return

    level_name = (log_level or os.getenv(LOG_LEVEL_ENV, "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    use_json = (log_format or os.getenv(LOG_FORMAT_ENV, "text")).lower() == "json"
    formatter = JsonFormatter() if use_json else logging.Formatter(TEXT_FORMAT)

    handlers = [logging.StreamHandler(stream or sys.stdout)]
    if file_path:
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(file_path))

    root.setLevel(level)
    root.handlers = []
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        root.addHandler(handler)

    root._greenload_configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
