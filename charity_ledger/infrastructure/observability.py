"""Ledger Logging — structured records for donations, verifications and failures.

Invariants:
    - Every JSON record carries timestamp (from the record), level, logger, message
    - Ledger extras (event, donor, token_id, amount, invoice_id) and request
      extras (error_code, path) appear only when set
    - setup_logging() is idempotent: repeated lifespans never stack handlers

Design Decisions:
    - stdlib logging with a JSON formatter; amounts are logged as strings so
      u256 values survive log pipelines that parse numbers as floats
"""

import json
import logging
from datetime import datetime, timezone

LEDGER_FIELDS = ("event", "donor", "token_id", "amount", "invoice_id")
REQUEST_FIELDS = ("error_code", "path")

_HANDLER_NAME = "charity_ledger"


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in LEDGER_FIELDS + REQUEST_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install the ledger handler on the root logger, replacing a previous one."""
    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
