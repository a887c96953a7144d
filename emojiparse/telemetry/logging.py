"""
JSON log lines for the compiler and the scanner.

Modules log through a bound adapter so every line names its component:

    log = bind(logging.getLogger(__name__), component="compiler")
    log.info("emoji pattern compiled", extra={"flavor": "python"})

Applications that want the JSON output call ``configure_logging()`` once.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any, Dict, Mapping, MutableMapping, Optional, Tuple

# Fields this package puts on its records, emitted right after the message
CONTEXT_FIELDS: Tuple[str, ...] = ("component", "category", "key", "flavor")

# Attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}

_PACKAGE_LOGGER = "emojiparse"


class JsonFormatter(logging.Formatter):
    """One JSON object per line: ts, level, logger, message, context, extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extras = {
            k: v
            for k, v in vars(record).items()
            if k not in _RECORD_ATTRS and not k.startswith("_")
        }
        for name in CONTEXT_FIELDS:
            if name in extras:
                payload[name] = extras.pop(name)
        payload.update(sorted(extras.items()))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        # codepoint tuples, enums and the like fall back to str()
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(
    level: int | str = "INFO", stream: Optional[IO[str]] = None
) -> logging.Logger:
    """
    Send the package's logs to ``stream`` (stdout by default) as JSON.

    Calling it again replaces the handler it installed earlier, so repeated
    setup never duplicates lines. Returns the package logger.
    """
    logger = logging.getLogger(_PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, "_emojiparse_json", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonFormatter())
    handler._emojiparse_json = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(level if isinstance(level, int) else str(level).upper())
    logger.propagate = False
    return logger


class ContextAdapter(logging.LoggerAdapter):
    """Adds bound fields to every record; per-call ``extra`` wins on conflicts."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        call_extra = kwargs.get("extra")
        merged: Dict[str, Any] = dict(self.extra or {})
        if isinstance(call_extra, Mapping):
            merged.update(call_extra)
        kwargs["extra"] = merged
        return msg, kwargs


def bind(logger: Optional[logging.Logger] = None, **context: Any) -> ContextAdapter:
    return ContextAdapter(logger or logging.getLogger(_PACKAGE_LOGGER), context)


__all__ = ["CONTEXT_FIELDS", "JsonFormatter", "configure_logging", "ContextAdapter", "bind"]
