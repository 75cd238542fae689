"""
Logging Module - Logger hierarchy for the responder
===================================================

Every module logs below the ``rule_responder`` logger through
``get_logger``. Hosts embedding the engine can leave logging alone and
let records propagate; the CLI and web service call ``setup_logging``
to attach their own handlers:
- Colored console lines
- Plain or JSON lines in ``<log_dir>/rule-responder.log``

Loggers may carry bound fields (``component``, ``source`` ...) that
are shown on the console and emitted as JSON keys.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, MutableMapping, Optional, Tuple


ROOT_LOGGER = "rule_responder"
LOG_FILE_NAME = "rule-responder.log"

# Name of the record attribute listing which extras were bound
_BOUND = "bound_fields"


class JSONFormatter(logging.Formatter):
    """One JSON object per record, bound fields included."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "line": record.lineno,
        }
        for key in getattr(record, _BOUND, ()):
            payload[key] = getattr(record, key, None)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


class ColoredFormatter(logging.Formatter):
    """
    Console formatter with ANSI level colors.

    The short logger name (without the ``rule_responder.`` prefix) and
    any bound ``component`` are shown before the message.
    """

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        stamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        name = record.name[len(ROOT_LOGGER) + 1:] if record.name.startswith(ROOT_LOGGER + ".") else record.name

        component = getattr(record, "component", None)
        where = f"{name}[{component}]" if component else name

        line = f"{color}{record.levelname:<8}{self.RESET} {stamp} {where}: {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class LoggerAdapter(logging.LoggerAdapter):
    """
    Adapter that attaches its bound fields to every record.

    Per-call ``extra`` values win over bound ones.
    """

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(self.extra)
        extra.update(kwargs.get("extra") or {})
        extra[_BOUND] = tuple(k for k in extra if k != _BOUND)
        kwargs["extra"] = extra
        return msg, kwargs

    def bind(self, **fields: Any) -> "LoggerAdapter":
        """Return an adapter with additional bound fields."""
        merged = dict(self.extra)
        merged.update(fields)
        return LoggerAdapter(self.logger, merged)


_configured = False


def setup_logging(
    log_dir: Optional[str] = None,
    log_level: str = "INFO",
    json_format: bool = False,
    console_output: bool = True
) -> None:
    """
    Attach handlers to the ``rule_responder`` logger.

    Only the first call has an effect.

    Args:
        log_dir: Directory for the log file (no file when omitted)
        log_level: Minimum level passed to handlers
        json_format: Write the log file as JSON lines
        console_output: Also log to stdout

    Example:
        setup_logging(log_dir="~/.config/rule-responder/logs", json_format=True)
    """
    global _configured

    if _configured:
        return

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    logger.handlers.clear()

    if console_output:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(ColoredFormatter())
        logger.addHandler(console)

    if log_dir:
        log_path = Path(log_dir).expanduser()
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path / LOG_FILE_NAME, encoding="utf-8")
        if json_format:
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
            )
        logger.addHandler(file_handler)

    _configured = True


def get_logger(name: str, **fields) -> LoggerAdapter:
    """
    Get a logger below ``rule_responder``.

    Args:
        name: Dotted component name, e.g. ``rules.loader``
        **fields: Fields bound to every record

    Example:
        logger = get_logger("rules.loader", component="files")
        logger.warning("Skipping malformed document", extra={"source": "a.json"})
    """
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return LoggerAdapter(logging.getLogger(name), fields)
