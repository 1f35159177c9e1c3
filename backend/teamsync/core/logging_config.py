"""Logging setup for the TeamSync API.

``LOG_FORMAT=json`` writes one JSON object per line; ``text`` writes a
single readable line per record. Either way every record carries the
``request_id`` of the HTTP request being served and the ``user_id`` of the
workspace session acting, both read from contextvars by ``_ContextFilter``.
Passwords, bearer tokens and provider keys are scrubbed by ``_SecretFilter``
before anything is written.
"""

import contextvars
import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any, Optional


request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")
user_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("user_id", default="")

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [req=%(request_id)s user=%(user_id)s] %(message)s"

# Loggers that are chatty at INFO and add nothing to a workspace trace.
_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "LiteLLM", "httpx")


class _ContextFilter(logging.Filter):
    """Copy the request and session identifiers onto the record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("") or "-"
        record.user_id = user_id_var.get("") or "-"
        return True


class _JsonFormatter(logging.Formatter):
    """One JSON line per record, with ``extra=`` fields at the top level."""

    _STANDARD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in self._STANDARD_ATTRS or key in payload:
                continue
            if key in ("request_id", "user_id") and value == "-":
                continue
            payload[key] = value

        if record.exc_info:
            payload["exception"] = record.exc_text or self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


# Credential shapes that can reach a log line: bcrypt hashes from the users
# collection, our own HS256 session tokens, and LLM provider keys.
_SECRET_PATTERNS = [
    re.compile(r"\$2[aby]\$\d{2}\$[./A-Za-z0-9]{53}"),
    re.compile(r"\beyJ[\w-]+\.[\w-]+\.[\w-]+"),
    re.compile(r"(?i)(bearer\s+)\S{16,}"),
    re.compile(r"\bsk-[A-Za-z0-9_-]{16,}"),
    re.compile(r"(?i)((?:password|api_key|secret_key|access_token)\s*[=:]\s*)[^\s,'\"]+"),
]

# ``extra=`` keys whose values are never written, whatever they look like.
_SENSITIVE_FIELDS = frozenset({"password", "password_hash", "api_key", "access_token", "token", "secret_key"})

_REDACTED = "***"


def redact(text: str) -> str:
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(lambda m: (m.group(1) if m.lastindex else "") + _REDACTED, text)
    return text


class _SecretFilter(logging.Filter):
    """Scrub credentials from the message, its arguments, extras and tracebacks."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = redact(str(record.msg))
        if isinstance(record.args, tuple):
            record.args = tuple(self._scrub(a) for a in record.args)
        for key in _SENSITIVE_FIELDS.intersection(record.__dict__):
            setattr(record, key, _REDACTED)
        if record.exc_info and not record.exc_text:
            record.exc_text = logging.Formatter().formatException(record.exc_info)
        if record.exc_text:
            record.exc_text = redact(record.exc_text)
        return True

    @staticmethod
    def _scrub(value: Any) -> Any:
        return redact(value) if isinstance(value, str) else value


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Install the stdout handler on the root logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL. Defaults to INFO.
        log_format: ``"json"`` (default) or ``"text"``.
    """
    level = (log_level or "INFO").upper()
    fmt = (log_format or "json").lower()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(_ContextFilter())
    handler.addFilter(_SecretFilter())
    if fmt == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%H:%M:%S"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info("Logging configured", extra={"level": level, "format": fmt})
