"""
Daybook logging: one line per event, tagged with the request that caused it.

Modules log f-string messages and attach the timeline facts as `extra`
fields:

    logger.info(f"Reconciled {day}", extra={"day": day, "appended": 2})

JSONFormatter emits those fields as top-level keys, HumanFormatter appends
them as key=value pairs. Only the names in TIMELINE_FIELDS are picked up.
"""

import json
import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

TIMELINE_FIELDS = ("day", "days", "appended", "dropped", "filler", "pieces", "path", "code")

_request_id: ContextVar[str | None] = ContextVar("daybook_request_id", default=None)


def current_request_id() -> str | None:
    return _request_id.get()


@contextmanager
def bound_request_id(request_id: str | None = None):
    """Tag every log line inside the block with `request_id` (generated if None)."""
    request_id = request_id or f"req-{uuid.uuid4().hex[:16]}"
    token = _request_id.set(request_id)
    try:
        yield request_id
    finally:
        _request_id.reset(token)


def _plain(value):
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (list, tuple, set)):
        return [_plain(v) for v in value]
    return value


def timeline_fields(record: logging.LogRecord) -> dict:
    return {
        name: _plain(getattr(record, name)) for name in TIMELINE_FIELDS if hasattr(record, name)
    }


class JSONFormatter(logging.Formatter):
    """
    {"ts": "2025-03-14T07:30:00.000+00:00", "level": "INFO",
     "logger": "daybook.timeline.reconciler", "msg": "...",
     "request_id": "req-...", "day": "2025-03-14", "appended": 2, ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        request_id = current_request_id()
        if request_id:
            entry["request_id"] = request_id
        entry.update(timeline_fields(record))
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        request_id = current_request_id()
        source = f"{record.name} [{request_id}]" if request_id else record.name
        line = f"{stamp} {record.levelname:<7} {source}: {record.getMessage()}"
        fields = timeline_fields(record)
        if fields:
            line += "  " + " ".join(f"{key}={value}" for key, value in fields.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    log_file: str | None = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """
    Replace the root handlers with a stderr handler and, optionally, a
    rotating JSON file.

    Args:
        level: DEBUG, INFO, WARNING, ERROR
        json_format: JSON lines on stderr. None picks JSON when stderr is not a TTY.
        log_file: Path of a rotating log file (always JSON lines)
    """
    if json_format is None:
        json_format = not sys.stderr.isatty()

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(JSONFormatter() if json_format else HumanFormatter())
    root.addHandler(stream)

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)
        rotating.setFormatter(JSONFormatter())
        root.addHandler(rotating)


class CorrelationIdMiddleware:
    """
    ASGI middleware: binds the client's X-Request-ID (or a fresh id) for the
    duration of the request and echoes it on the response.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        incoming = dict(scope.get("headers", [])).get(b"x-request-id", b"").decode("latin-1")

        with bound_request_id(incoming or None) as request_id:

            async def send_with_id(message):
                if message["type"] == "http.response.start":
                    message["headers"] = [
                        *message.get("headers", []),
                        (b"x-request-id", request_id.encode("latin-1")),
                    ]
                await send(message)

            await self.app(scope, receive, send_with_id)
