from __future__ import annotations

import contextvars
import json
import logging
import os
import sys
import time
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")
route_var: contextvars.ContextVar[str] = contextvars.ContextVar("route", default="-")
method_var: contextvars.ContextVar[str] = contextvars.ContextVar("method", default="-")

# LogRecord attributes that never get copied into the structured payload.
_RESERVED_RECORD_KEYS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "request_id",
        "route",
        "method",
        "event",
        "status_code",
        "message",
    }
)


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()
        if not hasattr(record, "route"):
            record.route = route_var.get()
        if not hasattr(record, "method"):
            record.method = method_var.get()
        if not hasattr(record, "event"):
            record.event = record.msg if isinstance(record.msg, str) else "log"
        if not hasattr(record, "status_code"):
            record.status_code = None
        return True


class StructuredFormatter(logging.Formatter):
    """Renders records as ``key=value`` pairs, or as one JSON object per line."""

    def __init__(self, json_output: bool) -> None:
        super().__init__()
        self.json_output = json_output

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": getattr(record, "event", "log"),
            "request_id": getattr(record, "request_id", "-"),
            "route": getattr(record, "route", "-"),
            "method": getattr(record, "method", "-"),
        }
        status_code = getattr(record, "status_code", None)
        if status_code is not None:
            payload["status_code"] = status_code
        message = record.getMessage()
        if message and message != payload["event"]:
            payload["message"] = message

        for key, value in record.__dict__.items():
            if key.startswith("_") or key in _RESERVED_RECORD_KEYS:
                continue
            payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        if self.json_output:
            return json.dumps(payload, default=str, ensure_ascii=False)

        ordered = [
            f"timestamp={payload.pop('timestamp')}",
            f"level={payload.pop('level')}",
            f"event={payload.pop('event')}",
            f"request_id={payload.pop('request_id')}",
            f"method={payload.pop('method')}",
            f"route={payload.pop('route')}",
        ]
        if "status_code" in payload:
            ordered.append(f"status_code={payload.pop('status_code')}")
        payload.pop("logger")
        ordered.extend(f"{k}={v}" for k, v in payload.items())
        return " ".join(ordered)


def configure_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """Install the structured stdout handler on the root logger once per process.

    ``LOG_LEVEL`` and ``LOG_FORMAT`` (``text`` or ``json``) are read from the
    environment unless passed explicitly.
    """
    root = logging.getLogger()
    if getattr(root, "_jazz_logging_configured", False):
        return

    resolved_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    if json_output is None:
        json_output = os.getenv("LOG_FORMAT", "text").lower() == "json"

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter(json_output=json_output))
    context_filter = RequestContextFilter()
    handler.addFilter(context_filter)

    root.handlers.clear()
    root.addHandler(handler)
    root.addFilter(context_filter)
    root.setLevel(resolved_level)
    root._jazz_logging_configured = True  # type: ignore[attr-defined]


def set_request_context(*, request_id: str, route: str, method: str) -> None:
    request_id_var.set(request_id)
    route_var.set(route)
    method_var.set(method)


def clear_request_context() -> None:
    request_id_var.set("-")
    route_var.set("-")
    method_var.set("-")


def current_request_id() -> str:
    return request_id_var.get()


def new_request_id() -> str:
    return str(uuid.uuid4())


def log_event(logger: logging.Logger, event: str, level: int = logging.INFO, **fields: Any) -> None:
    logger.log(level, event, extra={"event": event, **fields})


def request_elapsed_ms(start_time: float) -> int:
    return int((time.perf_counter() - start_time) * 1000)


@contextmanager
def timed_event(logger: logging.Logger, event: str, **fields: Any) -> Iterator[dict[str, Any]]:
    """Log ``<event>_started`` and ``<event>_completed`` around a block.

    The yielded dict can be filled in by the block; its entries are added to the
    completion record. Failures are logged as ``<event>_failed`` and re-raised.
    """
    started = time.perf_counter()
    summary: dict[str, Any] = {}
    log_event(logger, f"{event}_started", level=logging.DEBUG, **fields)
    try:
        yield summary
    except Exception as exc:
        log_event(
            logger,
            f"{event}_failed",
            level=logging.ERROR,
            reason=str(exc),
            exception_type=type(exc).__name__,
            duration_ms=request_elapsed_ms(started),
            **fields,
        )
        raise
    log_event(logger, f"{event}_completed", duration_ms=request_elapsed_ms(started), **{**fields, **summary})
