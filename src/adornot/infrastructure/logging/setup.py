from __future__ import annotations

import atexit
import copy
import logging
import queue
import sys
from datetime import datetime, timezone
from logging.handlers import QueueHandler, QueueListener
from typing import Any, Optional

import structlog

from adornot.infrastructure.config.schema import AppConfig

log = structlog.get_logger(__name__)

# Chatty third-party loggers; only their warnings reach the console.
NOISY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "asyncio")

_QUEUE_LISTENER: Optional[QueueListener] = None


def _add_record_created_timestamp_utc(
    _: Any, __: Any, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """
    Stamp foreign (stdlib) LogRecords with their creation time, not the time
    the background listener formats them.

    ProcessorFormatter sets event_dict["_record"] for foreign records.
    """
    record = event_dict.get("_record")
    if isinstance(record, logging.LogRecord):
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        event_dict["timestamp"] = dt.isoformat().replace("+00:00", "Z")
    return event_dict


def _renderer(config: AppConfig) -> structlog.typing.Processor:
    if config.log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def build_processor_formatter(config: AppConfig) -> structlog.stdlib.ProcessorFormatter:
    """Formatter shared by every output handler (structlog and foreign records)."""
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.contextvars.merge_contextvars,
            _add_record_created_timestamp_utc,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(config),
        ],
    )


class _StructlogPreservingQueueHandler(QueueHandler):
    """QueueHandler that leaves structlog event dicts (record.msg) intact."""

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        # QueueHandler.prepare() would set record.msg = record.getMessage(),
        # which breaks dict messages for ProcessorFormatter.
        return copy.copy(record)


def _stop_async_listener() -> None:
    global _QUEUE_LISTENER
    if _QUEUE_LISTENER is not None:
        try:
            _QUEUE_LISTENER.stop()
        finally:
            _QUEUE_LISTENER = None


def _enable_async_logging(config: AppConfig) -> None:
    """
    Route all stdlib logging through a QueueHandler and emit from a
    QueueListener thread, so the event loop never blocks on terminal I/O.

    Everything goes to stderr: stdout is reserved for the rendered report.
    """
    global _QUEUE_LISTENER

    _stop_async_listener()

    stderr_handler = logging.StreamHandler(stream=sys.stderr)
    stderr_handler.setFormatter(build_processor_formatter(config))

    q: queue.Queue[logging.LogRecord] = queue.Queue()  # unbounded; non-dropping
    queue_handler = _StructlogPreservingQueueHandler(q)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(queue_handler)
    root.setLevel(config.log_level)

    for name in NOISY_LOGGERS:
        noisy = logging.getLogger(name)
        noisy.handlers.clear()
        noisy.propagate = True
        noisy.setLevel(max(logging.WARNING, logging.getLevelName(config.log_level)))

    _QUEUE_LISTENER = QueueListener(q, stderr_handler, respect_handler_level=True)
    _QUEUE_LISTENER.start()
    atexit.register(_stop_async_listener)


def configure_logging(config: AppConfig) -> None:
    """Configure structlog + stdlib logging for the CLI process."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            # Timestamp at log-call time for structlog-originated events
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _enable_async_logging(config)

    log.debug(
        "logging_configured", log_format=config.log_format, log_level=config.log_level
    )


def shutdown_logging() -> None:
    """Flush queued records; safe to call more than once."""
    _stop_async_listener()
