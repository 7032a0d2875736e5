"""Logging configuration setup.

Provides production-ready logging configuration using:
- dictConfig for the root level and third-party logger levels
- QueueHandler + QueueListener for non-blocking I/O
- ContextInjectingFilter for automatic context propagation
- All handlers on root logger (child loggers propagate)
- JSONL format for machine parsing (Loki-ready)
"""

from __future__ import annotations

import atexit
import logging
import logging.config
import time
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import Queue
from typing import TYPE_CHECKING, Any

from oss_gateway.infra.logging.context import ContextInjectingFilter
from oss_gateway.infra.logging.formatters import JSONFormatter

if TYPE_CHECKING:
    from oss_gateway.core.settings.logs import LoggingSettings

_log_queue: Queue[logging.LogRecord] | None = None
_listener: QueueListener | None = None
_LOGGING_INITIALIZED = False
_ATEXIT_REGISTERED = False

logger = logging.getLogger(__name__)

TEXT_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def complete(max_wait: float = 5.0) -> None:
    """Wait for all queued log records to be processed.

    Blocks until the queue drains or ``max_wait`` seconds pass. Call this
    before exiting when every record must reach its handler.
    """
    if _log_queue is None or _listener is None:
        return

    start = time.monotonic()
    while not _log_queue.empty() and (time.monotonic() - start) < max_wait:
        time.sleep(0.01)


def shutdown() -> None:
    """Flush pending records and stop the QueueListener.

    Registered with atexit on first configuration; safe to call repeatedly.
    """
    global _log_queue, _listener

    if _listener is not None:
        complete()
        _listener.stop()
        _listener = None

    _log_queue = None


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings_obj = log_settings
    if settings_obj is None:
        from oss_gateway.core.settings import get_logging_settings

        settings_obj = get_logging_settings()

    log_config = {**settings_obj.to_logging_kwargs(), **configure_kwargs}
    configure_logging(**log_config)
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    console_level: str | None = None,
    file_level: str | None = None,
    file_path: str | Path | None = None,
    json_logs: bool = True,
    console_enabled: bool = True,
    include_context: bool = True,
    capture_warnings: bool = True,
    include_process_info: bool = False,
    include_thread_info: bool = False,
    file_max_bytes: int = 10 * 1024 * 1024,
    file_backup_count: int = 5,
    service_name: str = "oss-gateway",
    **kwargs: Any,
) -> None:
    """Configure logging with dictConfig and the QueueHandler pattern.

    All handlers run behind a QueueListener; the root logger only owns a
    QueueHandler, so application loggers never block on I/O.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        console_level: Console handler level. If None, uses log_level.
        file_level: File handler level. If None, uses log_level.
        file_path: Path to log file. None disables file logging.
        json_logs: Enable JSONL (JSON Lines) structured logging.
        console_enabled: Enable console/stderr logging.
        include_context: Enable ContextInjectingFilter for auto context.
        capture_warnings: Forward Python warnings to logging system.
        include_process_info: Include process ID and name in records.
        include_thread_info: Include thread ID and name in records.
        file_max_bytes: Maximum log file size before rotation.
        file_backup_count: Number of rotated log files to keep.
        service_name: Static ``service`` field stamped on JSON records.
        **kwargs: Ignored extra settings (logged at DEBUG).

    Example:
            from oss_gateway.core.settings import get_logging_settings
        configure_logging(**get_logging_settings().to_logging_kwargs())
    """
    if kwargs:
        logger.debug("Unused logging kwargs supplied: %s", ", ".join(sorted(kwargs.keys())))

    if capture_warnings:
        logging.captureWarnings(True)

    console_level = console_level or log_level
    file_level = file_level or log_level
    path = Path(file_path) if file_path else None
    if path:
        path.parent.mkdir(parents=True, exist_ok=True)

    logging_config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "loggers": _build_library_loggers_config(log_level),
        # Handlers are created manually and attached to the QueueListener
        "root": {"level": log_level.upper(), "handlers": []},
    }

    shutdown()
    logging.config.dictConfig(logging_config)

    _setup_queue_logging(
        console_enabled=console_enabled,
        console_level=console_level,
        file_path=path,
        file_level=file_level,
        file_max_bytes=file_max_bytes,
        file_backup_count=file_backup_count,
        formatter=_build_formatter(
            json_logs=json_logs,
            service_name=service_name,
            include_process_info=include_process_info,
            include_thread_info=include_thread_info,
        ),
        include_context=include_context,
    )


def _build_library_loggers_config(log_level: str) -> dict[str, Any]:
    """Build logger overrides for chatty third-party libraries.

    botocore logs every request and retry at DEBUG; those stay at WARNING
    unless the root level is DEBUG.
    """
    library_level = "DEBUG" if log_level.upper() == "DEBUG" else "WARNING"
    return {
        name: {"level": library_level, "propagate": True}
        for name in ("botocore", "aiobotocore", "aioboto3", "urllib3")
    }


def _build_formatter(
    json_logs: bool,
    service_name: str,
    include_process_info: bool,
    include_thread_info: bool,
) -> logging.Formatter:
    if json_logs:
        return JSONFormatter(
            static={"service": service_name},
            include_process_info=include_process_info,
            include_thread_info=include_thread_info,
        )
    return logging.Formatter(fmt=TEXT_FORMAT, datefmt=TEXT_DATEFMT)


def _setup_queue_logging(
    console_enabled: bool,
    console_level: str,
    file_path: Path | None,
    file_level: str,
    file_max_bytes: int,
    file_backup_count: int,
    formatter: logging.Formatter,
    include_context: bool,
) -> None:
    """Set up QueueHandler + QueueListener for non-blocking logging.

    The context filter sits on the QueueHandler: root-logger filters are not
    consulted for records propagated from child loggers, handler filters are.
    """
    global _log_queue, _listener, _ATEXIT_REGISTERED

    _log_queue = Queue()
    handlers: list[logging.Handler] = []

    if console_enabled:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(console_level.upper())
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    if file_path:
        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=file_max_bytes,
            backupCount=file_backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(file_level.upper())
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if handlers:
        _listener = QueueListener(_log_queue, *handlers, respect_handler_level=True)
        _listener.start()
        if not _ATEXIT_REGISTERED:
            atexit.register(shutdown)
            _ATEXIT_REGISTERED = True

    queue_handler = QueueHandler(_log_queue)
    if include_context:
        queue_handler.addFilter(ContextInjectingFilter())
    logging.getLogger().addHandler(queue_handler)
