"""
ShieldAPI Centralized Logging
-----------------------------
Structured logging with invocation_id propagation.

Design:
- Every tool call gets a unique invocation_id
- invocation_id propagates through: Dispatcher -> API client -> Payment transport
- Console output goes to stderr via Rich (stdout carries the MCP stream)
- Optional JSON file output for post-mortems

Usage:
    from infra.logging import get_logger, InvocationContext, log_invocation_end

    logger = get_logger("tools.executor")

    with InvocationContext() as invocation_id:
        logger.info("Dispatching check_url")
        log_invocation_end("check_url", success=True, elapsed_ms=12.5)
"""

import contextvars
import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from core.errors import StartupError

ROOT_LOGGER = "shieldapi"

# Context variable for invocation_id - async-safe
_invocation_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "invocation_id", default=None
)


def generate_invocation_id() -> str:
    """Generate a unique invocation ID."""
    return f"inv_{uuid.uuid4().hex[:12]}"


def get_invocation_id() -> Optional[str]:
    """Get the current invocation ID from context."""
    return _invocation_id_var.get()


class InvocationContext:
    """
    Context manager scoping one tool invocation.

    Usage:
        with InvocationContext() as invocation_id:
            logger.info("Processing...")
    """

    def __init__(self, invocation_id: Optional[str] = None):
        self._invocation_id = invocation_id or generate_invocation_id()
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = _invocation_id_var.set(self._invocation_id)
        return self._invocation_id

    def __exit__(self, *args) -> None:
        if self._token is not None:
            _invocation_id_var.reset(self._token)


class InvocationIdFilter(logging.Filter):
    """Logging filter that adds invocation_id to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "invocation_id", None) is None:
            record.invocation_id = get_invocation_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured file logging."""

    EXTRA_FIELDS = ("tool_name", "endpoint", "status_code", "elapsed_ms", "success", "mode")

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "invocation_id": getattr(record, "invocation_id", "-"),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key in self.EXTRA_FIELDS:
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry, default=str)


class InvocationRichHandler(RichHandler):
    """RichHandler that prefixes messages with the invocation id when set."""

    def render_message(self, record: logging.LogRecord, message: str):
        invocation_id = getattr(record, "invocation_id", "-")
        if invocation_id != "-":
            message = f"[{invocation_id}] {message}"
        return super().render_message(record, message)


def configure_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    console: Optional[Console] = None,
) -> None:
    """
    Configure the shieldapi logger tree.

    Args:
        level: Logging level for the console (default INFO)
        log_file: Optional path for JSON lines output
        console: Rich console to render into (default: stderr)

    Raises:
        StartupError: If the log file cannot be created
    """
    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(logging.DEBUG if log_file else level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.propagate = False

    invocation_filter = InvocationIdFilter()

    console_handler = InvocationRichHandler(
        console=console or Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
    )
    console_handler.setLevel(level)
    console_handler.addFilter(invocation_filter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(str(log_path), mode="a", encoding="utf-8")
        except OSError as e:
            raise StartupError(f"Cannot open log file {log_path}: {e}") from e

        file_handler.setLevel(logging.DEBUG)  # File gets everything
        file_handler.setFormatter(JSONFormatter())
        file_handler.addFilter(invocation_filter)
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the shieldapi namespace.

    Args:
        name: Logger name (prefixed with 'shieldapi.' if not already)
    """
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"

    return logging.getLogger(name)


def log_invocation_end(
    tool_name: str,
    success: bool,
    elapsed_ms: float = 0.0,
    error: Optional[str] = None,
) -> None:
    """
    Log the end of a tool invocation with summary information.

    This is the INVOCATION_END boundary event for post-mortems.
    """
    logger = get_logger("tools.invocation")

    extra = {
        "tool_name": tool_name,
        "success": success,
        "elapsed_ms": round(elapsed_ms, 1),
    }

    if success:
        logger.info(
            f"INVOCATION_END: tool={tool_name}, success=True, elapsed_ms={elapsed_ms:.1f}",
            extra=extra,
        )
    else:
        logger.error(
            f"INVOCATION_END: tool={tool_name}, success=False, error={error or 'Unknown'}",
            extra=extra,
        )
