"""Per-thread log context for reconciliation runs.

A reconciliation pass tags its log lines with the invoice and job being
worked on plus a correlation id for the whole pass. ``LogContext`` sets
those fields for the current thread and ``ContextFilter`` (installed by
``configure_logging``) copies them onto every record.
"""

import functools
import inspect
import logging
import threading
import time
import uuid
from typing import Any, Callable, Dict, Optional

_local = threading.local()


def _current() -> Dict[str, Any]:
    return getattr(_local, "fields", {})


def generate_correlation_id() -> str:
    """New id tying together the log lines of one reconciliation pass."""
    return str(uuid.uuid4())


def get_log_context() -> Dict[str, Any]:
    """
    Copy of the fields active on this thread.

    Pool workers start with no fields; capture this on the submitting
    thread and re-enter it in the worker with ``LogContext(**captured)``.
    """
    return dict(_current())


def get_correlation_id() -> Optional[str]:
    return _current().get("correlation_id")


class LogContext:
    """
    Add fields to every log line emitted inside the block.

    Nested blocks layer their fields over the outer ones, and the outer
    fields come back on exit, also when the block raises.

    Example:
        with LogContext(invoice_id="INV-7", correlation_id=generate_correlation_id()):
            logger.info("Reconciling invoice")
    """

    def __init__(self, **fields):
        self.fields = fields
        self._saved: Dict[str, Any] = {}

    def __enter__(self):
        self._saved = _current()
        _local.fields = {**self._saved, **self.fields}
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _local.fields = self._saved


class ContextFilter(logging.Filter):
    """Copies the thread's LogContext fields onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _current().items():
            setattr(record, key, value)
        return True


def log_function_call(
    func: Optional[Callable] = None, *, include_args: bool = False, level: str = "DEBUG"
) -> Callable:
    """
    Log entry to and exit from the decorated function.

    The exit line carries the call's ``duration_ms``. An exception is
    logged at ERROR with its traceback and re-raised. With
    ``include_args`` the arguments are logged too, leaving out ``self``
    for methods.

    Example:
        @log_function_call(include_args=True)
        def get_invoice_calculations(self, invoice_id):
            ...
    """

    def decorator(f: Callable) -> Callable:
        logger = logging.getLogger(f.__module__)
        log_level = logging.getLevelName(level.upper())
        params = list(inspect.signature(f).parameters)
        skip_self = bool(params) and params[0] == "self"

        def describe(args, kwargs) -> str:
            if not include_args:
                return f"Entering {f.__name__}"
            shown = args[1:] if skip_self else args
            parts = [repr(a) for a in shown] + [f"{k}={v!r}" for k, v in kwargs.items()]
            return f"Entering {f.__name__} with args: {', '.join(parts)}"

        @functools.wraps(f)
        def wrapper(*args, **kwargs):
            logger.log(log_level, describe(args, kwargs))
            started = time.perf_counter()
            try:
                result = f(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Exception in {f.__name__}: {type(e).__name__}: {e}", exc_info=True
                )
                raise
            elapsed = round((time.perf_counter() - started) * 1000, 3)
            logger.log(log_level, f"Exiting {f.__name__}", extra={"duration_ms": elapsed})
            return result

        return wrapper

    if func is None:
        return decorator
    return decorator(func)
