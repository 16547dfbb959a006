"""
Central logging configuration and debug decorator.

Console output at INFO, full DEBUG trail (including tracebacks) in
``system_debug.log`` at the project root, plus a decorator that wraps the
pipeline entry points with timing and exception logging.
"""

import functools
import logging
import reprlib
import traceback
from pathlib import Path
from time import time
from typing import Any, Callable, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

LOG_FILE = Path(__file__).resolve().parent.parent / "system_debug.log"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(module)s]: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
ROOT_NAME = "market_insights"

_logger = logging.getLogger(ROOT_NAME)
_logger.setLevel(logging.DEBUG)

# Prevent duplicate handlers on Streamlit reruns
if not _logger.handlers:
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    _logger.addHandler(console_handler)

    file_handler = logging.FileHandler(LOG_FILE, mode="a", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    _logger.addHandler(file_handler)


class _ArgRepr(reprlib.Repr):
    """Bounded argument repr; objects without a dedicated rule show only their type."""

    def repr_instance(self, obj: Any, level: int) -> str:
        if obj is None or isinstance(obj, (bool, float, Path)):
            return super().repr_instance(obj, level)
        if isinstance(obj, (bytes, bytearray)):
            return f"<{type(obj).__name__} len={len(obj)}>"
        return f"<{type(obj).__name__}>"


_arg_repr = _ArgRepr()
_arg_repr.maxstring = 100
_arg_repr.maxother = 100


def describe_call(args: tuple, kwargs: dict[str, Any]) -> str:
    """Short, size-bounded rendering of call arguments for the entry log line."""
    parts = [_arg_repr.repr(arg) for arg in args[:3]]
    parts += [f"{k}={_arg_repr.repr(v)}" for k, v in list(kwargs.items())[:3]]
    return ", ".join(parts)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Optional module name, with or without the package prefix
            (``__name__`` works). If None, returns the package root logger.

    Returns:
        Logger under the ``market_insights`` hierarchy.
    """
    if not name or name == ROOT_NAME:
        return _logger
    if name.startswith(f"{ROOT_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_NAME}.{name}")


def debug_watcher(func: F) -> F:
    """
    Decorator that logs function entry, execution time, and exceptions.

    Exceptions are logged (traceback at DEBUG, so file only) and re-raised.
    """
    logger = get_logger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        func_name = func.__name__
        start_time = time()

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Starting {func_name}... ({describe_call(args, kwargs)})")

        try:
            result = func(*args, **kwargs)
            elapsed = time() - start_time
            logger.info(f"Completed {func_name} in {elapsed:.3f} seconds.")
            return result

        except Exception as e:
            elapsed = time() - start_time
            logger.error(
                f"Exception in {func_name} after {elapsed:.3f} seconds: {type(e).__name__}: {e}"
            )
            logger.debug(f"Full traceback for {func_name}:\n{traceback.format_exc()}")
            raise

    return wrapper  # type: ignore[return-value]
