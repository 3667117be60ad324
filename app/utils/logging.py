"""Logging helpers that attach request and record context to error lines."""

import logging
import traceback
from typing import Any, Optional

from app.config import DEBUG

logger = logging.getLogger("Echo")


def _format_context(context: dict) -> str:
    return ", ".join(f"{key}={value}" for key, value in context.items())


def error_log(
    message: str,
    exc: Optional[Exception] = None,
    context: Optional[dict] = None,
    *args,
    **kwargs
) -> None:
    """
    Log an error as a single ``|``-separated line.

    Args:
        message: Error message
        exc: Optional exception; its type and text are appended and it is
            passed on as ``exc_info``
        context: Optional key/value pairs (feedback id, query, path, ...)
    """
    parts = [message]
    if context:
        parts.append(f"Context: {_format_context(context)}")
    if exc is not None:
        parts.append(f"Exception: {type(exc).__name__}: {exc}")
        if DEBUG:
            formatted = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
            parts.append(f"Traceback:\n{formatted}")
        logger.error(" | ".join(parts), *args, exc_info=exc, **kwargs)
    else:
        logger.error(" | ".join(parts), *args, **kwargs)


def log_exception_with_context(
    exc: Exception,
    context: Optional[dict] = None,
    message: Optional[str] = None
) -> None:
    error_log(message or f"Unhandled exception: {type(exc).__name__}", exc=exc, context=context)


def request_context(request: Any) -> dict:
    """Path, method and query of a Litestar request, as far as they can be read."""
    context = {}
    url = getattr(request, "url", None)
    if url is not None:
        context["path"] = getattr(url, "path", str(url))
        query = getattr(url, "query", "")
        if query:
            context["query"] = query
    method = getattr(request, "method", None)
    if method:
        context["method"] = method
    return context


def log_request_error(
    request: Any,
    exc: Exception,
    message: Optional[str] = None
) -> None:
    """Log ``exc`` together with the request it happened in."""
    log_exception_with_context(exc, context=request_context(request), message=message)
