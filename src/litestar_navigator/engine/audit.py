"""Audit logging of navigator operations."""

from __future__ import annotations

import functools
import inspect
import logging
import time
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar

from litestar_navigator.navigation.codec import get_token_version

if TYPE_CHECKING:
    from collections.abc import Callable

__all__ = ["audited"]

P = ParamSpec("P")
R = TypeVar("R")

logger = logging.getLogger("litestar_navigator.audit")


def _summarize(parameters: dict[str, Any]) -> dict[str, Any]:
    # state tokens are large and opaque; only their version is worth logging
    summary = {}
    for key, value in parameters.items():
        if key == "token" and isinstance(value, str):
            summary[key] = f"<{get_token_version(value) or 'unknown'} token, {len(value)} chars>"
        else:
            summary[key] = value
    return summary


def audited(tool: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Log the outcome and duration of every call to the decorated operation.

    Args:
        tool: Name under which the operation appears in the audit log.

    Returns:
        A decorator. Exceptions raised by the operation are logged and re-raised.

    Example:
        >>> class Navigator:
        ...     @audited("nav_start")
        ...     def start(self, workflow_id: str) -> str: ...
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            bound = signature.bind(*args, **kwargs)
            parameters = _summarize(
                {k: v for k, v in bound.arguments.items() if k != "self" and v is not None}
            )
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.warning(
                    "audit",
                    extra={
                        "tool": tool,
                        "parameters": parameters,
                        "result": "error",
                        "duration_ms": round((time.perf_counter() - start) * 1000, 3),
                        "error_message": str(e),
                    },
                )
                raise
            logger.info(
                "audit",
                extra={
                    "tool": tool,
                    "parameters": parameters,
                    "result": "success",
                    "duration_ms": round((time.perf_counter() - start) * 1000, 3),
                },
            )
            return result

        return wrapper

    return decorator
