"""DEBUG tracing for the proving pipeline.

``apply_debug_logging(globals(), logger=logger)`` at the bottom of a module
wraps the functions and methods defined there.  With DEBUG enabled every call
logs its arguments, its result and the time it took; otherwise the wrappers
only cost one level check.  Polynomials, area expressions and construction
steps are logged as short summaries, since an elimination can produce
polynomials with thousands of terms.
"""

from __future__ import annotations

import inspect
import logging
import reprlib
import time
from functools import wraps
from typing import Any, Callable, Iterable, MutableMapping, Optional, Sequence, Set, TypeVar, cast

import numpy as np

F = TypeVar("F", bound=Callable[..., Any])

_WRAPPED = "_debug_logging_wrapped"

_repr = reprlib.Repr()
_repr.maxstring = 120
_repr.maxother = 120


def _summarize(value: Any) -> Optional[str]:
    # Imported here: the modules below are themselves traced through this one.
    from .area_method.expressions import AMExpression, SumOfProducts
    from .polynomials import Polynomial
    from .protocol import ConstructionStep

    if isinstance(value, Polynomial):
        return f"{type(value).__name__}(terms={len(value)}, degree={value.total_degree()})"
    if isinstance(value, AMExpression):
        return f"{type(value).__name__}(size={value.size()})"
    if isinstance(value, SumOfProducts):
        return f"SumOfProducts(terms={len(value.terms)})"
    if isinstance(value, ConstructionStep):
        return f"{value.kind}:{value.label}"
    if isinstance(value, np.ndarray):
        return f"ndarray(shape={tuple(value.shape)}, dtype={value.dtype})"
    return None


def _safe_repr(value: Any, *, max_items: int = 5, max_length: int = 400) -> str:
    summary = _summarize(value)
    if summary is not None:
        return summary

    if isinstance(value, dict):
        shown = [f"{_safe_repr(key)}: {_safe_repr(item)}" for key, item in list(value.items())[:max_items]]
        if len(value) > max_items:
            shown.append("...")
        return "{" + ", ".join(shown) + "}"

    if isinstance(value, (list, tuple)):
        shown = [_safe_repr(item) for item in value[:max_items]]
        if len(value) > max_items:
            shown.append("...")
        opening, closing = ("(", ")") if isinstance(value, tuple) else ("[", "]")
        return opening + ", ".join(shown) + closing

    rendered = _repr.repr(value)
    if len(rendered) > max_length:
        return rendered[:max_length] + "... (truncated)"
    return rendered


def _format_arguments(args: Sequence[Any], kwargs: MutableMapping[str, Any]) -> str:
    parts = [_safe_repr(arg) for arg in args]
    parts.extend(f"{key}={_safe_repr(value)}" for key, value in kwargs.items())
    return ", ".join(parts)


def debug_log_call(
    logger: logging.Logger, *, name: Optional[str] = None, log_result: bool = True
) -> Callable[[F], F]:
    """Decorator logging entry, exit (with elapsed time) and exceptions at DEBUG level."""

    def decorator(func: F) -> F:
        if getattr(func, _WRAPPED, False):
            return func
        label = name or func.__qualname__

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if not logger.isEnabledFor(logging.DEBUG):
                return func(*args, **kwargs)
            logger.debug("-> %s(%s)", label, _format_arguments(args, kwargs))
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                logger.debug("<- %s raised %s: %s", label, type(exc).__name__, exc)
                raise
            elapsed = (time.perf_counter() - started) * 1000.0
            if log_result:
                logger.debug("<- %s = %s (%.1f ms)", label, _safe_repr(result), elapsed)
            else:
                logger.debug("<- %s (%.1f ms)", label, elapsed)
            return result

        setattr(wrapper, _WRAPPED, True)
        return cast(F, wrapper)

    return decorator


def _wrap_class(cls: type, logger: logging.Logger, skip: Set[str]) -> None:
    for attr, value in list(vars(cls).items()):
        qualified = f"{cls.__name__}.{attr}"
        if attr.startswith("__") or attr in skip or qualified in skip:
            continue
        if isinstance(value, (staticmethod, classmethod)):
            func = value.__func__
            if getattr(func, "__module__", None) == cls.__module__:
                setattr(cls, attr, type(value)(debug_log_call(logger, name=qualified)(func)))
        elif inspect.isfunction(value) and value.__module__ == cls.__module__:
            setattr(cls, attr, debug_log_call(logger, name=qualified)(value))


def apply_debug_logging(
    namespace: MutableMapping[str, Any],
    *,
    logger: Optional[logging.Logger] = None,
    skip: Optional[Iterable[str]] = None,
    wrap_methods: bool = True,
) -> None:
    """Trace every function (and method, unless ``wrap_methods`` is off) defined in ``namespace``.

    ``skip`` names functions, classes or ``Class.method`` entries to leave alone.
    """

    module = namespace.get("__name__")
    logger = logger or logging.getLogger(module)
    skipped = set(skip or ())

    for name, value in list(namespace.items()):
        if name in skipped or getattr(value, "__module__", None) != module:
            continue
        if inspect.isfunction(value):
            namespace[name] = debug_log_call(logger, name=name)(value)
        elif wrap_methods and inspect.isclass(value):
            _wrap_class(value, logger, skipped)
