"""
Conversion resolver.

Looks up the function that turns a scalar read from JSON into an instance of
a target type when the scalar is not directly assignable. Two sources are
consulted, in order:

1. conversions registered with ``register_conversion(target, source, func)``;
2. static or class methods of the target type marked with
   ``@implicit(source)``.

Results of the class scan, including "no conversion", are memoised per
(target, source) pair for the lifetime of the process.
"""

import logging
import threading
from collections.abc import Callable
from typing import Any
from typing import TypeVar

from ._errors import type_name

logger = logging.getLogger(__name__)

F = TypeVar("F")

type Conversion = Callable[[Any], Any]

_IMPLICIT_ATTR = "__jmapper_implicit__"
_MISSING: Any = object()

_registered: dict[tuple[Any, type], Conversion] = {}
_registered_lock = threading.Lock()

_conversion_cache: dict[tuple[Any, type], Conversion | None] = {}
_conversion_cache_lock = threading.Lock()


def implicit(source: type) -> Callable[[F], F]:
    """
    Marks a static or class method as an implicit conversion from ``source``.

    The method receives the scalar read from JSON and returns an instance of
    the class that defines it::

        class Celsius:
            def __init__(self, degrees: float = 0.0) -> None:
                self.degrees = degrees

            @staticmethod
            @implicit(float)
            def from_float(value: float) -> "Celsius":
                return Celsius(value)

    The decorator can be placed above or below ``staticmethod``/``classmethod``.
    """
    if not isinstance(source, type):
        raise TypeError(f"source must be a type, not {type(source).__name__}")

    def decorate(func: F) -> F:
        target = getattr(func, "__func__", func)
        setattr(target, _IMPLICIT_ATTR, source)
        return func

    return decorate


def register_conversion(target: Any, source: type, func: Conversion) -> None:
    """Registers ``func`` to convert ``source`` scalars into ``target``."""
    if not callable(func):
        raise TypeError("func must be callable")
    with _registered_lock:
        _registered[(target, source)] = func


def _find_implicit(target: Any, source: type) -> Conversion | None:
    """Scans ``target`` and its bases for an ``@implicit(source)`` method."""
    if not isinstance(target, type):
        return None

    for klass in target.__mro__:
        for name, attr in vars(klass).items():
            func = getattr(attr, "__func__", attr)
            if getattr(func, _IMPLICIT_ATTR, None) is source:
                conversion: Conversion = getattr(target, name)
                return conversion
    return None


def get_conversion(target: Any, source: type) -> Conversion | None:
    """
    Returns the conversion from ``source`` to ``target`` or None.

    Thread safe. Concurrent first lookups may each scan the class; the first
    result stored wins and the others are discarded.
    """
    key = (target, source)

    registered = _registered.get(key)
    if registered is not None:
        return registered

    cached = _conversion_cache.get(key, _MISSING)
    if cached is not _MISSING:
        return cached

    found = _find_implicit(target, source)

    with _conversion_cache_lock:
        winner = _conversion_cache.setdefault(key, found)

    if winner is not found:
        logger.debug(
            "Discarded concurrent conversion lookup %s -> %s",
            type_name(source),
            type_name(target),
        )
    else:
        logger.debug(
            "Cached conversion %s -> %s: %s",
            type_name(source),
            type_name(target),
            "found" if found is not None else "none",
        )
    return winner


def clear_conversion_cache() -> None:
    """Forgets memoised class scans. Registered conversions are kept."""
    with _conversion_cache_lock:
        _conversion_cache.clear()


register_conversion(float, int, float)
