"""
Deferred attribute values.

Some attribute values are expensive to compute or only make sense at the
moment the manifest is assembled. A DeferredValue holds a zero-argument
supplier and evaluates it whenever its string form is requested. Any
failure during evaluation yields an empty string, which the merge engine
then drops as blank.

Usage:
    from buildmanifest.lazy import lazy, or_empty

    title = lazy(lambda: project.name)
    str(title)                          # evaluates the supplier
    or_empty(lambda: resolve_host())    # eager, failure -> ""
"""

from __future__ import annotations

from concurrent.futures import Future
from typing import Any, Callable

Supplier = Callable[[], Any]


def unwrap(value: Any) -> Any:
    """
    Unwrap one level of deferred indirection.

    A DeferredValue is evaluated, a finished Future yields its result and
    a zero-argument function is called. A Future that is still pending is
    treated as absent. Classes are values, not suppliers, and are returned
    as they are.
    """
    if isinstance(value, DeferredValue):
        return value.get()
    if isinstance(value, Future):
        if not value.done():
            return None
        return value.result()
    if callable(value) and not isinstance(value, type):
        return value()
    return value


def or_empty(supplier: Supplier) -> str:
    """Evaluate a supplier to a string, or return "" on absence or failure."""
    try:
        value = unwrap(supplier())
        return "" if value is None else str(value)
    except Exception:
        return ""


class DeferredValue:
    """A value whose string form is computed on demand."""

    __slots__ = ("_supplier",)

    def __init__(self, supplier: Supplier):
        self._supplier = supplier

    def get(self) -> Any:
        """Return the raw supplied value. Exceptions propagate."""
        return self._supplier()

    def __str__(self) -> str:
        return or_empty(self._supplier)

    def __repr__(self) -> str:
        return f"DeferredValue({self._supplier!r})"


def lazy(supplier: Supplier) -> DeferredValue:
    """Wrap a supplier so that it is only evaluated when stringified."""
    return DeferredValue(supplier)
