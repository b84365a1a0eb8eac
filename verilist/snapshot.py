"""Snapshots and structural equality.

A snapshot is an independent copy of a value's logical state, used to state
before/after contracts. Structural equality (written ``===`` in contract
descriptions) compares two values by content, regardless of aliasing and
without requiring the element type to define ``__eq__``.
"""

from __future__ import annotations

import copy
from dataclasses import fields, is_dataclass
from typing import Any, TypeVar

T = TypeVar("T")

_SCALARS = (int, float, complex, str, bytes, bool, type(None))


def snap(value: T) -> T:
    """Return a deep, independent copy of ``value``."""
    return copy.deepcopy(value)


def structurally_equal(a: Any, b: Any) -> bool:
    """Value-level equality of ``a`` and ``b``.

    Scalars compare with ``==``. Sequences, sets and mappings compare
    element-wise. Other objects must have the same type; dataclasses compare
    field by field, objects with a ``__structure__`` method compare by its
    result, and plain objects compare their ``__dict__`` and ``__slots__``.
    Types with a user-defined ``__eq__`` use it.
    """
    return _equal(a, b, {})


def _equal(a: Any, b: Any, seen: dict[tuple[int, int], tuple[Any, Any]]) -> bool:
    if a is b:
        return True
    if isinstance(a, _SCALARS) or isinstance(b, _SCALARS):
        return type(a) is type(b) and a == b
    if type(a) is not type(b):
        return False

    key = (id(a), id(b))
    if key in seen:
        return True
    # values keep compared objects alive so their ids are not reused
    seen[key] = (a, b)

    if hasattr(a, "__structure__"):
        return _equal(a.__structure__(), b.__structure__(), seen)
    if isinstance(a, (list, tuple)):
        return len(a) == len(b) and all(_equal(x, y, seen) for x, y in zip(a, b))
    if isinstance(a, dict):
        if a.keys() != b.keys():
            return False
        return all(_equal(a[k], b[k], seen) for k in a)
    if isinstance(a, (set, frozenset)):
        return a == b
    if is_dataclass(a):
        return all(_equal(getattr(a, f.name), getattr(b, f.name), seen) for f in fields(a))
    if type(a).__eq__ is not object.__eq__:
        return bool(a == b)
    return _equal(_state(a), _state(b), seen)


def _state(obj: Any) -> dict[str, Any]:
    state: dict[str, Any] = dict(getattr(obj, "__dict__", {}))
    for klass in type(obj).__mro__:
        for name in getattr(klass, "__slots__", ()):
            if name in ("__dict__", "__weakref__"):
                continue
            if hasattr(obj, name):
                state[name] = getattr(obj, name)
    return state
