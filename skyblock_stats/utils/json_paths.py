"""
Safe accessors over untyped upstream JSON.

Every upstream payload is treated as a tree of optional values: a missing key,
a ``null``, or a node of the wrong type along a path is a plain "not found"
(``None``), never an exception. Candidate schema layouts are expressed as
explicit key paths and tried through ``first_hit``.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Optional, TypeVar

T = TypeVar("T")


def dig(node: Any, *path: str) -> Any:
    """Follow ``path`` through nested mappings, returning ``None`` on any miss.

    Example::

        dig(member, "currencies", "coin_purse")
    """
    current = node
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


def as_mapping(value: Any) -> Optional[Mapping[str, Any]]:
    """Return ``value`` if it is a mapping, else ``None``."""
    return value if isinstance(value, Mapping) else None


def as_number(value: Any, allow_strings: bool = False) -> Optional[float]:
    """Coerce a JSON value to a finite float, or ``None``.

    Booleans are rejected even though ``bool`` subclasses ``int``. Numeric
    strings are accepted only when ``allow_strings`` is set; some historical
    profile exports store experience counters as strings. Integers too large
    for a float are treated like infinities.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif allow_strings and isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def as_positive_number(value: Any, allow_strings: bool = False) -> Optional[float]:
    """Like ``as_number`` but only accepts values strictly greater than zero."""
    number = as_number(value, allow_strings=allow_strings)
    return number if number is not None and number > 0 else None


def first_hit(
    extractors: Iterable[Callable[..., Optional[T]]],
    *args: Any,
) -> Optional[T]:
    """Call each extractor with ``args`` in order; return the first usable result.

    A result is usable when it is not ``None`` and, for sized results (lists,
    dicts), not empty. Later extractors are never called once one hits.
    """
    for extract in extractors:
        result = extract(*args)
        if result is None:
            continue
        if hasattr(result, "__len__") and len(result) == 0:
            continue
        return result
    return None
