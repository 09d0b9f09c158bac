from __future__ import annotations

import math
import numbers
import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

_NUMERIC_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_LEAF_TYPES = (str, bytes, bytearray, numbers.Number)


def _split(path: str | Sequence[str]) -> list[str]:
    if isinstance(path, str):
        return path.split(".")
    return [str(segment) for segment in path]


def _child(current: Any, segment: str) -> Any:
    if isinstance(current, Mapping):
        return current.get(segment)
    if isinstance(current, (list, tuple)):
        if segment.isdecimal() and int(segment) < len(current):
            return current[int(segment)]
        return None
    if isinstance(current, _LEAF_TYPES):
        return None
    try:
        value = getattr(current, segment, None)
    except Exception:
        return None
    return None if callable(value) else value


def resolve(record: Any, candidates: Iterable[str | Sequence[str]], default: Any = None) -> Any:
    """Return the first candidate path that resolves to a non-None value.

    A candidate is a dotted path (``"ratings.food"``) or a sequence of
    segments. Mappings are read by key, lists by index and other objects
    (pydantic models, dataclasses) by attribute. ``0``, ``False`` and ``""``
    count as present. Missing segments end the candidate, they never raise.
    """
    for path in candidates:
        current = record
        for segment in _split(path):
            if current is None:
                break
            current = _child(current, segment)
        if current is not None:
            return current
    return default


def to_number(value: Any) -> float | None:
    """Coerce like JavaScript ``Number()``; ``None`` stands for NaN.

    Blank strings are zero, booleans are 0/1, numeric strings are parsed.
    Non-finite results count as NaN.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, numbers.Real):
        try:
            number = float(value)
        except (OverflowError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if not _NUMERIC_RE.match(text):
            return None
        number = float(text)
    else:
        return None
    return number if math.isfinite(number) else None
