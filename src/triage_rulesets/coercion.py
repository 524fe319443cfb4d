"""Permissive coercion helpers for loosely-typed answer values.

Answers arrive from browsers and API clients, so a scale answer may be the
string ``"7"`` and a multi-select may be a bare string.  These helpers are
shared by the question models (answer normalisation) and the red-flag
evaluator (predicate comparison).  None of them raise.
"""

from __future__ import annotations

import math
from typing import Any


def is_absent(value: Any) -> bool:
    """True for values that count as "not answered".

    ``None``, blank strings and empty lists/tuples are all absent.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def to_number(value: Any) -> float | None:
    """Coerce *value* to a finite float, or ``None`` if that is not possible.

    Booleans are rejected even though Python treats them as ints; a checkbox
    answer should never satisfy a numeric threshold.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def format_answer(value: Any) -> str:
    """Render an answer for display inside a prompt.

    Lists are comma-joined and whole floats lose their trailing ``.0``.
    """
    if isinstance(value, (list, tuple)):
        return ", ".join(format_answer(item) for item in value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
