"""Normalization helpers for loosely typed query results.

Tag values come back as strings and field values as JSON numbers; these
helpers coerce both and return ``None`` for anything unusable.
"""

from __future__ import annotations

import math
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)
