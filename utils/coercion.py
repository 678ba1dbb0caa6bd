"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Type coercion for plain payloads handed over by host applications.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional

from utils.errors import InvalidInput


def safe_float_optional(value: object) -> Optional[float]:
    """Convert a value to a finite float, returning None on failure.

    Handles None, empty strings, "NaN", infinities and booleans by returning None.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        if value in ("", "NaN"):
            return None
        result = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def safe_int_optional(value: object) -> Optional[int]:
    result = safe_float_optional(value)
    if result is None:
        return None
    return int(result)


def require_positive(payload: Mapping[str, Any], key: str) -> float:
    """Read `payload[key]` as a strictly positive finite float or raise InvalidInput."""
    value = safe_float_optional(payload.get(key))
    if value is None or value <= 0:
        raise InvalidInput(f"{key} must be a positive number, got {payload.get(key)!r}")
    return value


def optional_float(payload: Mapping[str, Any], key: str, default: float = 0.0) -> float:
    """Read an optional numeric field; missing means default, garbage is an error."""
    raw = payload.get(key)
    if raw in (None, ""):
        return default
    value = safe_float_optional(raw)
    if value is None:
        raise InvalidInput(f"{key} must be a finite number, got {raw!r}")
    return value
