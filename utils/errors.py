"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Error types raised by the scoring engine.
"""

from __future__ import annotations


class PpiError(ValueError):
    """Base class for every error the engine raises on bad inputs or tables."""

    kind = "PpiError"


class InvalidInput(PpiError):
    kind = "InvalidInput"


class OutOfRange(PpiError):
    """Target points cannot be inverted (at or beyond the curve clamps)."""

    kind = "OutOfRange"


class ConfigError(PpiError):
    kind = "ConfigError"


class Unclassifiable(InvalidInput):
    kind = "Unclassifiable"
