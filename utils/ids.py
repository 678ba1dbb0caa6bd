"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

ID helpers.
"""

from __future__ import annotations

import numpy as np


def new_id(prefix: str, rng: np.random.Generator) -> str:
    """Return `<prefix>_<8 hex digits>` drawn from the given generator."""
    token = int(rng.integers(0, 2**32))
    return f"{prefix}_{token:08x}"
