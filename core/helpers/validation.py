"""Validation helpers to keep parsed market values finite."""

import math
from typing import Any, Optional


def finite_float(value: Any, default: float = 0.0) -> float:
    """Return a finite float or a default fallback."""
    try:
        fval = float(value)
        if math.isfinite(fval):
            return fval
    except (TypeError, ValueError):
        pass
    return default


def parse_timestamp(value: Any) -> Optional[int]:
    """Parse unix seconds from an int or numeric string; None when unusable."""
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        fval = finite_float(value, default=math.nan)
        if math.isnan(fval):
            return None
        return int(fval)
