"""Shared helper utilities for consistency across the engine."""

from .serialization import to_jsonable
from .units import apply_slippage, from_base_units, to_base_units
from .validation import finite_float, parse_timestamp

__all__ = [
    "apply_slippage",
    "finite_float",
    "from_base_units",
    "parse_timestamp",
    "to_base_units",
    "to_jsonable",
]
