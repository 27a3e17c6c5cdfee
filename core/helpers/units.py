"""Fixed-point conversions for 18-decimal on-chain quantities."""

from decimal import Decimal, ROUND_DOWN

BASE_DECIMALS = 18
BPS_DENOMINATOR = 10_000


def to_base_units(amount: float, decimals: int = BASE_DECIMALS) -> int:
    """Convert a human-decimal amount to integer base units, truncating dust."""
    scaled = Decimal(str(amount)) * (Decimal(10) ** decimals)
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def from_base_units(value: int, decimals: int = BASE_DECIMALS) -> float:
    return float(Decimal(int(value)) / (Decimal(10) ** decimals))


def apply_slippage(amount: int, bps: int) -> int:
    """Minimum acceptable output for a quoted amount under a bps tolerance."""
    return amount * (BPS_DENOMINATOR - bps) // BPS_DENOMINATOR
