"""Numeric tolerance helpers."""

from typing import Optional

from walletbalancer.config import RedistributionConfig


def compare_with_tolerance(
    a: float,
    b: float,
    relative_tolerance: Optional[float] = None,
    absolute_tolerance: float = 0,
) -> bool:
    """Return True if a and b should be treated as equal.

    The allowed gap is the larger of the absolute tolerance and the
    relative tolerance scaled by the larger magnitude.
    """
    allowed = absolute_tolerance
    if relative_tolerance is not None:
        allowed = max(allowed, relative_tolerance * max(abs(a), abs(b)))
    return abs(a - b) <= allowed


def resolve_tolerance(config: RedistributionConfig, symbol: str) -> int:
    """Absolute tolerance for a token, honouring per-token overrides."""
    return config.token_tolerances.get(symbol, config.absolute_tolerance)
