"""Helpers shared by the strategy calculators.

Every calculator is a pure function from a quote series and its parameters to
a :class:`~dca_platform.types.StrategyResult`. The helpers here keep the
return-percent rule and the parameter checks in one place.
"""

from __future__ import annotations

import math

from dca_platform.exceptions import InvalidParameterError


def compute_return_percent(total_invested: float, final_value: float) -> float:
    """Cumulative return in percent, 0 when nothing was invested.

    :param total_invested: Capital put into the strategy.
    :param final_value: Value of the holdings at the end of the period.
    :returns: ``(final_value - total_invested) / total_invested * 100``.
    """
    if total_invested <= 0:
        return 0.0
    return (final_value - total_invested) / total_invested * 100.0


def require_non_negative(name: str, value: float) -> float:
    """Reject negative or non-finite strategy parameters.

    :raises InvalidParameterError: If ``value`` is negative, NaN or infinite.
    """
    if not math.isfinite(value):
        raise InvalidParameterError(f"'{name}' must be a finite number, got {value}")
    if value < 0:
        raise InvalidParameterError(f"'{name}' must be non-negative, got {value}")
    return value


__all__ = ["compute_return_percent", "require_non_negative"]
