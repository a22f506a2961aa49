"""Lump-sum calculator: the whole capital invested at the first sample."""

from __future__ import annotations

from typing import Sequence

from dca_platform.strategies.base import compute_return_percent, require_non_negative
from dca_platform.types import Quote, StrategyResult


def calculate_lump_sum(
    quotes: Sequence[Quote],
    total_amount: float,
    label: str = "Lump Sum",
) -> StrategyResult:
    """Invest ``total_amount`` at the first close and hold until the last one.

    :param quotes: Quote series in chronological order.
    :param total_amount: Capital invested at the first sample.
    :param label: Display name of the result.
    :returns: Strategy result; a "no data" result when ``quotes`` is empty.
    :raises InvalidParameterError: If ``total_amount`` is negative.
    """
    require_non_negative("total_amount", total_amount)

    if not quotes:
        return StrategyResult.no_data(label)

    accumulated = total_amount / quotes[0].close
    final_value = accumulated * quotes[-1].close

    return StrategyResult(
        name=label,
        total_invested=total_amount,
        final_value=final_value,
        return_percent=compute_return_percent(total_amount, final_value),
        total_accumulated=accumulated,
    )


__all__ = ["calculate_lump_sum"]
