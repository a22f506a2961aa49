"""Dollar-cost averaging calculator."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Sequence

from dca_platform.strategies.base import compute_return_percent, require_non_negative
from dca_platform.types import Frequency, Quote, StrategyResult

WEEKLY_INTERVAL = timedelta(days=7)


def is_purchase_due(
    frequency: Frequency,
    current: datetime,
    last_purchase: datetime | None,
) -> bool:
    """Decide whether a recurring purchase happens at ``current``.

    The first sample always triggers a purchase. Weekly purchases need at
    least seven full days (exact timestamps, not calendar weeks) since the
    last purchase; monthly purchases happen on the first sample of a new
    calendar month.
    """
    if last_purchase is None:
        return True

    if frequency is Frequency.DAILY:
        return True
    elif frequency is Frequency.WEEKLY:
        return current - last_purchase >= WEEKLY_INTERVAL
    elif frequency is Frequency.MONTHLY:
        return (current.year, current.month) != (last_purchase.year, last_purchase.month)

    raise AssertionError(f"Unhandled frequency: {frequency!r}")


def dca_strategy_name(
    initial_amount: float,
    periodic_amount: float,
    frequency: Frequency,
) -> str:
    """Display label describing the shape of a DCA plan."""
    if initial_amount > 0 and periodic_amount == 0:
        return "Single Lump-Sum Investment"
    if initial_amount > 0:
        return f"Hybrid (Initial: ${initial_amount:,.0f} + DCA)"
    return f"DCA {frequency.value}"


def calculate_dca(
    quotes: Sequence[Quote],
    initial_amount: float,
    periodic_amount: float,
    frequency: Frequency | str,
) -> StrategyResult:
    """Simulate a dollar-cost averaging plan over a quote series.

    An optional initial seed is invested at the first close. Then
    ``periodic_amount`` is invested on the first sample and at every sample
    where the cadence says a purchase is due. Holdings are valued at the last
    close.

    :param quotes: Quote series in chronological order.
    :param initial_amount: Seed invested at the first sample.
    :param periodic_amount: Amount invested at each recurring purchase.
    :param frequency: Purchase cadence.
    :returns: Strategy result; a "no data" result when ``quotes`` is empty.
    :raises InvalidParameterError: If an amount is negative or the frequency
        is unknown.
    """
    require_non_negative("initial_amount", initial_amount)
    require_non_negative("periodic_amount", periodic_amount)
    frequency = Frequency.parse(frequency)

    if not quotes:
        return StrategyResult.no_data("DCA")

    total_invested = 0.0
    total_accumulated = 0.0

    if initial_amount > 0:
        total_accumulated += initial_amount / quotes[0].close
        total_invested += initial_amount

    if periodic_amount > 0:
        last_purchase: datetime | None = None
        for quote in quotes:
            if not is_purchase_due(frequency, quote.date, last_purchase):
                continue
            total_accumulated += periodic_amount / quote.close
            total_invested += periodic_amount
            last_purchase = quote.date

    final_value = total_accumulated * quotes[-1].close

    return StrategyResult(
        name=dca_strategy_name(initial_amount, periodic_amount, frequency),
        total_invested=total_invested,
        final_value=final_value,
        return_percent=compute_return_percent(total_invested, final_value),
        total_accumulated=total_accumulated,
    )


__all__ = ["calculate_dca", "is_purchase_due", "dca_strategy_name"]
