"""Structured note calculator.

A structured note pays a share of the underlying asset's return over the
period, optionally capped on the upside and optionally protecting the nominal
capital on the downside. No units of the underlying are ever bought.
"""

from __future__ import annotations

from typing import Sequence

from dca_platform.strategies.base import require_non_negative
from dca_platform.types import Quote, StrategyResult


def structured_note_name(protected: bool, participation: float, cap_limit: float) -> str:
    """Display label encoding protection, participation and cap."""
    protection = "Protected" if protected else "Unprotected"
    cap = f"Cap {cap_limit * 100:.0f}%" if cap_limit > 0 else "No Cap"
    return f"Structured Note ({protection}, Part. {participation * 100:.0f}%, {cap})"


def note_gross_return(
    underlying_return: float,
    protected: bool,
    participation: float,
    cap_limit: float,
) -> float:
    """Apply participation, the upside cap and capital protection, in that order.

    :param underlying_return: Return of the underlying as a decimal (0.10 = 10%).
    :param protected: Floor the return at zero.
    :param participation: Fraction of the underlying return passed on.
    :param cap_limit: Maximum return as a decimal; 0 disables the cap.
    :returns: Gross return of the note as a decimal.
    """
    gross = underlying_return * participation

    if cap_limit > 0 and gross > cap_limit:
        gross = cap_limit

    if protected and gross < 0:
        gross = 0.0

    return gross


def calculate_structured_note(
    quotes: Sequence[Quote],
    initial_amount: float,
    protected: bool,
    participation: float,
    cap_limit: float,
) -> StrategyResult:
    """Compute the payoff of a capped and/or capital-protected note.

    :param quotes: Quote series of the underlying asset.
    :param initial_amount: Capital invested in the note.
    :param protected: Whether nominal capital is guaranteed.
    :param participation: Fraction of the underlying return passed on
        (1.0 = 100%).
    :param cap_limit: Maximum gross return as a decimal (0.20 = 20%);
        0 means no cap.
    :returns: Strategy result with ``total_accumulated`` always 0; a
        "no data" result when ``quotes`` is empty.
    :raises InvalidParameterError: If a parameter is negative.
    """
    require_non_negative("initial_amount", initial_amount)
    require_non_negative("participation", participation)
    require_non_negative("cap_limit", cap_limit)

    if not quotes:
        return StrategyResult.no_data("Structured Note")

    start_price = quotes[0].close
    end_price = quotes[-1].close
    underlying_return = (end_price - start_price) / start_price

    gross = note_gross_return(underlying_return, protected, participation, cap_limit)

    return StrategyResult(
        name=structured_note_name(protected, participation, cap_limit),
        total_invested=initial_amount,
        final_value=initial_amount * (1 + gross),
        return_percent=gross * 100 if initial_amount > 0 else 0.0,
        total_accumulated=0.0,
    )


__all__ = [
    "calculate_structured_note",
    "note_gross_return",
    "structured_note_name",
]
