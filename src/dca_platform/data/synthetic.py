"""Synthetic fixed-income series generated from a compounding rate.

A fixed-income instrument such as a savings account or a pre-fixed bond has no
market quotes. Its value is modeled as an index that starts at 100 and accrues
interest every calendar day. A currency-pair series provides the calendar
(its dates are the "market days" of the synthetic series) and, optionally, the
conversion rate into the reference currency.

Symbols follow the ``FIXED-<CCY>-<rate>`` convention, e.g. ``FIXED-BRL-10.0``
is a 10% a.a. instrument denominated in BRL.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Sequence

from dca_platform.exceptions import DataSourceError, InvalidParameterError
from dca_platform.types import Quote, QuoteSeries

logger = logging.getLogger(__name__)

FIXED_INCOME_PREFIX = "FIXED-"

# Notional value of the synthetic index at the first calendar date
ANCHOR_VALUE = 100.0

DAYS_PER_YEAR = 365.0
SECONDS_PER_DAY = 86400.0

_FIXED_INCOME_PATTERN = re.compile(r"^FIXED-(?P<currency>[A-Z]{3})-(?P<rate>.+)$")


def parse_fixed_income_symbol(symbol: str) -> tuple[str, float] | None:
    """Split a synthetic fixed-income symbol into currency and annual rate.

    :param symbol: Symbol to inspect (e.g., ``"FIXED-BRL-6.17"``).
    :returns: ``(currency, annual_rate_percent)``, or None when the symbol
        is not a synthetic fixed-income symbol.
    :raises InvalidParameterError: If the rate part is not a finite number.
    """
    match = _FIXED_INCOME_PATTERN.match(symbol)
    if match is None:
        return None

    rate_str = match.group("rate")
    try:
        rate = float(rate_str)
    except ValueError as e:
        raise InvalidParameterError(
            f"Invalid annual rate '{rate_str}' in symbol '{symbol}'"
        ) from e

    if not math.isfinite(rate):
        raise InvalidParameterError(
            f"Invalid annual rate '{rate_str}' in symbol '{symbol}'"
        )

    return match.group("currency"), rate


def daily_rate_from_annual(annual_rate_percent: float) -> float:
    """Equivalent daily compounding rate of a nominal annual rate.

    Uses a 365-day count: the instrument accrues on weekends and holidays too.

    :raises InvalidParameterError: If the rate is not finite or would wipe out
        more than the capital.
    """
    if not math.isfinite(annual_rate_percent):
        raise InvalidParameterError(
            f"Annual rate must be a finite number, got {annual_rate_percent}"
        )
    if annual_rate_percent <= -100.0:
        raise InvalidParameterError(
            f"Annual rate must be greater than -100%, got {annual_rate_percent}"
        )
    return (1.0 + annual_rate_percent / 100.0) ** (1.0 / DAYS_PER_YEAR) - 1.0


def generate_fixed_income_series(
    annual_rate_percent: float,
    currency_pair: Sequence[Quote],
    convert_to_reference: bool = True,
) -> QuoteSeries:
    """Build the quote series of a synthetic fixed-rate instrument.

    :param annual_rate_percent: Annual rate in percent (10.0 = 10% a.a.).
    :param currency_pair: Exchange-rate series defining the calendar. Its
        closes are units of the instrument's currency per reference unit.
    :param convert_to_reference: Divide the notional value by the same-day
        pair rate. When False the notional index is emitted as is.
    :returns: One quote per pair sample, in the pair series' order.
    :raises DataSourceError: If the pair series is empty.
    :raises InvalidParameterError: If the rate is invalid or out of range.
    """
    if not currency_pair:
        raise DataSourceError("No currency data for the requested period")

    daily_rate = daily_rate_from_annual(annual_rate_percent)
    anchor = currency_pair[0].date

    quotes: list[Quote] = []
    for rate_quote in currency_pair:
        days_elapsed = (rate_quote.date - anchor).total_seconds() / SECONDS_PER_DAY
        if days_elapsed < 0:
            days_elapsed = 0.0

        try:
            value = ANCHOR_VALUE * (1.0 + daily_rate) ** days_elapsed
        except OverflowError as e:
            raise InvalidParameterError(
                f"Annual rate {annual_rate_percent}% is out of range over the period"
            ) from e
        if not math.isfinite(value) or value <= 0:
            raise InvalidParameterError(
                f"Annual rate {annual_rate_percent}% is out of range over the period"
            )

        if convert_to_reference:
            if rate_quote.close == 0:
                continue
            value = value / rate_quote.close

        quotes.append(Quote(date=rate_quote.date, close=value))

    logger.debug(
        "Generated %d synthetic quotes at %.4f%% a.a. (converted=%s)",
        len(quotes),
        annual_rate_percent,
        convert_to_reference,
    )

    return tuple(quotes)


__all__ = [
    "FIXED_INCOME_PREFIX",
    "ANCHOR_VALUE",
    "parse_fixed_income_symbol",
    "daily_rate_from_annual",
    "generate_fixed_income_series",
]
