"""Quote normalization: ingestion clean-up and currency alignment.

Raw quotes coming from any source are passed through :func:`normalize_quotes`
before they reach the rest of the system. Foreign-listed instruments are then
converted into the reference currency with
:func:`align_to_reference_currency`.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, timezone
from typing import Iterable, Sequence, Union

from dca_platform.exceptions import DataValidationError
from dca_platform.types import Quote, QuoteSeries

logger = logging.getLogger(__name__)


def calendar_key(quote: Quote) -> date:
    """Calendar date of a quote, ignoring time-of-day.

    The date is taken in the quote's own timezone, so an exchange-local
    midnight stamp maps to its trading day.
    """
    return quote.date.date()


RawSample = Union[Quote, tuple[datetime, "float | None"]]


def normalize_quotes(raw: Iterable[RawSample], strict: bool = False) -> QuoteSeries:
    """Turn raw (timestamp, close) samples into a clean quote series.

    Samples with a missing, NaN or non-positive close are dropped, naive
    timestamps get UTC attached and samples are sorted chronologically. When
    several samples fall on the same calendar day (e.g. a provider's intraday
    row next to the day's close), only the last one of that day is kept.

    :param raw: Quote objects or ``(timestamp, close)`` pairs.
    :param strict: Raise instead of repairing samples that are out of order
        or share a calendar day.
    :returns: Immutable, chronologically ordered quote series.
    :raises DataValidationError: In strict mode, if the samples are not
        strictly increasing by calendar day.
    """
    cleaned: list[Quote] = []
    for item in raw:
        if isinstance(item, Quote):
            ts, close = item.date, item.close
        else:
            ts, close = item

        try:
            price = float(close)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            continue
        if not math.isfinite(price) or price <= 0:
            continue

        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)

        cleaned.append(Quote(date=ts, close=price))

    if strict:
        validate_series(cleaned)

    cleaned.sort(key=lambda q: q.date)

    series: list[Quote] = []
    for quote in cleaned:
        if series and calendar_key(series[-1]) == calendar_key(quote):
            series[-1] = quote
            continue
        series.append(quote)

    return tuple(series)


def validate_series(series: Sequence[Quote]) -> None:
    """Check that a series is strictly increasing by calendar day.

    :param series: Quote series to validate.
    :raises DataValidationError: If two samples are out of order or share a
        calendar day.
    """
    for previous, current in zip(series, series[1:]):
        if current.date <= previous.date:
            raise DataValidationError(
                f"Quote series is not strictly increasing: "
                f"{previous.date.isoformat()} followed by {current.date.isoformat()}"
            )
        if calendar_key(current) == calendar_key(previous):
            raise DataValidationError(
                f"Quote series has more than one sample on {calendar_key(current)}"
            )


def align_to_reference_currency(
    foreign: Sequence[Quote],
    currency_pair: Sequence[Quote],
) -> QuoteSeries:
    """Convert a foreign-currency series into the reference currency.

    The pair series quotes units of the foreign currency per one unit of the
    reference currency, so each foreign close is divided by the pair rate of
    the same calendar day. Foreign samples without a same-day rate (or with a
    zero rate) are dropped: there is no interpolation or carry-forward.

    :param foreign: Series priced in the foreign currency.
    :param currency_pair: Exchange-rate series used for conversion.
    :returns: Converted series, in the foreign series' order.
    """
    rates: dict[date, float] = {}
    for rate_quote in currency_pair:
        rates[calendar_key(rate_quote)] = rate_quote.close

    aligned: list[Quote] = []
    for quote in foreign:
        rate = rates.get(calendar_key(quote))
        if not rate:
            continue
        aligned.append(Quote(date=quote.date, close=quote.close / rate))

    dropped = len(foreign) - len(aligned)
    if dropped:
        logger.debug(
            "Dropped %d of %d samples without a same-day currency rate",
            dropped,
            len(foreign),
        )

    return tuple(aligned)


__all__ = [
    "calendar_key",
    "normalize_quotes",
    "validate_series",
    "align_to_reference_currency",
]
