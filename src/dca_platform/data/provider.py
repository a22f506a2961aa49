"""Symbol-aware quote provider.

The provider resolves a symbol to a quote series by looking at its shape:

- ``FIXED-<CCY>-<rate>``: synthetic fixed-income series generated from the
  currency-pair calendar (see :mod:`dca_platform.data.synthetic`).
- ``<TICKER><foreign suffix>`` (``PETR4.SA``): foreign-listed equity, converted
  into the reference currency unless native mode is requested.
- anything else: fetched from the raw source unchanged.

The currency pair is always fetched straight from the raw source through
:meth:`QuoteProvider.fetch_currency_pair`, never through :meth:`get_quotes`,
so resolving a symbol cannot recurse.
"""

from __future__ import annotations

import logging

from dca_platform.data.normalize import align_to_reference_currency
from dca_platform.data.sources import QuoteSource
from dca_platform.data.synthetic import (
    FIXED_INCOME_PREFIX,
    generate_fixed_income_series,
    parse_fixed_income_symbol,
)
from dca_platform.exceptions import DataSourceError, InvalidParameterError
from dca_platform.types import DateRange, QuoteSeries, Symbol

logger = logging.getLogger(__name__)


class QuoteProvider:
    """Resolve symbols to quote series, handling currency and synthetic assets.

    Example usage::

        from dca_platform.data import QuoteProvider, YahooQuoteSource
        from dca_platform.types import DateRange
        from datetime import datetime, timezone

        provider = QuoteProvider(YahooQuoteSource())
        quotes = provider.get_quotes(
            "PETR4.SA",
            DateRange(
                start=datetime(2020, 1, 1, tzinfo=timezone.utc),
                end=datetime(2024, 1, 1, tzinfo=timezone.utc),
            ),
        )

    :param source: Raw quote source used for every fetch.
    :param currency: Foreign currency code handled by the provider.
    :param currency_pair: Symbol of the pair quoting ``currency`` per
        reference unit (e.g., ``"BRL=X"`` = BRL per USD).
    :param foreign_suffix: Symbol suffix of instruments listed in ``currency``.
    :param cache_currency_pair: Reuse the pair series across calls for the
        same date range.
    """

    def __init__(
        self,
        source: QuoteSource,
        currency: str = "BRL",
        currency_pair: str = "BRL=X",
        foreign_suffix: str = ".SA",
        cache_currency_pair: bool = True,
    ) -> None:
        self.source = source
        self.currency = currency.upper()
        self.currency_pair = Symbol(currency_pair)
        self.foreign_suffix = foreign_suffix
        self.cache_currency_pair = cache_currency_pair
        self._pair_cache: dict[DateRange, QuoteSeries] = {}

    def is_foreign(self, symbol: str) -> bool:
        """Whether the symbol is listed in the foreign market."""
        return symbol.upper().endswith(self.foreign_suffix.upper())

    def is_synthetic(self, symbol: str) -> bool:
        """Whether the symbol names a synthetic fixed-income instrument."""
        return symbol.upper().startswith(FIXED_INCOME_PREFIX)

    def fetch_currency_pair(self, date_range: DateRange) -> QuoteSeries:
        """Fetch the currency-pair series straight from the raw source.

        :param date_range: Time range to fetch.
        :returns: Exchange-rate series.
        :raises DataSourceError: If the pair cannot be fetched.
        """
        if self.cache_currency_pair and date_range in self._pair_cache:
            return self._pair_cache[date_range]

        try:
            pair = self.source.fetch_quotes(self.currency_pair, date_range)
        except DataSourceError as e:
            raise DataSourceError(
                f"Failed to fetch currency pair '{self.currency_pair}': {e}"
            ) from e

        if self.cache_currency_pair:
            self._pair_cache[date_range] = pair
        return pair

    def get_quotes(
        self,
        symbol: Symbol | str,
        date_range: DateRange,
        native: bool = False,
    ) -> QuoteSeries:
        """Resolve a symbol to its quote series.

        :param symbol: Symbol to resolve.
        :param date_range: Time range to fetch.
        :param native: Keep values in the instrument's own currency.
        :returns: Quote series (possibly empty after currency alignment).
        :raises DataSourceError: If a fetch fails.
        :raises InvalidParameterError: If a synthetic symbol is malformed.
        """
        symbol = Symbol(str(symbol).strip())

        if self.is_synthetic(symbol):
            return self._get_synthetic(symbol, date_range, native)

        if self.is_foreign(symbol):
            return self._get_foreign(symbol, date_range, native)

        return self.source.fetch_quotes(symbol, date_range)

    def _get_synthetic(
        self,
        symbol: Symbol,
        date_range: DateRange,
        native: bool,
    ) -> QuoteSeries:
        parsed = parse_fixed_income_symbol(symbol.upper())
        if parsed is None:
            raise InvalidParameterError(
                f"Malformed synthetic symbol '{symbol}'. "
                f"Expected {FIXED_INCOME_PREFIX}<CCY>-<rate>"
            )

        currency, annual_rate = parsed
        if currency != self.currency:
            raise DataSourceError(
                f"Unsupported currency '{currency}' in '{symbol}'. "
                f"Supported: {self.currency}"
            )

        pair = self.fetch_currency_pair(date_range)
        logger.debug("Generating %s from %d pair quotes", symbol, len(pair))
        return generate_fixed_income_series(
            annual_rate,
            pair,
            convert_to_reference=not native,
        )

    def _get_foreign(
        self,
        symbol: Symbol,
        date_range: DateRange,
        native: bool,
    ) -> QuoteSeries:
        quotes = self.source.fetch_quotes(symbol, date_range)
        if native:
            return quotes

        pair = self.fetch_currency_pair(date_range)
        aligned = align_to_reference_currency(quotes, pair)
        if len(aligned) < len(quotes):
            logger.info(
                "%s: %d of %d quotes had no same-day %s rate",
                symbol,
                len(quotes) - len(aligned),
                len(quotes),
                self.currency_pair,
            )
        return aligned

    def clear_cache(self) -> None:
        """Clear the currency-pair cache."""
        self._pair_cache.clear()


__all__ = ["QuoteProvider"]
