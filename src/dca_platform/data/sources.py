"""Raw quote sources.

This module provides an abstract interface for fetching daily closing prices
and concrete implementations for Yahoo Finance, CSV files, and in-memory
series. Sources know nothing about currencies or synthetic instruments; that
dispatch lives in :mod:`dca_platform.data.provider`.
"""

from __future__ import annotations

import csv
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Sequence

from dca_platform.data.normalize import normalize_quotes
from dca_platform.exceptions import DataSourceError
from dca_platform.types import DateRange, Quote, QuoteSeries, Symbol

logger = logging.getLogger(__name__)


def _strict_param(params: dict[str, Any]) -> bool:
    strict = params.get("strict", False)
    if not isinstance(strict, bool):
        raise DataSourceError(f"'strict' must be true or false, got {strict!r}")
    return strict


class QuoteSource(ABC):
    """Abstract base class for raw quote sources.

    All source implementations must inherit from this class and implement
    the `fetch_quotes` method.
    """

    @abstractmethod
    def fetch_quotes(self, symbol: Symbol | str, date_range: DateRange) -> QuoteSeries:
        """Fetch daily closing prices for a symbol.

        :param symbol: Symbol to fetch, passed to the provider unchanged.
        :param date_range: Time range to fetch (inclusive start, exclusive end).
        :returns: Quote series in chronological order, without invalid prices.
        :raises DataSourceError: If fetching fails.
        """
        ...


class YahooQuoteSource(QuoteSource):
    """Quote source that fetches daily closes from Yahoo Finance via yfinance.

    :param source_params: Optional parameters for configuring the source.
        - timeout: Request timeout in seconds (default: 30)
        - auto_adjust: Use split/dividend adjusted closes (default: False)
        - strict: Raise DataValidationError on out-of-order or same-day rows
          instead of repairing them (default: False)
    """

    def __init__(self, source_params: dict[str, Any] | None = None) -> None:
        """Initialize Yahoo quote source.

        :param source_params: Optional configuration parameters.
        :raises DataSourceError: If 'strict' is not a boolean.
        """
        self.params = source_params or {}
        self.timeout = self.params.get("timeout", 30)
        self.auto_adjust = self.params.get("auto_adjust", False)
        self.strict = _strict_param(self.params)

    def fetch_quotes(self, symbol: Symbol | str, date_range: DateRange) -> QuoteSeries:
        """Fetch daily closes from Yahoo Finance.

        :param symbol: Symbol to fetch.
        :param date_range: Time range to fetch.
        :returns: Quote series.
        :raises DataSourceError: If fetching fails or yields no data.
        :raises DataValidationError: In strict mode, if the rows are out of order.
        """
        try:
            import yfinance as yf
        except ImportError as e:
            raise DataSourceError(
                "yfinance is not installed. Install it with: pip install yfinance"
            ) from e

        # yfinance uses strings for dates
        start_str = date_range.start.strftime("%Y-%m-%d")
        end_str = date_range.end.strftime("%Y-%m-%d")

        logger.debug("Fetching %s from Yahoo Finance (%s to %s)", symbol, start_str, end_str)

        try:
            ticker = yf.Ticker(str(symbol))
            df = ticker.history(
                start=start_str,
                end=end_str,
                interval="1d",
                auto_adjust=self.auto_adjust,
                timeout=self.timeout,
            )
        except Exception as e:
            raise DataSourceError(
                f"Failed to fetch data for symbol '{symbol}': {e}"
            ) from e

        if df.empty:
            raise DataSourceError(f"No results returned for symbol '{symbol}'")

        # yfinance returns exchange-local, timezone-aware timestamps
        samples = [
            (timestamp.to_pydatetime(), close)
            for timestamp, close in zip(df.index, df["Close"])
        ]
        quotes = normalize_quotes(samples, strict=self.strict)

        logger.info("Fetched %d quotes for %s", len(quotes), symbol)
        return quotes


class CSVQuoteSource(QuoteSource):
    """Quote source that reads daily closes from a CSV file.

    Expected CSV format (default columns):
    - symbol: Instrument symbol
    - date: ISO format date or datetime string
    - close: Closing price

    :param source_params: Required parameters:
        - file_path: Path to the CSV file.
        Optional parameters:
        - symbol_col: Column name for symbol (default: "symbol")
        - date_col: Column name for the date (default: "date")
        - close_col: Column name for the closing price (default: "close")
        - delimiter: CSV delimiter (default: ",")
        - date_format: strptime format for dates (default: ISO format)
        - strict: Raise DataValidationError on out-of-order or same-day rows
          instead of repairing them (default: False)
    """

    def __init__(self, source_params: dict[str, Any] | None = None) -> None:
        """Initialize CSV quote source.

        :param source_params: Configuration with file_path and optional column mappings.
        :raises DataSourceError: If file_path is not provided.
        """
        self.params = source_params or {}
        self.file_path = self.params.get("file_path")
        if not self.file_path:
            raise DataSourceError("CSVQuoteSource requires 'file_path' in source_params")

        self.symbol_col = self.params.get("symbol_col", "symbol")
        self.date_col = self.params.get("date_col", "date")
        self.close_col = self.params.get("close_col", "close")
        self.delimiter = self.params.get("delimiter", ",")
        self.date_format = self.params.get("date_format")
        self.strict = _strict_param(self.params)

    def _parse_date(self, value: str) -> datetime:
        try:
            if self.date_format:
                ts = datetime.strptime(value, self.date_format)
            else:
                ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise DataSourceError(f"Failed to parse date '{value}': {e}") from e

        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return ts

    def fetch_quotes(self, symbol: Symbol | str, date_range: DateRange) -> QuoteSeries:
        """Read closes for one symbol from the CSV file.

        :param symbol: Symbol to select.
        :param date_range: Time range to filter.
        :returns: Quote series.
        :raises DataSourceError: If reading fails or the symbol has no rows.
        :raises DataValidationError: In strict mode, if the rows are out of order.
        """
        path = Path(self.file_path)
        if not path.exists():
            raise DataSourceError(f"CSV file not found: {self.file_path}")

        samples: list[tuple[datetime, str | None]] = []
        try:
            with open(path, newline="", encoding="utf-8") as f:
                reader = csv.DictReader(f, delimiter=self.delimiter)

                for row in reader:
                    if row.get(self.symbol_col) != str(symbol):
                        continue

                    date_str = row.get(self.date_col)
                    if not date_str:
                        continue

                    ts = self._parse_date(date_str)
                    if ts < date_range.start or ts >= date_range.end:
                        continue

                    samples.append((ts, row.get(self.close_col)))

        except csv.Error as e:
            raise DataSourceError(f"CSV parsing error: {e}") from e
        except OSError as e:
            raise DataSourceError(f"Failed to read CSV file: {e}") from e

        if not samples:
            raise DataSourceError(f"No rows for symbol '{symbol}' in {self.file_path}")

        return normalize_quotes(samples, strict=self.strict)


class StaticQuoteSource(QuoteSource):
    """In-memory quote source.

    Serves pre-loaded series, filtered to the requested date range. Useful for
    tests and offline comparisons.

    :param series: Mapping of symbol to quotes.
    """

    def __init__(self, series: Mapping[str, Sequence[Quote]] | None = None) -> None:
        self._series: dict[str, QuoteSeries] = {}
        self.requests: list[str] = []
        for symbol, quotes in (series or {}).items():
            self.set_quotes(symbol, quotes)

    def set_quotes(self, symbol: str, quotes: Sequence[Quote]) -> None:
        """Register the quotes to serve for a symbol."""
        self._series[symbol] = normalize_quotes(quotes)

    def fetch_quotes(self, symbol: Symbol | str, date_range: DateRange) -> QuoteSeries:
        """Return the registered quotes inside the date range."""
        self.requests.append(str(symbol))
        if str(symbol) not in self._series:
            raise DataSourceError(f"Unknown symbol '{symbol}'")
        return tuple(
            q
            for q in self._series[str(symbol)]
            if date_range.start <= q.date < date_range.end
        )


def resolve_quote_source(
    source_type: str,
    source_params: dict[str, Any] | None = None,
) -> QuoteSource:
    """Construct a quote source from configuration.

    :param source_type: Source type ("yahoo" or "csv").
    :param source_params: Source-specific parameters.
    :returns: QuoteSource instance for the specified type.
    :raises DataSourceError: If the source type is unrecognized.
    """
    kind = source_type.lower()

    if kind == "yahoo":
        return YahooQuoteSource(source_params)
    elif kind == "csv":
        return CSVQuoteSource(source_params)
    else:
        raise DataSourceError(
            f"Unrecognized data source type: '{source_type}'. "
            f"Supported types: yahoo, csv"
        )


__all__ = [
    "QuoteSource",
    "YahooQuoteSource",
    "CSVQuoteSource",
    "StaticQuoteSource",
    "resolve_quote_source",
]
