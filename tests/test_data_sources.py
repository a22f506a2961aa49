"""Tests for raw quote source implementations."""

import math
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from dca_platform.data.sources import (CSVQuoteSource, QuoteSource,
                                       StaticQuoteSource, YahooQuoteSource,
                                       resolve_quote_source)
from dca_platform.exceptions import DataSourceError, DataValidationError
from dca_platform.types import DateRange, Quote, Symbol


@pytest.fixture
def date_range() -> DateRange:
    """Create a test date range."""
    return DateRange(
        start=datetime(2024, 1, 1, tzinfo=timezone.utc),
        end=datetime(2024, 2, 1, tzinfo=timezone.utc),
    )


class TestQuoteSourceProtocol:
    """Tests for the QuoteSource abstract base class."""

    def test_quote_source_is_abstract(self) -> None:
        """QuoteSource cannot be instantiated directly."""
        with pytest.raises(TypeError, match="abstract"):
            QuoteSource()  # type: ignore[abstract]

    def test_subclass_must_implement_fetch_quotes(self) -> None:
        """Subclasses must implement fetch_quotes."""

        class IncompleteSource(QuoteSource):
            pass

        with pytest.raises(TypeError, match="abstract"):
            IncompleteSource()


class TestYahooQuoteSource:
    """Tests for YahooQuoteSource."""

    def test_init_with_defaults(self) -> None:
        """YahooQuoteSource initializes with default parameters."""
        source = YahooQuoteSource()

        assert source.timeout == 30
        assert source.auto_adjust is False
        assert source.strict is False

    def test_init_with_custom_params(self) -> None:
        """YahooQuoteSource accepts custom parameters."""
        source = YahooQuoteSource({"timeout": 60, "auto_adjust": True})

        assert source.timeout == 60
        assert source.auto_adjust is True

    def test_fetch_quotes_returns_clean_series(self, date_range: DateRange) -> None:
        """Zero and NaN closes from yfinance are dropped."""
        import pandas as pd

        mock_df = pd.DataFrame(
            {"Close": [153.0, 0.0, math.nan, 155.5]},
            index=pd.DatetimeIndex(
                [
                    pd.Timestamp("2024-01-02", tz="America/New_York"),
                    pd.Timestamp("2024-01-03", tz="America/New_York"),
                    pd.Timestamp("2024-01-04", tz="America/New_York"),
                    pd.Timestamp("2024-01-05", tz="America/New_York"),
                ]
            ),
        )

        mock_ticker = MagicMock()
        mock_ticker.history.return_value = mock_df

        with patch.dict("sys.modules", {"yfinance": MagicMock()}):
            import sys

            mock_yf = sys.modules["yfinance"]
            mock_yf.Ticker.return_value = mock_ticker

            source = YahooQuoteSource()
            quotes = source.fetch_quotes(Symbol("AAPL"), date_range)

        mock_yf.Ticker.assert_called_once_with("AAPL")
        kwargs = mock_ticker.history.call_args.kwargs
        assert kwargs["start"] == "2024-01-01"
        assert kwargs["end"] == "2024-02-01"
        assert kwargs["interval"] == "1d"

        assert [q.close for q in quotes] == [153.0, 155.5]
        assert quotes[0].date.tzinfo is not None
        assert quotes[0].date.date().isoformat() == "2024-01-02"

    def test_empty_response_raises(self, date_range: DateRange) -> None:
        """An empty DataFrame is reported as missing data."""
        import pandas as pd

        mock_ticker = MagicMock()
        mock_ticker.history.return_value = pd.DataFrame()

        with patch.dict("sys.modules", {"yfinance": MagicMock()}):
            import sys

            sys.modules["yfinance"].Ticker.return_value = mock_ticker

            source = YahooQuoteSource()
            with pytest.raises(DataSourceError, match="No results"):
                source.fetch_quotes(Symbol("NOPE"), date_range)

    def test_fetch_failure_is_wrapped(self, date_range: DateRange) -> None:
        """Exceptions raised by yfinance become DataSourceError."""
        mock_ticker = MagicMock()
        mock_ticker.history.side_effect = RuntimeError("connection reset")

        with patch.dict("sys.modules", {"yfinance": MagicMock()}):
            import sys

            sys.modules["yfinance"].Ticker.return_value = mock_ticker

            source = YahooQuoteSource()
            with pytest.raises(DataSourceError, match="Failed to fetch data"):
                source.fetch_quotes(Symbol("AAPL"), date_range)


def write_csv(path: Path, rows: list[str]) -> Path:
    """Write a quotes CSV with the default header."""
    path.write_text("symbol,date,close\n" + "\n".join(rows) + "\n")
    return path


class TestCSVQuoteSource:
    """Tests for CSVQuoteSource."""

    def test_init_requires_file_path(self) -> None:
        """CSVQuoteSource requires file_path in source_params."""
        with pytest.raises(DataSourceError, match="requires 'file_path'"):
            CSVQuoteSource()

        with pytest.raises(DataSourceError, match="requires 'file_path'"):
            CSVQuoteSource({})

    def test_fetch_filters_symbol_and_range(
        self, tmp_path: Path, date_range: DateRange
    ) -> None:
        """Only rows of the symbol inside the range are returned."""
        csv_file = write_csv(
            tmp_path / "quotes.csv",
            [
                "AAPL,2023-12-29,190.0",
                "AAPL,2024-01-03,185.0",
                "MSFT,2024-01-03,370.0",
                "AAPL,2024-01-02,186.0",
                "AAPL,2024-01-04,0",
                "AAPL,2024-02-01,180.0",
            ],
        )

        source = CSVQuoteSource({"file_path": str(csv_file)})
        quotes = source.fetch_quotes(Symbol("AAPL"), date_range)

        assert [q.close for q in quotes] == [186.0, 185.0]
        assert quotes[0].date == datetime(2024, 1, 2, tzinfo=timezone.utc)

    def test_custom_columns_and_format(
        self, tmp_path: Path, date_range: DateRange
    ) -> None:
        csv_file = tmp_path / "quotes.csv"
        csv_file.write_text("ticker;day;price\nBTC-USD;05/01/2024;42000.5\n")

        source = CSVQuoteSource(
            {
                "file_path": str(csv_file),
                "symbol_col": "ticker",
                "date_col": "day",
                "close_col": "price",
                "delimiter": ";",
                "date_format": "%d/%m/%Y",
            }
        )
        quotes = source.fetch_quotes(Symbol("BTC-USD"), date_range)

        assert len(quotes) == 1
        assert quotes[0].close == 42000.5
        assert quotes[0].date == datetime(2024, 1, 5, tzinfo=timezone.utc)

    def test_missing_file_raises(self, tmp_path: Path, date_range: DateRange) -> None:
        source = CSVQuoteSource({"file_path": str(tmp_path / "missing.csv")})

        with pytest.raises(DataSourceError, match="CSV file not found"):
            source.fetch_quotes(Symbol("AAPL"), date_range)

    def test_unknown_symbol_raises(self, tmp_path: Path, date_range: DateRange) -> None:
        csv_file = write_csv(tmp_path / "quotes.csv", ["AAPL,2024-01-02,186.0"])
        source = CSVQuoteSource({"file_path": str(csv_file)})

        with pytest.raises(DataSourceError, match="No rows for symbol 'MSFT'"):
            source.fetch_quotes(Symbol("MSFT"), date_range)

    def test_out_of_order_rows_are_repaired(
        self, tmp_path: Path, date_range: DateRange
    ) -> None:
        csv_file = write_csv(
            tmp_path / "quotes.csv",
            ["AAPL,2024-01-03,185.0", "AAPL,2024-01-02,186.0", "AAPL,2024-01-03,187.0"],
        )
        source = CSVQuoteSource({"file_path": str(csv_file)})

        quotes = source.fetch_quotes(Symbol("AAPL"), date_range)

        assert [q.close for q in quotes] == [186.0, 187.0]

    def test_strict_rejects_out_of_order_rows(
        self, tmp_path: Path, date_range: DateRange
    ) -> None:
        """With strict=True the file must already be a clean series."""
        csv_file = write_csv(
            tmp_path / "quotes.csv",
            ["AAPL,2024-01-03,185.0", "AAPL,2024-01-02,186.0"],
        )
        source = CSVQuoteSource({"file_path": str(csv_file), "strict": True})

        with pytest.raises(DataValidationError, match="not strictly increasing"):
            source.fetch_quotes(Symbol("AAPL"), date_range)

    def test_strict_must_be_boolean(self, tmp_path: Path) -> None:
        with pytest.raises(DataSourceError, match="'strict' must be true or false"):
            CSVQuoteSource({"file_path": str(tmp_path / "q.csv"), "strict": "false"})

    def test_bad_date_raises(self, tmp_path: Path, date_range: DateRange) -> None:
        csv_file = write_csv(tmp_path / "quotes.csv", ["AAPL,yesterday,186.0"])
        source = CSVQuoteSource({"file_path": str(csv_file)})

        with pytest.raises(DataSourceError, match="Failed to parse date"):
            source.fetch_quotes(Symbol("AAPL"), date_range)


class TestStaticQuoteSource:
    """Tests for StaticQuoteSource."""

    def test_filters_to_range_and_records_requests(self, date_range: DateRange) -> None:
        source = StaticQuoteSource(
            {
                "AAA": [
                    Quote(date=datetime(2023, 12, 31, tzinfo=timezone.utc), close=1.0),
                    Quote(date=datetime(2024, 1, 15, tzinfo=timezone.utc), close=2.0),
                    Quote(date=datetime(2024, 2, 1, tzinfo=timezone.utc), close=3.0),
                ]
            }
        )

        quotes = source.fetch_quotes("AAA", date_range)

        assert [q.close for q in quotes] == [2.0]
        assert source.requests == ["AAA"]

    def test_unknown_symbol_raises(self, date_range: DateRange) -> None:
        source = StaticQuoteSource()

        with pytest.raises(DataSourceError, match="Unknown symbol"):
            source.fetch_quotes("AAA", date_range)

    def test_set_quotes_sorts(self, date_range: DateRange) -> None:
        source = StaticQuoteSource()
        source.set_quotes(
            "AAA",
            [
                Quote(date=datetime(2024, 1, 3, tzinfo=timezone.utc), close=3.0),
                Quote(date=datetime(2024, 1, 2, tzinfo=timezone.utc), close=2.0),
            ],
        )

        assert [q.close for q in source.fetch_quotes("AAA", date_range)] == [2.0, 3.0]


class TestResolveQuoteSource:
    """Tests for resolve_quote_source."""

    def test_resolve_yahoo(self) -> None:
        assert isinstance(resolve_quote_source("yahoo"), YahooQuoteSource)

    def test_resolve_is_case_insensitive(self) -> None:
        assert isinstance(resolve_quote_source("Yahoo"), YahooQuoteSource)

    def test_resolve_csv(self, tmp_path: Path) -> None:
        source = resolve_quote_source("csv", {"file_path": str(tmp_path / "q.csv")})

        assert isinstance(source, CSVQuoteSource)

    def test_unknown_type_raises(self) -> None:
        with pytest.raises(DataSourceError, match="Unrecognized data source type"):
            resolve_quote_source("bloomberg")
