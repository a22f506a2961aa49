"""Tests for the multi-asset strategy comparison."""

from datetime import datetime, timedelta, timezone

import pytest

from dca_platform.comparison import StrategyComparison, compare, summary_table
from dca_platform.data import QuoteProvider, StaticQuoteSource
from dca_platform.exceptions import ConfigError, InvalidParameterError
from dca_platform.types import (AssetOption, CompareConfig, ComparisonReport,
                                DateRange, Frequency, Quote, StrategyResult,
                                StructuredNoteSpec, Symbol)

START = datetime(2024, 1, 1, tzinfo=timezone.utc)
NUM_DAYS = 91  # Jan 1 to Mar 31, 2024

ASSETS = (
    AssetOption(symbol=Symbol("AAA"), name="Alpha", category="Test"),
    AssetOption(symbol=Symbol("BBB"), name="Beta", category="Test"),
)


def create_series(prices: list[float]) -> list[Quote]:
    """Daily quotes starting at START."""
    return [
        Quote(date=START + timedelta(days=i), close=p) for i, p in enumerate(prices)
    ]


@pytest.fixture
def source() -> StaticQuoteSource:
    """AAA rises one unit a day from 100; BBB stays at 50."""
    return StaticQuoteSource(
        {
            "AAA": create_series([100.0 + i for i in range(NUM_DAYS)]),
            "BBB": create_series([50.0] * NUM_DAYS),
        }
    )


def make_config(**overrides) -> CompareConfig:
    fields = {
        "date_range": DateRange(start=START, end=START + timedelta(days=NUM_DAYS)),
        "periodic_amount": 100.0,
        "frequency": Frequency.MONTHLY,
    }
    fields.update(overrides)
    return CompareConfig(**fields)


def run(source: StaticQuoteSource, **overrides) -> ComparisonReport:
    return compare(make_config(**overrides), QuoteProvider(source), ASSETS)


class TestStrategyComparison:
    """Tests for StrategyComparison.run."""

    def test_ranks_by_return(self, source: StaticQuoteSource) -> None:
        """DCA, capped note and flat lump sum come out best first."""
        report = run(
            source,
            dca_assets=[Symbol("AAA")],
            lump_sum_assets=[Symbol("BBB")],
            structured_notes=[StructuredNoteSpec(underlying=Symbol("AAA"), cap_limit=0.2)],
        )

        names = [r.name for r in report.results]
        assert names == [
            "DCA Alpha",
            "Structured Note (Protected, Part. 100%, Cap 20%) on Alpha",
            "Lump Sum Beta",
        ]
        assert report.best_strategy == "DCA Alpha"
        returns = [r.return_percent for r in report.results]
        assert returns == sorted(returns, reverse=True)

    def test_lump_sum_uses_dca_total(self, source: StaticQuoteSource) -> None:
        """The lump-sum leg invests what the DCA plan invested."""
        report = run(
            source,
            dca_assets=[Symbol("AAA")],
            lump_sum_assets=[Symbol("BBB")],
        )

        dca = next(r for r in report.results if r.name == "DCA Alpha")
        lump = next(r for r in report.results if r.name == "Lump Sum Beta")

        # Purchases on Jan 1, Feb 1 and Mar 1
        assert dca.total_invested == pytest.approx(300.0)
        units = 1 + 100 / 131 + 100 / 160
        assert dca.total_accumulated == pytest.approx(units)
        assert dca.final_value == pytest.approx(units * 190)
        assert report.theoretical_total == pytest.approx(300.0)
        assert lump.total_invested == pytest.approx(300.0)
        assert lump.return_percent == pytest.approx(0.0)

    def test_note_with_explicit_amount(self, source: StaticQuoteSource) -> None:
        report = run(
            source,
            dca_assets=[Symbol("BBB")],
            structured_notes=[
                StructuredNoteSpec(underlying=Symbol("AAA"), participation=0.5, amount=1000.0)
            ],
        )

        note = next(r for r in report.results if r.name.startswith("Structured Note"))
        assert note.total_invested == 1000.0
        assert note.return_percent == pytest.approx(45.0)

    def test_ghost_dca_without_dca_assets(self, source: StaticQuoteSource) -> None:
        """Without DCA assets the total comes from a plan on another calendar."""
        report = run(source, lump_sum_assets=[Symbol("AAA")])

        assert [r.name for r in report.results] == ["Lump Sum Alpha"]
        assert report.theoretical_total == pytest.approx(300.0)
        assert report.results[0].total_invested == pytest.approx(300.0)
        assert report.results[0].return_percent == pytest.approx(90.0)

    def test_ghost_dca_skips_failed_candidates(self, source: StaticQuoteSource) -> None:
        report = run(source, lump_sum_assets=[Symbol("MISSING"), Symbol("BBB")])

        assert report.theoretical_total == pytest.approx(300.0)
        assert "MISSING" in report.failures

    def test_hybrid_naming(self, source: StaticQuoteSource) -> None:
        report = run(source, dca_assets=[Symbol("AAA")], initial_amount=1000.0)

        assert report.results[0].name == "Hybrid (Initial: $1,000 + DCA) (Alpha)"
        assert report.theoretical_total == pytest.approx(1300.0)

    def test_failed_symbol_is_recorded(self, source: StaticQuoteSource) -> None:
        """A symbol that cannot be fetched does not abort the comparison."""
        report = run(source, dca_assets=[Symbol("MISSING"), Symbol("AAA")])

        assert [r.name for r in report.results] == ["DCA Alpha"]
        assert "Unknown symbol" in report.failures["MISSING"]

    @pytest.mark.parametrize("symbol", ["FIXED-BRL-nan", "FIXED-BRL-inf", "FIXED-BRL"])
    def test_bad_synthetic_symbol_is_recorded(
        self, source: StaticQuoteSource, symbol: str
    ) -> None:
        """A malformed fixed-income symbol is reported per symbol, not raised."""
        report = run(
            source,
            dca_assets=[Symbol("AAA")],
            lump_sum_assets=[Symbol(symbol), Symbol("BBB")],
        )

        assert [r.name for r in report.results] == ["DCA Alpha", "Lump Sum Beta"]
        assert symbol in report.failures

    def test_symbols_fetched_once(self, source: StaticQuoteSource) -> None:
        run(
            source,
            dca_assets=[Symbol("AAA")],
            lump_sum_assets=[Symbol("AAA")],
            structured_notes=[StructuredNoteSpec(underlying=Symbol("AAA"))],
        )

        assert source.requests == ["AAA"]

    def test_unlisted_symbol_uses_symbol_as_name(self) -> None:
        source = StaticQuoteSource({"ZZZ": create_series([10.0, 20.0])})

        report = run(source, dca_assets=[Symbol("ZZZ")])

        assert report.results[0].name == "DCA ZZZ"

    def test_all_failed_gives_empty_report(self, source: StaticQuoteSource) -> None:
        report = run(source, dca_assets=[Symbol("MISSING")])

        assert report.results == []
        assert report.best_strategy is None
        assert report.theoretical_total == 0.0

    def test_no_assets_raises(self, source: StaticQuoteSource) -> None:
        comparison = StrategyComparison(make_config(), QuoteProvider(source), ASSETS)

        with pytest.raises(ConfigError, match="Select at least one asset"):
            comparison.run()

    def test_negative_amount_raises(self, source: StaticQuoteSource) -> None:
        with pytest.raises(InvalidParameterError, match="periodic_amount"):
            run(source, dca_assets=[Symbol("AAA")], periodic_amount=-5.0)


class TestSummaryTable:
    """Tests for summary_table."""

    def test_lists_results_and_best(self) -> None:
        report = ComparisonReport(
            results=[
                StrategyResult(
                    name="DCA Alpha",
                    total_invested=300.0,
                    final_value=450.0,
                    return_percent=50.0,
                ),
                StrategyResult(
                    name="Lump Sum Beta",
                    total_invested=300.0,
                    final_value=300.0,
                    return_percent=0.0,
                ),
            ],
            best_strategy="DCA Alpha",
            failures={"MISSING": "Unknown symbol 'MISSING'"},
        )

        table = summary_table(report)

        lines = table.splitlines()
        assert lines[3].startswith("DCA Alpha")
        assert "+50.00%" in lines[3]
        assert "Lump Sum Beta" in lines[4]
        assert "Best: DCA Alpha" in table
        assert "MISSING: Unknown symbol 'MISSING'" in table

    def test_empty_report(self) -> None:
        table = summary_table(ComparisonReport())

        assert "Best:" not in table
