"""Multi-asset strategy comparison.

This module runs the selected DCA, lump-sum and structured-note simulations
over the same period and ranks them by cumulative return.
"""

from __future__ import annotations

import logging
from typing import Iterable

from dca_platform.catalog import SUPPORTED_ASSETS, asset_name
from dca_platform.data.provider import QuoteProvider
from dca_platform.exceptions import (ConfigError, DataSourceError,
                                     DataValidationError,
                                     InvalidParameterError)
from dca_platform.strategies import (calculate_dca, calculate_lump_sum,
                                     calculate_structured_note)
from dca_platform.strategies.base import require_non_negative
from dca_platform.types import (AssetOption, CompareConfig, ComparisonReport,
                                QuoteSeries, StrategyResult, Symbol)

logger = logging.getLogger(__name__)


class StrategyComparison:
    """Run every configured strategy and rank the results.

    The lump-sum and structured-note legs are given the capital the DCA plan
    would have invested over the same period, so the comparison is like for
    like. That "theoretical total" comes from the first DCA asset that could
    be simulated; without one, a DCA plan is simulated on the calendar of the
    first other asset that can be fetched.

    A symbol that cannot be fetched is logged and recorded in the report's
    ``failures``; the remaining assets are still processed.

    Example usage::

        from dca_platform.comparison import StrategyComparison
        from dca_platform.data import QuoteProvider, YahooQuoteSource

        comparison = StrategyComparison(config, QuoteProvider(YahooQuoteSource()))
        report = comparison.run()
        print(f"Best strategy: {report.best_strategy}")

    :param config: Comparison configuration.
    :param provider: Quote provider used for every symbol.
    :param assets: Catalog used for display names.
    """

    def __init__(
        self,
        config: CompareConfig,
        provider: QuoteProvider,
        assets: Iterable[AssetOption] = SUPPORTED_ASSETS,
    ) -> None:
        self.config = config
        self.provider = provider
        self.assets = tuple(assets)
        self._series: dict[str, QuoteSeries] = {}
        self._failures: dict[str, str] = {}

    def _asset_name(self, symbol: str) -> str:
        return asset_name(symbol, self.assets)

    def _fetch(self, symbol: Symbol) -> QuoteSeries | None:
        """Fetch a symbol once; failures are recorded and return None."""
        if symbol in self._series:
            return self._series[symbol]
        if symbol in self._failures:
            return None

        try:
            quotes = self.provider.get_quotes(
                symbol,
                self.config.date_range,
                native=self.config.use_native,
            )
        except (DataSourceError, DataValidationError, InvalidParameterError) as e:
            logger.warning("Skipping %s: %s", symbol, e)
            self._failures[symbol] = str(e)
            return None

        self._series[symbol] = quotes
        return quotes

    def _validate(self) -> None:
        cfg = self.config
        if not cfg.dca_assets and not cfg.lump_sum_assets and not cfg.structured_notes:
            raise ConfigError("Select at least one asset (DCA, lump sum or structured note)")
        require_non_negative("periodic_amount", cfg.periodic_amount)
        require_non_negative("initial_amount", cfg.initial_amount)

    def _run_dca(self) -> tuple[list[StrategyResult], float | None]:
        cfg = self.config
        results: list[StrategyResult] = []
        theoretical_total: float | None = None

        for symbol in cfg.dca_assets:
            quotes = self._fetch(symbol)
            if quotes is None:
                continue

            result = calculate_dca(
                quotes, cfg.initial_amount, cfg.periodic_amount, cfg.frequency
            )
            name = self._asset_name(symbol)
            if cfg.initial_amount > 0:
                result = result.with_name(f"{result.name} ({name})")
            else:
                result = result.with_name(f"DCA {name}")
            results.append(result)

            if theoretical_total is None:
                theoretical_total = result.total_invested

        return results, theoretical_total

    def _ghost_total(self) -> float:
        """Capital a DCA plan would invest, simulated on another asset's calendar."""
        cfg = self.config
        candidates = list(cfg.lump_sum_assets) + [n.underlying for n in cfg.structured_notes]

        for symbol in candidates:
            quotes = self._fetch(symbol)
            if quotes is None:
                continue
            ghost = calculate_dca(
                quotes, cfg.initial_amount, cfg.periodic_amount, cfg.frequency
            )
            return ghost.total_invested

        return 0.0

    def run(self) -> ComparisonReport:
        """Run all strategies and rank them.

        :returns: ComparisonReport with results sorted by return, best first.
        :raises ConfigError: If no asset is selected.
        :raises InvalidParameterError: If an amount is negative.
        """
        self._validate()
        cfg = self.config

        results, theoretical_total = self._run_dca()
        if theoretical_total is None:
            theoretical_total = self._ghost_total()

        for symbol in cfg.lump_sum_assets:
            quotes = self._fetch(symbol)
            if quotes is None:
                continue
            results.append(
                calculate_lump_sum(
                    quotes, theoretical_total, f"Lump Sum {self._asset_name(symbol)}"
                )
            )

        for note in cfg.structured_notes:
            quotes = self._fetch(note.underlying)
            if quotes is None:
                continue
            amount = note.amount if note.amount is not None else theoretical_total
            result = calculate_structured_note(
                quotes, amount, note.protected, note.participation, note.cap_limit
            )
            results.append(
                result.with_name(f"{result.name} on {self._asset_name(note.underlying)}")
            )

        results.sort(key=lambda r: r.return_percent, reverse=True)

        return ComparisonReport(
            results=results,
            best_strategy=results[0].name if results else None,
            failures=dict(self._failures),
            theoretical_total=theoretical_total,
        )


def summary_table(report: ComparisonReport) -> str:
    """Format a comparison report as a fixed-width table.

    :param report: Report to format.
    :returns: Multi-line table, best strategy first.
    """
    lines = [
        "=" * 96,
        f"{'Strategy':<50} {'Invested':>14} {'Final Value':>14} {'Return':>14}",
        "-" * 96,
    ]

    for r in report.results:
        lines.append(
            f"{r.name[:50]:<50} {r.total_invested:>14,.2f} "
            f"{r.final_value:>14,.2f} {r.return_percent:>+13.2f}%"
        )

    lines.append("=" * 96)

    if report.best_strategy:
        lines.append(f"🏆 Best: {report.best_strategy}")

    for symbol, reason in report.failures.items():
        lines.append(f"⚠️  {symbol}: {reason}")

    return "\n".join(lines)


def compare(
    config: CompareConfig,
    provider: QuoteProvider,
    assets: Iterable[AssetOption] = SUPPORTED_ASSETS,
) -> ComparisonReport:
    """Convenience function to run a comparison.

    :param config: Comparison configuration.
    :param provider: Quote provider used for every symbol.
    :param assets: Catalog used for display names.
    :returns: Ranked comparison report.
    """
    return StrategyComparison(config, provider, assets).run()


__all__ = ["StrategyComparison", "summary_table", "compare"]
