"""Core type definitions for the DCA platform.

All data models use Pydantic BaseModel for automatic validation, JSON
serialization, and better error messages.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, NewType

from pydantic import BaseModel, ConfigDict, Field

from dca_platform.exceptions import InvalidParameterError

# Type aliases for domain-specific identifiers
Symbol = NewType("Symbol", str)


# ---------------------------------------------------------------------------
# Base Configuration
# ---------------------------------------------------------------------------


class FrozenModel(BaseModel):
    """Base model with frozen (immutable) configuration."""

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Date/Time Types
# ---------------------------------------------------------------------------


class DateRange(FrozenModel):
    """Inclusive start, exclusive end range for time-bounded queries.

    :param start: Start of the range (inclusive).
    :param end: End of the range (exclusive).
    """

    start: datetime
    end: datetime


# ---------------------------------------------------------------------------
# Market Data Types
# ---------------------------------------------------------------------------


class Quote(FrozenModel):
    """Closing price of an instrument at a point in time.

    :param date: Timestamp of the sample (timezone-aware).
    :param close: Closing price, always positive.
    """

    date: datetime
    close: float = Field(gt=0)


# Ordered by date, no duplicate dates. The empty tuple means "no data".
QuoteSeries = tuple[Quote, ...]


class Frequency(str, Enum):
    """Cadence of recurring purchases in a DCA plan."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def parse(cls, value: Frequency | str) -> Frequency:
        """Convert a member or a case-insensitive name into a Frequency.

        :param value: Frequency member or its string value.
        :returns: Matching Frequency member.
        :raises InvalidParameterError: If the value names no known cadence.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidParameterError(
            f"Invalid frequency '{value}'. "
            f"Valid options: {[f.value for f in cls]}"
        )


# ---------------------------------------------------------------------------
# Result Types
# ---------------------------------------------------------------------------


class StrategyResult(FrozenModel):
    """Outcome of running one investment strategy over a quote series.

    :param name: Display label for the strategy.
    :param total_invested: Capital put into the strategy.
    :param final_value: Value of the holdings at the last sample.
    :param return_percent: Cumulative return in percent (10.0 = 10%).
    :param total_accumulated: Units of the underlying held (0 for notes).
    :param has_data: False when the input series was empty.
    """

    name: str
    total_invested: float = 0.0
    final_value: float = 0.0
    return_percent: float = 0.0
    total_accumulated: float = 0.0
    has_data: bool = True

    @classmethod
    def no_data(cls, label: str) -> StrategyResult:
        """Zero-valued result for a strategy that had no quotes to work on."""
        return cls(name=f"{label} (no data)", has_data=False)

    def with_name(self, name: str) -> StrategyResult:
        """Return a copy of this result under a different label."""
        return self.model_copy(update={"name": name})


class ComparisonReport(FrozenModel):
    """Ranked results of a multi-asset strategy comparison.

    :param results: Strategy results sorted by return, best first.
    :param best_strategy: Name of the best performing strategy.
    :param failures: Symbols that could not be fetched, with the reason.
    :param theoretical_total: Capital the lump-sum legs were given.
    """

    results: list[StrategyResult] = Field(default_factory=list)
    best_strategy: str | None = None
    failures: dict[str, str] = Field(default_factory=dict)
    theoretical_total: float = 0.0


# ---------------------------------------------------------------------------
# Catalog Types
# ---------------------------------------------------------------------------


class AssetOption(FrozenModel):
    """Presentation metadata for a supported asset.

    :param symbol: Symbol understood by the quote provider.
    :param name: Human readable asset name.
    :param category: Grouping used when listing assets.
    """

    symbol: Symbol
    name: str
    category: str


# ---------------------------------------------------------------------------
# Configuration Types
# ---------------------------------------------------------------------------


class StructuredNoteSpec(FrozenModel):
    """A structured note to include in a comparison.

    :param underlying: Symbol whose return drives the note.
    :param protected: Whether nominal capital is guaranteed.
    :param participation: Fraction of the underlying return passed on.
    :param cap_limit: Maximum gross return (0 = no cap).
    :param amount: Capital invested, or None to use the comparison total.
    """

    underlying: Symbol
    protected: bool = True
    participation: float = 1.0
    cap_limit: float = 0.0
    amount: float | None = None


class CompareConfig(FrozenModel):
    """Configuration for a strategy comparison run.

    :param date_range: Historical period to simulate.
    :param periodic_amount: Amount invested at each DCA purchase.
    :param initial_amount: Seed invested at the first sample.
    :param frequency: DCA purchase cadence.
    :param dca_assets: Symbols simulated with DCA.
    :param lump_sum_assets: Symbols simulated with a single purchase.
    :param structured_notes: Structured notes to simulate.
    :param use_native: Keep quotes in the instrument's native currency.
    :param data_source: Raw quote source type (e.g., "yahoo", "csv").
    :param source_params: Source-specific parameters.
    :param log_level: Logging level.
    """

    date_range: DateRange
    periodic_amount: float = 100.0
    initial_amount: float = 0.0
    frequency: Frequency = Frequency.MONTHLY
    dca_assets: list[Symbol] = Field(default_factory=list)
    lump_sum_assets: list[Symbol] = Field(default_factory=list)
    structured_notes: list[StructuredNoteSpec] = Field(default_factory=list)
    use_native: bool = False
    data_source: str = "yahoo"
    source_params: dict[str, Any] = Field(default_factory=dict)
    log_level: str = "INFO"


# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------

__all__ = [
    # Type aliases
    "Symbol",
    "QuoteSeries",
    # Base models
    "FrozenModel",
    # Date/Time
    "DateRange",
    # Market data
    "Quote",
    "Frequency",
    # Results
    "StrategyResult",
    "ComparisonReport",
    # Catalog
    "AssetOption",
    # Configuration
    "StructuredNoteSpec",
    "CompareConfig",
]
