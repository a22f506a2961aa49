"""Quote ingestion, normalization and symbol resolution."""

from dca_platform.data.normalize import (align_to_reference_currency,
                                         normalize_quotes, validate_series)
from dca_platform.data.provider import QuoteProvider
from dca_platform.data.sources import (CSVQuoteSource, QuoteSource,
                                       StaticQuoteSource, YahooQuoteSource,
                                       resolve_quote_source)
from dca_platform.data.synthetic import (generate_fixed_income_series,
                                         parse_fixed_income_symbol)

__all__ = [
    "QuoteSource",
    "YahooQuoteSource",
    "CSVQuoteSource",
    "StaticQuoteSource",
    "resolve_quote_source",
    "QuoteProvider",
    "normalize_quotes",
    "validate_series",
    "align_to_reference_currency",
    "generate_fixed_income_series",
    "parse_fixed_income_symbol",
]
