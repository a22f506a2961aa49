"""Strategy calculators: DCA, lump sum and structured notes."""

from dca_platform.strategies.base import compute_return_percent
from dca_platform.strategies.dca import calculate_dca
from dca_platform.strategies.lump_sum import calculate_lump_sum
from dca_platform.strategies.structured_note import calculate_structured_note

__all__ = [
    "compute_return_percent",
    "calculate_dca",
    "calculate_lump_sum",
    "calculate_structured_note",
]
