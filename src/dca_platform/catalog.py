"""Catalog of assets offered for comparison.

The catalog is presentation metadata only: simulations depend on symbol
shapes, never on the entries listed here. Unknown symbols are still accepted
and displayed under their own symbol.
"""

from __future__ import annotations

from typing import Iterable

from dca_platform.types import AssetOption, Symbol


def _asset(symbol: str, name: str, category: str) -> AssetOption:
    return AssetOption(symbol=Symbol(symbol), name=name, category=category)


SUPPORTED_ASSETS: tuple[AssetOption, ...] = (
    # Crypto
    _asset("BTC-USD", "Bitcoin (BTC)", "Crypto"),
    _asset("ETH-USD", "Ethereum (ETH)", "Crypto"),
    _asset("SOL-USD", "Solana (SOL)", "Crypto"),
    # Commodities / indices
    _asset("GC=F", "Gold", "Commodities"),
    _asset("^GSPC", "S&P 500", "Indices"),
    _asset("^IXIC", "Nasdaq Composite", "Indices"),
    # Brazil (ADRs and B3 listings)
    _asset("EWZ", "iShares MSCI Brazil ETF", "Brazil"),
    _asset("PBR", "Petrobras (PBR)", "Brazil"),
    _asset("VALE", "Vale (VALE)", "Brazil"),
    _asset("ITUB", "Itau Unibanco (ITUB)", "Brazil"),
    _asset("NU", "Nubank (NU)", "Brazil"),
    _asset("PETR4.SA", "Petrobras (PETR4, B3)", "Brazil"),
    _asset("BOVA11.SA", "iShares Ibovespa (BOVA11, B3)", "Brazil"),
    # Brazilian fixed income, synthetic
    _asset("FIXED-BRL-6.17", "Brazilian Savings (est. 6.17% a.a.)", "Brazil Fixed Income"),
    _asset("FIXED-BRL-10.0", "Tesouro Selic (est. 10% a.a.)", "Brazil Fixed Income"),
    _asset("FIXED-BRL-12.0", "Pre-fixed CDB (est. 12% a.a.)", "Brazil Fixed Income"),
    # US stocks
    _asset("AAPL", "Apple (AAPL)", "US"),
    _asset("MSFT", "Microsoft (MSFT)", "US"),
    _asset("GOOGL", "Alphabet (GOOGL)", "US"),
    _asset("AMZN", "Amazon (AMZN)", "US"),
    _asset("TSLA", "Tesla (TSLA)", "US"),
    _asset("NVDA", "NVIDIA (NVDA)", "US"),
    _asset("META", "Meta Platforms (META)", "US"),
)


def asset_name(symbol: str, assets: Iterable[AssetOption] = SUPPORTED_ASSETS) -> str:
    """Display name of a symbol, or the symbol itself when it is not listed."""
    for asset in assets:
        if asset.symbol == symbol:
            return asset.name
    return symbol


def assets_by_category(
    assets: Iterable[AssetOption] = SUPPORTED_ASSETS,
) -> dict[str, list[AssetOption]]:
    """Group catalog entries by category, preserving catalog order."""
    grouped: dict[str, list[AssetOption]] = {}
    for asset in assets:
        grouped.setdefault(asset.category, []).append(asset)
    return grouped


__all__ = ["SUPPORTED_ASSETS", "asset_name", "assets_by_category"]
