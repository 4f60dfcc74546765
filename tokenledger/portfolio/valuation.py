"""Portfolio valuation engine.

Joins a caller's balance entries against the price registry to produce
per-token values and a total. Tokens without a price are skipped
silently: they add nothing to the total and are not listed.

Both amounts and prices are stored scaled, so each product is divided
by the scale factor once to stay in scaled units.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np

from tokenledger.ledger.scaling import SCALE_FACTOR, to_external

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tokenledger.ledger.balances import BalanceEntry
    from tokenledger.ledger.prices import PriceRegistry


@dataclass(frozen=True)
class Holding:
    """One valued position in a portfolio.

    Attributes:
        symbol: Token symbol.
        amount: Held amount (external representation).
        value: amount * price (external representation).

    """

    symbol: str
    amount: float
    value: float


@dataclass
class PortfolioValuation:
    """Point-in-time valuation result. Never cached.

    Attributes:
        total_value: Sum of all priced holdings.
        holdings: Priced holdings in balance-list order.

    """

    total_value: float = 0.0
    holdings: list[Holding] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-safe dict."""
        return {
            "total_value": self.total_value,
            "holdings": [
                {"symbol": h.symbol, "amount": h.amount, "value": h.value}
                for h in self.holdings
            ],
        }


def compute_portfolio_value(
    entries: Sequence[BalanceEntry],
    registry: PriceRegistry,
) -> PortfolioValuation:
    """Value a caller's balances at current registry prices.

    Args:
        entries: The caller's scaled balance entries, in ledger order.
        registry: Price registry to read prices from.

    Returns:
        PortfolioValuation with external total and holdings.

    """
    symbols: list[str] = []
    scaled_amounts: list[float] = []
    scaled_prices: list[float] = []

    for entry in entries:
        record = registry.find_record(entry.token)
        if record is None:
            continue
        symbols.append(entry.token)
        scaled_amounts.append(entry.scaled_amount)
        scaled_prices.append(record.scaled_price)

    if not symbols:
        return PortfolioValuation()

    amounts = np.asarray(scaled_amounts, dtype=np.float64)
    prices = np.asarray(scaled_prices, dtype=np.float64)
    scaled_values = amounts * prices / SCALE_FACTOR

    # Sequential accumulation in list order
    scaled_total = float(np.cumsum(scaled_values)[-1])

    external_amounts = to_external(amounts)
    external_values = to_external(scaled_values)
    holdings = [
        Holding(symbol=symbol, amount=float(amount), value=float(value))
        for symbol, amount, value in zip(
            symbols, external_amounts, external_values, strict=True
        )
    ]
    return PortfolioValuation(
        total_value=to_external(scaled_total),
        holdings=holdings,
    )
