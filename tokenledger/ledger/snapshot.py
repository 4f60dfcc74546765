"""Snapshot and restore of the price registry and balance ledger.

A snapshot is a pair of plain sequences that can cross a restart
boundary. Restoring rebuilds fresh stores by re-inserting each pair;
price records keep their original timestamps and each caller's entries
keep their order.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from tokenledger.ledger.balances import BalanceEntry, BalanceLedger, Caller
from tokenledger.ledger.prices import PriceRecord, PriceRegistry


@dataclass
class LedgerSnapshot:
    """Exported contents of both stores.

    Attributes:
        prices: (symbol, record) pairs. Order is not significant.
        balances: (caller, entries) pairs. Entry order is significant.

    """

    prices: list[tuple[str, PriceRecord]] = field(default_factory=list)
    balances: list[tuple[Caller, list[BalanceEntry]]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-safe dicts and lists."""
        return {
            "prices": [
                {
                    "symbol": symbol,
                    "scaled_price": record.scaled_price,
                    "created_at": record.created_at,
                    "last_updated_at": record.last_updated_at,
                }
                for symbol, record in self.prices
            ],
            "balances": [
                {
                    "caller": caller,
                    "entries": [
                        {"token": e.token, "scaled_amount": e.scaled_amount}
                        for e in entries
                    ],
                }
                for caller, entries in self.balances
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LedgerSnapshot:
        """Rebuild a snapshot from the output of ``to_dict``.

        Raises:
            KeyError: If a required field is missing.

        """
        prices = [
            (
                item["symbol"],
                PriceRecord(
                    scaled_price=float(item["scaled_price"]),
                    created_at=int(item["created_at"]),
                    last_updated_at=int(item["last_updated_at"]),
                ),
            )
            for item in data.get("prices", [])
        ]
        balances = [
            (
                item["caller"],
                [
                    BalanceEntry(
                        token=e["token"],
                        scaled_amount=float(e["scaled_amount"]),
                    )
                    for e in item.get("entries", [])
                ],
            )
            for item in data.get("balances", [])
        ]
        return cls(prices=prices, balances=balances)


def take_snapshot(registry: PriceRegistry, ledger: BalanceLedger) -> LedgerSnapshot:
    """Export both stores as plain sequences."""
    return LedgerSnapshot(prices=registry.items(), balances=ledger.items())


def restore_snapshot(
    snapshot: LedgerSnapshot,
    registry: PriceRegistry | None = None,
    ledger: BalanceLedger | None = None,
) -> tuple[PriceRegistry, BalanceLedger]:
    """Rebuild the stores from a snapshot.

    Args:
        snapshot: Previously exported snapshot.
        registry: Empty registry to fill. A new one is created if None.
        ledger: Empty ledger to fill. A new one is created if None.

    Returns:
        The filled (registry, ledger) pair.

    Raises:
        LedgerError: If a record violates a store invariant.

    """
    registry = registry if registry is not None else PriceRegistry()
    ledger = ledger if ledger is not None else BalanceLedger()
    registry.restore(snapshot.prices)
    ledger.restore(snapshot.balances)
    return registry, ledger
