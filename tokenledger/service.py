"""Ledger service: owns the price registry and balance ledger.

Every public operation runs under one re-entrant lock, so each call
completes before the next one starts and no caller ever observes a
half-applied update. Caller identity is an explicit argument on every
caller-scoped operation.

"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from tokenledger.ledger.balances import BalanceLedger, Caller
from tokenledger.ledger.prices import PriceRecord, PriceRegistry
from tokenledger.ledger.snapshot import LedgerSnapshot, restore_snapshot, take_snapshot
from tokenledger.portfolio.valuation import PortfolioValuation, compute_portfolio_value

logger = logging.getLogger(__name__)


class LedgerService:
    """Process-wide token price and balance state.

    Args:
        clock: Source of epoch-nanosecond timestamps for price records.

    """

    def __init__(self, clock: Callable[[], int] = time.time_ns) -> None:
        self._clock = clock
        self._lock = threading.RLock()
        self._registry = PriceRegistry(clock=clock)
        self._ledger = BalanceLedger()

    # ── Prices ──

    def add_token_price(self, symbol: str, initial_price: float) -> PriceRecord:
        """Add a price record, replacing any existing one for the symbol."""
        with self._lock:
            return self._registry.add_price(symbol, initial_price)

    def update_price(self, symbol: str, price: float) -> None:
        """Change the price of an already-added symbol."""
        with self._lock:
            self._registry.update_price(symbol, price)

    def get_token_price(self, symbol: str) -> float:
        """Return the external price of a symbol."""
        with self._lock:
            return self._registry.get_price(symbol)

    def get_price_record(self, symbol: str) -> PriceRecord:
        """Return the stored record (with timestamps) for a symbol."""
        with self._lock:
            return self._registry.get_record(symbol)

    def get_all_token_prices(self) -> list[tuple[str, float]]:
        """Return every (symbol, price) pair in registry order."""
        with self._lock:
            return self._registry.list_prices()

    # ── Balances ──

    def update_balance(self, caller: Caller, token: str, amount: float) -> None:
        """Set the caller's own balance for a token."""
        with self._lock:
            self._ledger.set_balance(caller, token, amount)

    def get_balances(self, caller: Caller) -> list[tuple[str, float]]:
        """Return the caller's (token, amount) pairs, [] if unknown."""
        with self._lock:
            return self._ledger.get_balances(caller)

    def get_portfolio_value(self, caller: Caller) -> PortfolioValuation:
        """Value the caller's balances at current prices."""
        with self._lock:
            return compute_portfolio_value(self._ledger.entries(caller), self._registry)

    # ── Snapshot ──

    def snapshot(self) -> LedgerSnapshot:
        """Export the current state of both stores."""
        with self._lock:
            return take_snapshot(self._registry, self._ledger)

    def restore(self, snapshot: LedgerSnapshot) -> None:
        """Replace all state with the contents of a snapshot.

        The snapshot is validated into fresh stores first, so a bad
        snapshot leaves the current state untouched.

        Raises:
            LedgerError: If the snapshot violates a store invariant.

        """
        registry, ledger = restore_snapshot(
            snapshot,
            registry=PriceRegistry(clock=self._clock),
            ledger=BalanceLedger(),
        )
        with self._lock:
            self._registry = registry
            self._ledger = ledger
        logger.info(
            "Restored %d prices and %d ledgers", len(registry), len(ledger)
        )
