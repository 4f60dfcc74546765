"""Token price registry.

Keeps one price record per token symbol. Prices are stored in scaled
form (see ``tokenledger.ledger.scaling``) together with creation and
last-update timestamps in epoch nanoseconds.

Note:
    ``add_price`` does not check for an existing record. Re-adding a
    symbol replaces its record and resets both timestamps.

"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace

from tokenledger.ledger.errors import (
    InvalidPriceError,
    InvalidSymbolError,
    TokenNotFoundError,
)
from tokenledger.ledger.scaling import to_external, to_internal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceRecord:
    """Stored price for one token.

    Attributes:
        scaled_price: Price multiplied by the scale factor. Always > 0.
        created_at: Epoch nanoseconds when the record was (re)added.
        last_updated_at: Epoch nanoseconds of the last price change.

    """

    scaled_price: float
    created_at: int
    last_updated_at: int

    @property
    def price(self) -> float:
        """Price in external representation."""
        return to_external(self.scaled_price)


def _check_symbol(symbol: str) -> None:
    if not symbol:
        msg = "Token symbol must not be empty"
        raise InvalidSymbolError(msg)


def _check_price(symbol: str, price: float) -> None:
    if not math.isfinite(price) or price <= 0:
        msg = f"Price for '{symbol}' must be positive and finite, got {price}"
        raise InvalidPriceError(msg)


def _scale_price(symbol: str, price: float) -> float:
    _check_price(symbol, price)
    scaled = to_internal(float(price))
    _check_price(symbol, scaled)
    return scaled


class PriceRegistry:
    """Mapping from token symbol to its current price record.

    Iteration order of ``list_prices`` follows the underlying dict and
    is not part of the contract.
    """

    def __init__(self, clock: Callable[[], int] = time.time_ns) -> None:
        self._records: dict[str, PriceRecord] = {}
        self._clock = clock

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._records

    def add_price(self, symbol: str, price: float) -> PriceRecord:
        """Create a fresh price record for a symbol.

        Args:
            symbol: Token symbol (case-sensitive, non-empty).
            price: Initial external price.

        Returns:
            The newly stored record.

        Raises:
            InvalidSymbolError: If symbol is empty.
            InvalidPriceError: If price is not a finite value > 0.

        """
        _check_symbol(symbol)
        scaled_price = _scale_price(symbol, price)

        now = self._clock()
        record = PriceRecord(
            scaled_price=scaled_price,
            created_at=now,
            last_updated_at=now,
        )
        self._records[symbol] = record
        logger.debug("Added price for %s: %s", symbol, price)
        return record

    def update_price(self, symbol: str, price: float) -> None:
        """Replace the price of an existing symbol.

        The creation timestamp is kept; the last-update timestamp moves
        to now, and never moves backwards.

        Args:
            symbol: Token symbol.
            price: New external price.

        Raises:
            InvalidPriceError: If price is not a finite value > 0.
            TokenNotFoundError: If the symbol has no record.

        """
        scaled_price = _scale_price(symbol, price)
        current = self.get_record(symbol)

        updated_at = max(self._clock(), current.last_updated_at)
        self._records[symbol] = replace(
            current,
            scaled_price=scaled_price,
            last_updated_at=updated_at,
        )
        logger.debug("Updated price for %s: %s", symbol, price)

    def get_record(self, symbol: str) -> PriceRecord:
        """Look up the stored record for a symbol.

        Raises:
            TokenNotFoundError: If the symbol has no record.

        """
        try:
            return self._records[symbol]
        except KeyError:
            msg = f"No price for token '{symbol}'"
            raise TokenNotFoundError(msg) from None

    def find_record(self, symbol: str) -> PriceRecord | None:
        """Return the record for a symbol, or None if absent."""
        return self._records.get(symbol)

    def get_price(self, symbol: str) -> float:
        """Return the external price for a symbol.

        Raises:
            TokenNotFoundError: If the symbol has no record.

        """
        return self.get_record(symbol).price

    def list_prices(self) -> list[tuple[str, float]]:
        """Return every (symbol, external price) pair."""
        return [(symbol, record.price) for symbol, record in self._records.items()]

    def items(self) -> list[tuple[str, PriceRecord]]:
        """Return every (symbol, record) pair for snapshotting."""
        return list(self._records.items())

    def restore(self, records: Iterable[tuple[str, PriceRecord]]) -> None:
        """Re-insert records verbatim, timestamps included.

        Args:
            records: (symbol, record) pairs from a snapshot.

        Raises:
            InvalidSymbolError: If a symbol is empty.
            InvalidPriceError: If a stored price is not finite and positive.

        """
        for symbol, record in records:
            _check_symbol(symbol)
            _check_price(symbol, record.scaled_price)
            self._records[symbol] = record
