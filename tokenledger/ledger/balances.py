"""Per-user token balance ledger.

Each caller owns an ordered list of (token, scaled amount) entries with
at most one entry per token. Updates SET the amount; they never add to
it. Entry order is insertion order and survives snapshot round-trips.

"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass

from tokenledger.ledger.errors import InvalidAmountError, InvalidSymbolError
from tokenledger.ledger.scaling import to_external, to_internal

logger = logging.getLogger(__name__)

# Opaque caller identity supplied by the host.
Caller = str


@dataclass(frozen=True)
class BalanceEntry:
    """One token balance held by a caller.

    Attributes:
        token: Token symbol.
        scaled_amount: Amount multiplied by the scale factor. Always >= 0.

    """

    token: str
    scaled_amount: float

    @property
    def amount(self) -> float:
        """Amount in external representation."""
        return to_external(self.scaled_amount)


def _check_amount(token: str, amount: float) -> None:
    if not math.isfinite(amount) or amount < 0:
        msg = f"Amount for '{token}' must not be negative or non-finite, got {amount}"
        raise InvalidAmountError(msg)


class BalanceLedger:
    """Mapping from caller identity to that caller's balance entries.

    Caller identities are opaque keys supplied by the host; the ledger
    only uses them for lookup.
    """

    def __init__(self) -> None:
        self._ledgers: dict[Caller, list[BalanceEntry]] = {}

    def __len__(self) -> int:
        return len(self._ledgers)

    def set_balance(self, caller: Caller, token: str, amount: float) -> None:
        """Set the caller's balance for a token.

        Replaces the existing entry in place, appends a new entry if the
        caller holds no such token yet, or creates the caller's ledger.

        Args:
            caller: Caller identity.
            token: Token symbol.
            amount: External amount.

        Raises:
            TypeError: If caller is not a string.
            InvalidAmountError: If amount is negative or not finite.

        """
        if not isinstance(caller, str):
            msg = f"Caller identity must be a string, got {type(caller).__name__}"
            raise TypeError(msg)
        _check_amount(token, amount)
        scaled_amount = to_internal(float(amount))
        _check_amount(token, scaled_amount)
        entry = BalanceEntry(token=token, scaled_amount=scaled_amount)

        entries = self._ledgers.setdefault(caller, [])
        for index, existing in enumerate(entries):
            if existing.token == token:
                entries[index] = entry
                break
        else:
            entries.append(entry)
        logger.debug("Set balance for %s: %s %s", caller, amount, token)

    def entries(self, caller: Caller) -> list[BalanceEntry]:
        """Return a copy of the caller's scaled entries, [] if unknown."""
        return list(self._ledgers.get(caller, []))

    def get_balances(self, caller: Caller) -> list[tuple[str, float]]:
        """Return the caller's (token, external amount) pairs in order."""
        return [(entry.token, entry.amount) for entry in self.entries(caller)]

    def items(self) -> list[tuple[Caller, list[BalanceEntry]]]:
        """Return every (caller, entries) pair for snapshotting."""
        return [(caller, list(entries)) for caller, entries in self._ledgers.items()]

    def restore(
        self,
        ledgers: Iterable[tuple[Caller, Iterable[BalanceEntry]]],
    ) -> None:
        """Re-insert caller ledgers verbatim, preserving entry order.

        Args:
            ledgers: (caller, entries) pairs from a snapshot.

        Raises:
            InvalidSymbolError: If an entry has an empty token.
            InvalidAmountError: If an entry amount is negative or not finite.

        """
        for caller, entries in ledgers:
            restored: list[BalanceEntry] = []
            seen: set[str] = set()
            for entry in entries:
                if not entry.token:
                    msg = f"Balance entry for caller {caller!r} has empty token"
                    raise InvalidSymbolError(msg)
                _check_amount(entry.token, entry.scaled_amount)
                if entry.token in seen:
                    # Last write wins, keeping the first position.
                    restored = [
                        entry if e.token == entry.token else e for e in restored
                    ]
                    continue
                seen.add(entry.token)
                restored.append(entry)
            self._ledgers[caller] = restored
