"""Error kinds raised by the price registry and balance ledger."""

from __future__ import annotations


class LedgerError(ValueError):
    """Base class for all ledger validation and lookup failures.

    Attributes:
        kind: Stable error kind reported to sidecar clients.

    """

    kind = "LedgerError"


class InvalidSymbolError(LedgerError):
    """Token symbol is empty."""

    kind = "InvalidSymbol"


class InvalidPriceError(LedgerError):
    """Price is zero or negative."""

    kind = "InvalidPrice"


class InvalidAmountError(LedgerError):
    """Balance amount is negative."""

    kind = "InvalidAmount"


class TokenNotFoundError(LedgerError):
    """No price record exists for the symbol."""

    kind = "NotFound"
