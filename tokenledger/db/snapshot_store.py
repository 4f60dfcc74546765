"""Snapshot store — DuckDB persistence for ledger snapshots.

Saving replaces the stored snapshot wholesale inside one transaction.
Loading reads balances ordered by list position so each caller's entry
order is restored exactly.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tokenledger.ledger.balances import BalanceEntry
from tokenledger.ledger.prices import PriceRecord
from tokenledger.ledger.snapshot import LedgerSnapshot

if TYPE_CHECKING:
    import duckdb

logger = logging.getLogger(__name__)


def save_snapshot(
    conn: duckdb.DuckDBPyConnection,
    snapshot: LedgerSnapshot,
) -> None:
    """Replace the stored snapshot with a new one.

    Args:
        conn: Active DuckDB connection with the ledger schema.
        snapshot: Snapshot to persist.

    """
    price_rows = [
        [symbol, record.scaled_price, record.created_at, record.last_updated_at]
        for symbol, record in snapshot.prices
    ]
    balance_rows = [
        [caller, position, entry.token, entry.scaled_amount]
        for caller, entries in snapshot.balances
        for position, entry in enumerate(entries)
    ]

    conn.begin()
    try:
        conn.execute("DELETE FROM token_prices")
        conn.execute("DELETE FROM user_balances")
        if price_rows:
            conn.executemany(
                """
                INSERT INTO token_prices
                    (symbol, scaled_price, created_at, last_updated_at)
                VALUES (?, ?, ?, ?)
                """,
                price_rows,
            )
        if balance_rows:
            conn.executemany(
                """
                INSERT INTO user_balances
                    (caller, position, token, scaled_amount)
                VALUES (?, ?, ?, ?)
                """,
                balance_rows,
            )
        conn.commit()
    except Exception:
        conn.rollback()
        raise

    logger.info(
        "Saved snapshot: %d prices, %d balance entries",
        len(price_rows),
        len(balance_rows),
    )


def load_snapshot(conn: duckdb.DuckDBPyConnection) -> LedgerSnapshot:
    """Read the stored snapshot.

    Args:
        conn: Active DuckDB connection with the ledger schema.

    Returns:
        The stored snapshot (empty if nothing was saved).

    """
    price_rows = conn.execute(
        """
        SELECT symbol, scaled_price, created_at, last_updated_at
        FROM token_prices
        ORDER BY symbol
        """
    ).fetchall()
    prices = [
        (
            symbol,
            PriceRecord(
                scaled_price=float(scaled_price),
                created_at=int(created_at),
                last_updated_at=int(last_updated_at),
            ),
        )
        for symbol, scaled_price, created_at, last_updated_at in price_rows
    ]

    balance_rows = conn.execute(
        """
        SELECT caller, token, scaled_amount
        FROM user_balances
        ORDER BY caller, position
        """
    ).fetchall()
    by_caller: dict[str, list[BalanceEntry]] = {}
    for caller, token, scaled_amount in balance_rows:
        by_caller.setdefault(caller, []).append(
            BalanceEntry(token=token, scaled_amount=float(scaled_amount))
        )

    logger.info(
        "Loaded snapshot: %d prices, %d balance entries",
        len(prices),
        len(balance_rows),
    )
    return LedgerSnapshot(prices=prices, balances=list(by_caller.items()))
