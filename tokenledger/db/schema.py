"""DuckDB schema definitions for ledger snapshots.

Contains DDL statements for the snapshot tables:
- token_prices: One price record per token symbol
- user_balances: Per-caller balance entries with their list position

Timestamps are epoch nanoseconds stored as BIGINT so they round-trip
without loss.

"""

from __future__ import annotations

# ── Token Prices ──

CREATE_TOKEN_PRICES = """
CREATE TABLE IF NOT EXISTS token_prices (
    symbol           VARCHAR PRIMARY KEY,
    scaled_price     DOUBLE NOT NULL,
    created_at       BIGINT NOT NULL,
    last_updated_at  BIGINT NOT NULL
);
"""

# ── User Balances ──

CREATE_USER_BALANCES = """
CREATE TABLE IF NOT EXISTS user_balances (
    caller         VARCHAR NOT NULL,
    position       INTEGER NOT NULL,
    token          VARCHAR NOT NULL,
    scaled_amount  DOUBLE NOT NULL,
    PRIMARY KEY    (caller, token)
);
"""

# All DDL statements in creation order
ALL_TABLES: list[str] = [
    CREATE_TOKEN_PRICES,
    CREATE_USER_BALANCES,
]
