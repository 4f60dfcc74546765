"""DuckDB connection management for ledger snapshots.

Handles database initialization, schema creation, and connection
lifecycle. The default snapshot database lives under the configured
data directory::

    ~/.tokenledger/
      data/
        ledger.duckdb

"""

from __future__ import annotations

import logging
from pathlib import Path

import duckdb

from tokenledger.db.schema import ALL_TABLES

logger = logging.getLogger(__name__)


def get_connection(
    db_path: str | Path | None = None,
    read_only: bool = False,
) -> duckdb.DuckDBPyConnection:
    """Open a DuckDB connection.

    Args:
        db_path: Path to the .duckdb file. If None, uses in-memory database.
        read_only: Open in read-only mode.

    Returns:
        Active DuckDB connection.

    """
    if db_path is None:
        return duckdb.connect(":memory:")

    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path), read_only=read_only)


def init_ledger_db(db_path: str | Path) -> duckdb.DuckDBPyConnection:
    """Open the snapshot database and create its tables.

    Args:
        db_path: Path to the ledger.duckdb file.

    Returns:
        Initialized DuckDB connection.

    """
    conn = get_connection(db_path)
    for ddl in ALL_TABLES:
        conn.execute(ddl)
    logger.info("Ledger database initialized at %s", db_path)
    return conn


def init_memory_db() -> duckdb.DuckDBPyConnection:
    """Create an in-memory database with full schema.

    Returns:
        In-memory DuckDB connection with all tables created.

    """
    conn = get_connection(None)
    for ddl in ALL_TABLES:
        conn.execute(ddl)
    return conn
