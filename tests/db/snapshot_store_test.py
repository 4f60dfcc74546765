"""Tests for the DuckDB snapshot store."""

from __future__ import annotations

from pathlib import Path

import duckdb
import pytest
from tokenledger.db.connection import init_ledger_db, init_memory_db
from tokenledger.db.snapshot_store import load_snapshot, save_snapshot
from tokenledger.ledger.balances import BalanceEntry
from tokenledger.ledger.prices import PriceRecord
from tokenledger.ledger.snapshot import LedgerSnapshot
from tokenledger.service import LedgerService


@pytest.fixture
def db():
    conn = init_memory_db()
    yield conn
    conn.close()


@pytest.fixture
def snapshot() -> LedgerSnapshot:
    return LedgerSnapshot(
        prices=[
            ("BTC", PriceRecord(1e20, 1_700_000_000_000_000_001, 1_700_000_000_000_000_999)),
            ("ETH", PriceRecord(2.5e21, 5, 5)),
        ],
        balances=[
            (
                "alice",
                [
                    BalanceEntry("SOL", 3e18),
                    BalanceEntry("BTC", 2e18),
                    BalanceEntry("ETH", 0.0),
                ],
            ),
            ("bob", [BalanceEntry("ETH", 1.5e18)]),
        ],
    )


class TestSaveAndLoad:
    """Tests for persisting snapshots."""

    def test_round_trip(self, db, snapshot: LedgerSnapshot):
        save_snapshot(db, snapshot)
        loaded = load_snapshot(db)

        assert dict(loaded.prices) == dict(snapshot.prices)
        assert dict(loaded.balances) == dict(snapshot.balances)

    def test_per_user_order_preserved(self, db, snapshot: LedgerSnapshot):
        save_snapshot(db, snapshot)
        alice = dict(load_snapshot(db).balances)["alice"]
        assert [e.token for e in alice] == ["SOL", "BTC", "ETH"]

    def test_timestamps_lossless(self, db, snapshot: LedgerSnapshot):
        save_snapshot(db, snapshot)
        btc = dict(load_snapshot(db).prices)["BTC"]
        assert btc.created_at == 1_700_000_000_000_000_001
        assert btc.last_updated_at == 1_700_000_000_000_000_999

    def test_save_replaces_previous(self, db, snapshot: LedgerSnapshot):
        save_snapshot(db, snapshot)
        save_snapshot(db, LedgerSnapshot(prices=[("DOGE", PriceRecord(1e17, 1, 1))]))
        loaded = load_snapshot(db)
        assert [symbol for symbol, _ in loaded.prices] == ["DOGE"]
        assert loaded.balances == []

    def test_empty_database(self, db):
        assert load_snapshot(db) == LedgerSnapshot()

    def test_failed_save_rolls_back(self, db, snapshot: LedgerSnapshot):
        save_snapshot(db, snapshot)
        duplicate = LedgerSnapshot(
            balances=[("carol", [BalanceEntry("BTC", 1.0), BalanceEntry("BTC", 2.0)])]
        )
        with pytest.raises(duckdb.ConstraintException):
            save_snapshot(db, duplicate)
        assert dict(load_snapshot(db).prices) == dict(snapshot.prices)


class TestServiceRestart:
    """Tests for the save-restart-restore cycle through a file."""

    def test_restart_cycle(self, tmp_path: Path):
        db_path = tmp_path / "ledger.duckdb"
        before = LedgerService()
        before.add_token_price("BTC", 100)
        before.update_balance("alice", "ETH", 5)
        before.update_balance("alice", "BTC", 2)

        conn = init_ledger_db(db_path)
        save_snapshot(conn, before.snapshot())
        conn.close()

        after = LedgerService()
        conn = init_ledger_db(db_path)
        after.restore(load_snapshot(conn))
        conn.close()

        assert after.get_price_record("BTC") == before.get_price_record("BTC")
        assert after.get_balances("alice") == before.get_balances("alice")
        assert after.get_portfolio_value("alice") == before.get_portfolio_value("alice")
