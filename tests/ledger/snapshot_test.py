"""Tests for in-memory snapshot and restore."""

from __future__ import annotations

import pytest
from tokenledger.ledger.balances import BalanceEntry, BalanceLedger
from tokenledger.ledger.errors import InvalidPriceError
from tokenledger.ledger.prices import PriceRecord, PriceRegistry
from tokenledger.ledger.snapshot import LedgerSnapshot, restore_snapshot, take_snapshot


@pytest.fixture
def populated(registry: PriceRegistry, ledger: BalanceLedger):
    registry.add_price("BTC", 100.0)
    registry.add_price("ETH", 10.0)
    registry.update_price("ETH", 12.0)
    ledger.set_balance("alice", "ETH", 5.0)
    ledger.set_balance("alice", "BTC", 2.0)
    ledger.set_balance("alice", "DOGE", 1000.0)
    ledger.set_balance("bob", "BTC", 0.5)
    return registry, ledger


class TestSnapshotRoundTrip:
    """Tests for take_snapshot followed by restore_snapshot."""

    def test_identical_lookups(self, populated) -> None:
        registry, ledger = populated
        new_registry, new_ledger = restore_snapshot(take_snapshot(registry, ledger))

        for symbol in ("BTC", "ETH"):
            assert new_registry.get_record(symbol) == registry.get_record(symbol)
        for caller in ("alice", "bob", "carol"):
            assert new_ledger.get_balances(caller) == ledger.get_balances(caller)

    def test_per_user_order_preserved(self, populated) -> None:
        registry, ledger = populated
        _, new_ledger = restore_snapshot(take_snapshot(registry, ledger))
        tokens = [token for token, _ in new_ledger.get_balances("alice")]
        assert tokens == ["ETH", "BTC", "DOGE"]

    def test_snapshot_is_detached(self, populated) -> None:
        registry, ledger = populated
        snapshot = take_snapshot(registry, ledger)
        ledger.set_balance("alice", "SOL", 1.0)
        assert len(dict(snapshot.balances)["alice"]) == 3

    def test_fills_given_stores(self, populated) -> None:
        registry, ledger = populated
        target_registry = PriceRegistry()
        target_ledger = BalanceLedger()
        result = restore_snapshot(
            take_snapshot(registry, ledger),
            registry=target_registry,
            ledger=target_ledger,
        )
        assert result == (target_registry, target_ledger)
        assert len(target_registry) == 2

    def test_invalid_record_rejected(self) -> None:
        snapshot = LedgerSnapshot(
            prices=[("BTC", PriceRecord(scaled_price=-1.0, created_at=1, last_updated_at=1))]
        )
        with pytest.raises(InvalidPriceError):
            restore_snapshot(snapshot)


class TestSnapshotDict:
    """Tests for the JSON-safe dict form."""

    def test_dict_round_trip(self, populated) -> None:
        registry, ledger = populated
        snapshot = take_snapshot(registry, ledger)
        assert LedgerSnapshot.from_dict(snapshot.to_dict()) == snapshot

    def test_dict_shape(self) -> None:
        snapshot = LedgerSnapshot(
            prices=[("BTC", PriceRecord(1e20, 5, 6))],
            balances=[("alice", [BalanceEntry("BTC", 2e18)])],
        )
        assert snapshot.to_dict() == {
            "prices": [
                {
                    "symbol": "BTC",
                    "scaled_price": 1e20,
                    "created_at": 5,
                    "last_updated_at": 6,
                }
            ],
            "balances": [
                {
                    "caller": "alice",
                    "entries": [{"token": "BTC", "scaled_amount": 2e18}],
                }
            ],
        }

    def test_empty_dict(self) -> None:
        assert LedgerSnapshot.from_dict({}) == LedgerSnapshot()
