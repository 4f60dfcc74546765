"""Shared pytest fixtures for tokenledger tests."""

from __future__ import annotations

import pytest
from tokenledger.ledger.balances import BalanceLedger
from tokenledger.ledger.prices import PriceRegistry
from tokenledger.service import LedgerService


class StepClock:
    """Deterministic epoch-nanosecond clock.

    Each call returns the current value and then advances by ``step``.
    Tests may assign ``now`` directly to simulate clock jumps.
    """

    def __init__(self, start: int = 1_000, step: int = 10) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> int:
        value = self.now
        self.now += self.step
        return value


@pytest.fixture
def clock() -> StepClock:
    """Provide a clock that ticks forward by 10ns per read."""
    return StepClock()


@pytest.fixture
def registry(clock: StepClock) -> PriceRegistry:
    """Provide an empty price registry on the step clock."""
    return PriceRegistry(clock=clock)


@pytest.fixture
def ledger() -> BalanceLedger:
    """Provide an empty balance ledger."""
    return BalanceLedger()


@pytest.fixture
def service(clock: StepClock) -> LedgerService:
    """Provide an empty ledger service on the step clock."""
    return LedgerService(clock=clock)
