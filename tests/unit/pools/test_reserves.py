"""Tests for ReserveLedger."""

import pytest

from cpamm.errors import InternalConsistencyError, PoolError
from cpamm.pools.reserves import ReserveLedger, ReserveSnapshot


class TestReserveLedger:
    def test_starts_empty(self):
        ledger = ReserveLedger()
        assert ledger.current_reserves() == (0, 0)
        assert ledger.share_supply() == 0
        assert ledger.k() == 0

    def test_apply_delta(self):
        ledger = ReserveLedger(100, 200)
        assert ledger.apply_delta(10, -50) == (110, 150)
        assert ledger.current_reserves() == (110, 150)

    def test_apply_delta_to_zero(self):
        ledger = ReserveLedger(100, 200)
        ledger.apply_delta(-100, -200)
        assert ledger.current_reserves() == (0, 0)

    @pytest.mark.parametrize("delta_a,delta_b", [(-101, 0), (0, -201), (50, -201)])
    def test_negative_reserve_is_fatal_and_atomic(self, delta_a, delta_b):
        """Neither reserve changes when one of them would go negative."""
        ledger = ReserveLedger(100, 200)
        with pytest.raises(InternalConsistencyError):
            ledger.apply_delta(delta_a, delta_b)
        assert ledger.current_reserves() == (100, 200)

    def test_consistency_error_is_not_a_pool_error(self):
        """Routine failure handlers must not swallow it."""
        assert not issubclass(InternalConsistencyError, PoolError)

    def test_negative_start_rejected(self):
        with pytest.raises(InternalConsistencyError):
            ReserveLedger(-1, 0)


class TestShareSupply:
    def test_mint_and_burn(self):
        ledger = ReserveLedger()
        assert ledger.mint_shares(1_000) == 1_000
        assert ledger.burn_shares(400) == 600
        assert ledger.share_supply() == 600

    def test_burn_more_than_supply(self):
        ledger = ReserveLedger(share_supply=10)
        with pytest.raises(InternalConsistencyError):
            ledger.burn_shares(11)
        assert ledger.share_supply() == 10

    def test_negative_amounts_rejected(self):
        ledger = ReserveLedger(share_supply=10)
        with pytest.raises(InternalConsistencyError):
            ledger.mint_shares(-1)
        with pytest.raises(InternalConsistencyError):
            ledger.burn_shares(-1)


class TestSnapshot:
    def test_snapshot(self):
        ledger = ReserveLedger(2_000, 1_000, 1_000)
        snap = ledger.snapshot()
        assert snap == ReserveSnapshot(2_000, 1_000, 1_000)
        assert snap.k == 2_000_000

    def test_snapshot_is_detached(self):
        ledger = ReserveLedger(2_000, 1_000, 1_000)
        snap = ledger.snapshot()
        ledger.apply_delta(1, 1)
        assert snap.reserve_a == 2_000
