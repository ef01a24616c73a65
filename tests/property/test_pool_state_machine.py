"""Stateful property test: random handler calls must keep the ghost books."""

import hypothesis.strategies as st
from hypothesis import settings
from hypothesis.stateful import RuleBasedStateMachine, invariant, rule

from cpamm.clock import ManualClock
from cpamm.harness.handler import InvariantHandler
from tests.helpers import START_TIME, make_pool

seeds = st.integers(min_value=0, max_value=2**256 - 1)


class PoolStateMachine(RuleBasedStateMachine):
    def __init__(self):
        super().__init__()
        self.clock = ManualClock(START_TIME)
        self.pool, self.token_a, self.token_b = make_pool(100 * 10**18, 50 * 10**18, clock=self.clock)
        self.handler = InvariantHandler(self.pool, self.clock)
        self.k = self.pool.k()

    @rule(seed=seeds)
    def deposit(self, seed):
        self.handler.bounded_deposit(seed)

    @rule(seed=seeds)
    def swap(self, seed):
        self.handler.bounded_swap(seed)

    @rule(seconds=st.integers(min_value=0, max_value=7_200))
    def advance_time(self, seconds):
        self.clock.advance(seconds)

    @invariant()
    def ghost_matches_reserves(self):
        self.handler.assert_invariant()

    @invariant()
    def reserves_match_holdings(self):
        reserve_a, reserve_b = self.pool.current_reserves()
        assert reserve_a == self.token_a.balance_of(self.pool.address)
        assert reserve_b == self.token_b.balance_of(self.pool.address)

    @invariant()
    def k_never_decreases(self):
        k = self.pool.k()
        assert k >= self.k
        self.k = k


PoolStateMachine.TestCase.settings = settings(max_examples=50, stateful_step_count=30, deadline=None)
TestPoolStateMachine = PoolStateMachine.TestCase
