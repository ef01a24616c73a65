"""Tests for PoolController deposits and withdrawals."""

import pytest

from cpamm.errors import (
    DeadlineExpired,
    InsufficientShares,
    LiquidityTooLow,
    SlippageExceeded,
    ZeroAmount,
)
from tests.helpers import LP, LP2, START_TIME, TKA, TKB, TRADER, fund, make_pool


class TestBootstrapDeposit:
    """First deposit into an empty pool."""

    def test_bootstrap_sets_ratio(self, empty_pool, tokens):
        """B=1000 and A=2000 gives supply 1000 and reserves (2000, 1000)."""
        token_a, token_b = tokens
        fund(token_a, LP, empty_pool, 2_000)
        fund(token_b, LP, empty_pool, 1_000)

        shares = empty_pool.deposit(LP, 1_000, 1_000, 2_000, START_TIME)

        assert shares == 1_000
        assert empty_pool.share_supply() == 1_000
        assert empty_pool.current_reserves() == (2_000, 1_000)
        assert empty_pool.share_balance_of(LP) == 1_000
        assert token_a.balance_of(empty_pool.address) == 2_000
        assert token_b.balance_of(empty_pool.address) == 1_000
        assert token_a.balance_of(LP) == 0

    def test_bootstrap_below_minimum_liquidity(self, empty_pool, tokens):
        token_a, token_b = tokens
        fund(token_a, LP, empty_pool, 2_000)
        fund(token_b, LP, empty_pool, 999)

        with pytest.raises(LiquidityTooLow):
            empty_pool.deposit(LP, 999, 1, 2_000, START_TIME)
        assert empty_pool.current_reserves() == (0, 0)
        assert empty_pool.share_supply() == 0

    def test_bootstrap_min_shares(self, empty_pool, tokens):
        token_a, token_b = tokens
        fund(token_a, LP, empty_pool, 2_000)
        fund(token_b, LP, empty_pool, 1_000)

        with pytest.raises(SlippageExceeded):
            empty_pool.deposit(LP, 1_000, 1_001, 2_000, START_TIME)
        assert empty_pool.current_reserves() == (0, 0)


class TestDeposit:
    """Deposits into a pool with reserves (2_000_000, 1_000_000)."""

    def test_ratio_preserving_deposit(self, pool, tokens):
        token_a, token_b = tokens
        fund(token_a, LP2, pool, 1_000)
        fund(token_b, LP2, pool, 500)

        shares = pool.deposit(LP2, 500, 1, 1_000, START_TIME)

        assert shares == 500
        assert pool.current_reserves() == (2_001_000, 1_000_500)
        assert pool.share_supply() == 1_000_500
        assert pool.share_balance_of(LP2) == 500
        assert token_a.balance_of(LP2) == 0

    def test_deposit_takes_only_required_a(self, pool, tokens):
        """A generous max only caps the A amount; the ratio decides it."""
        token_a, token_b = tokens
        fund(token_a, LP2, pool, 10_000)
        fund(token_b, LP2, pool, 500)

        pool.deposit(LP2, 500, 1, 10_000, START_TIME)

        assert token_a.balance_of(LP2) == 9_000

    def test_quote_deposit_a(self, pool):
        assert pool.quote_deposit_a(500) == 1_000

    def test_required_a_above_max(self, pool, tokens):
        token_a, token_b = tokens
        fund(token_a, LP2, pool, 999)
        fund(token_b, LP2, pool, 500)

        with pytest.raises(SlippageExceeded):
            pool.deposit(LP2, 500, 1, 999, START_TIME)
        assert pool.current_reserves() == (2_000_000, 1_000_000)
        assert pool.share_supply() == 1_000_000

    def test_shares_below_minimum(self, pool, tokens):
        token_a, token_b = tokens
        fund(token_a, LP2, pool, 1_000)
        fund(token_b, LP2, pool, 500)

        with pytest.raises(SlippageExceeded):
            pool.deposit(LP2, 500, 501, 1_000, START_TIME)
        assert pool.current_reserves() == (2_000_000, 1_000_000)

    def test_required_a_rounding_to_zero(self, tiny_config, clock):
        """1 B against reserves (1, 1000) needs 0 A: rejected."""
        pool, token_a, token_b = make_pool(1, 1_000, clock=clock, config=tiny_config)
        fund(token_a, LP2, pool, 1)
        fund(token_b, LP2, pool, 1)

        with pytest.raises(ZeroAmount):
            pool.deposit(LP2, 1, 1, 1, START_TIME)

    @pytest.mark.parametrize(
        "desired_b,min_shares,max_a",
        [(0, 1, 1_000), (500, 0, 1_000), (500, 1, 0)],
    )
    def test_zero_amount(self, pool, desired_b, min_shares, max_a):
        with pytest.raises(ZeroAmount):
            pool.deposit(LP2, desired_b, min_shares, max_a, START_TIME)
        assert pool.current_reserves() == (2_000_000, 1_000_000)

    def test_negative_amount_is_programmer_error(self, pool):
        with pytest.raises(ValueError):
            pool.deposit(LP2, -500, 1, 1_000, START_TIME)

    def test_deadline_expired(self, pool, clock):
        clock.advance(10)
        with pytest.raises(DeadlineExpired):
            pool.deposit(LP2, 500, 1, 1_000, START_TIME)

    def test_deadline_checked_before_amounts(self, pool):
        with pytest.raises(DeadlineExpired):
            pool.deposit(LP2, 0, 0, 0, START_TIME - 1)

    def test_deadline_equal_to_now_is_valid(self, pool, tokens):
        token_a, token_b = tokens
        fund(token_a, LP2, pool, 1_000)
        fund(token_b, LP2, pool, 500)
        assert pool.deposit(LP2, 500, 1, 1_000, START_TIME) == 500


class TestWithdraw:
    def test_pro_rata_withdraw(self, pool, tokens):
        token_a, token_b = tokens

        a_out, b_out = pool.withdraw(LP, 500_000, 1, 1, START_TIME)

        assert (a_out, b_out) == (1_000_000, 500_000)
        assert pool.current_reserves() == (1_000_000, 500_000)
        assert pool.share_supply() == 500_000
        assert pool.share_balance_of(LP) == 500_000
        assert token_a.balance_of(LP) == 1_000_000
        assert token_b.balance_of(LP) == 500_000

    def test_withdraw_everything_leaves_inert_pool(self, pool, tokens):
        token_a, token_b = tokens
        pool.withdraw(LP, 1_000_000, 1, 1, START_TIME)

        assert pool.current_reserves() == (0, 0)
        assert pool.share_supply() == 0

        fund(token_a, TRADER, pool, 100)
        with pytest.raises(ZeroAmount):
            pool.swap_exact_input(TRADER, TKA, 100, TKB, 1, START_TIME)

    def test_bootstrap_again_after_full_withdraw(self, pool, tokens):
        token_a, token_b = tokens
        pool.withdraw(LP, 1_000_000, 1, 1, START_TIME)
        fund(token_a, LP2, pool, 3_000)
        fund(token_b, LP2, pool, 1_000)

        assert pool.deposit(LP2, 1_000, 1, 3_000, START_TIME) == 1_000
        assert pool.current_reserves() == (3_000, 1_000)

    def test_withdraw_more_than_held(self, pool):
        with pytest.raises(InsufficientShares):
            pool.withdraw(LP2, 1, 1, 1, START_TIME)
        with pytest.raises(InsufficientShares):
            pool.withdraw(LP, 1_000_001, 1, 1, START_TIME)

    @pytest.mark.parametrize("min_a,min_b", [(1_000_001, 1), (1, 500_001)])
    def test_below_minimum(self, pool, min_a, min_b):
        with pytest.raises(SlippageExceeded):
            pool.withdraw(LP, 500_000, min_a, min_b, START_TIME)
        assert pool.current_reserves() == (2_000_000, 1_000_000)
        assert pool.share_balance_of(LP) == 1_000_000

    @pytest.mark.parametrize("shares,min_a,min_b", [(0, 1, 1), (10, 0, 1), (10, 1, 0)])
    def test_zero_amount(self, pool, shares, min_a, min_b):
        with pytest.raises(ZeroAmount):
            pool.withdraw(LP, shares, min_a, min_b, START_TIME)
        assert pool.current_reserves() == (2_000_000, 1_000_000)

    def test_deadline_expired(self, pool):
        with pytest.raises(DeadlineExpired):
            pool.withdraw(LP, 10, 1, 1, START_TIME - 1)

    def test_deposit_then_withdraw_never_gains(self, pool, tokens):
        """Round-tripping liquidity returns at most what was put in."""
        token_a, token_b = tokens
        fund(token_a, LP2, pool, 1_001)
        fund(token_b, LP2, pool, 333)

        shares = pool.deposit(LP2, 333, 1, 1_001, START_TIME)
        a_out, b_out = pool.withdraw(LP2, shares, 1, 1, START_TIME)

        assert a_out <= 666
        assert b_out <= 333
