"""Tests for configuration dataclasses and environment loading."""

import pytest

from cpamm.config import CampaignConfig, HarnessConfig, PoolConfig
from cpamm.constants import FEE_DENOMINATOR, FEE_NUMERATOR, MINIMUM_LIQUIDITY


class TestPoolConfig:
    def test_defaults(self):
        config = PoolConfig()
        assert config.fee_numerator == FEE_NUMERATOR == 997
        assert config.fee_denominator == FEE_DENOMINATOR == 1_000
        assert config.minimum_liquidity == MINIMUM_LIQUIDITY

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"fee_denominator": 0},
            {"fee_numerator": 0},
            {"fee_numerator": 1_001},
            {"minimum_liquidity": 0},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            PoolConfig(**kwargs)

    def test_from_env(self):
        config = PoolConfig.from_env({"CPAMM_FEE_NUMERATOR": "995", "CPAMM_MINIMUM_LIQUIDITY": ""})
        assert config.fee_numerator == 995
        assert config.minimum_liquidity == MINIMUM_LIQUIDITY

    def test_from_env_rejects_non_integer(self):
        with pytest.raises(ValueError, match="CPAMM_FEE_NUMERATOR"):
            PoolConfig.from_env({"CPAMM_FEE_NUMERATOR": "0.3%"})


class TestHarnessConfig:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"min_deposit_b": 0},
            {"min_deposit_b": 10, "max_deposit_b": 9},
            {"min_swap_output": 0},
            {"expired_deadline_one_in": -1},
            {"slippage_multiplier": 0},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            HarnessConfig(**kwargs)

    def test_from_env(self):
        config = HarnessConfig.from_env(
            {
                "CPAMM_HARNESS_MAX_DEPOSIT": "5000",
                "CPAMM_HARNESS_EXPIRED_ONE_IN": "0",
                "CPAMM_HARNESS_SLIPPAGE_MULTIPLIER": "3",
            }
        )
        assert config.max_deposit_b == 5_000
        assert config.slippage_multiplier == 3
        assert config.expired_deadline_one_in == 0


class TestCampaignConfig:
    def test_from_env(self):
        config = CampaignConfig.from_env(
            {"CPAMM_CAMPAIGN_RUNS": "3", "CPAMM_CAMPAIGN_SEED": "9", "CPAMM_FEE_NUMERATOR": "990"}
        )
        assert (config.runs, config.depth, config.seed) == (3, 32, 9)
        assert config.pool.fee_numerator == 990

    def test_initial_b_must_cover_minimum_liquidity(self):
        with pytest.raises(ValueError):
            CampaignConfig(initial_b=999)
        assert CampaignConfig(initial_b=999, pool=PoolConfig(minimum_liquidity=1)).initial_b == 999

    @pytest.mark.parametrize("kwargs", [{"runs": 0}, {"depth": 0}, {"initial_a": 0}])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            CampaignConfig(**kwargs)

    def test_frozen(self):
        config = CampaignConfig()
        with pytest.raises(AttributeError):
            config.runs = 1
