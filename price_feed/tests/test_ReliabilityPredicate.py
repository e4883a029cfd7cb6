"""Unit tests for ReliabilityPredicate."""

from unittest.mock import patch

import pytest

from price_feed.src.Registration import OrientedOracle
from price_feed.src.ReliabilityPredicate import ReliabilityPredicate, ReliabilityThresholds

from .fakes import NOW, USDC, WBTC, WONE, FakePool, FakeTwapOracle


def oriented(
    token: str = WBTC,
    base_first: bool = False,
    base_reserve: int = 5_000_000,
    last_update: int = NOW,
) -> OrientedOracle:
    if base_first:
        pool = FakePool(WONE, base_reserve, 1)
        oracle = FakeTwapOracle(WONE, token, pool, last_update=last_update)
    else:
        pool = FakePool(token, 1, base_reserve)
        oracle = FakeTwapOracle(token, WONE, pool, last_update=last_update)
    return OrientedOracle.orient(oracle, WONE)


class TestReliabilityThresholds:
    """Test ReliabilityThresholds dataclass."""

    def test_default_values(self) -> None:
        """Defaults should be 30 minutes and 1,000,000 base units."""
        thresholds = ReliabilityThresholds()
        assert thresholds.freshness_window == 1800
        assert thresholds.min_base_reserves == 1_000_000

    def test_negative_values_rejected(self) -> None:
        with pytest.raises(ValueError, match="freshness_window"):
            ReliabilityThresholds(freshness_window=-1)
        with pytest.raises(ValueError, match="min_base_reserves"):
            ReliabilityThresholds(min_base_reserves=-1)


class TestPoolLiquidity:
    """Test the base-side liquidity check."""

    def test_base_as_token0(self) -> None:
        """Reserve0 should be used when the base asset is token0."""
        predicate = ReliabilityPredicate(ReliabilityThresholds(min_base_reserves=7))
        pool = FakePool(WONE, 7, 6)
        oracle = OrientedOracle.orient(FakeTwapOracle(USDC, WONE, pool), WONE)

        assert oracle.base_index == 0
        assert predicate.is_liquid(oracle) is True

    def test_base_as_token1(self) -> None:
        """Reserve1 should be used when the base asset is token1."""
        predicate = ReliabilityPredicate(ReliabilityThresholds(min_base_reserves=7))
        pool = FakePool(USDC, 7, 6)
        oracle = OrientedOracle.orient(FakeTwapOracle(USDC, WONE, pool), WONE)

        assert oracle.base_index == 1
        assert predicate.is_liquid(oracle) is False

    def test_case_insensitive(self) -> None:
        """Address letter case should not affect the side lookup."""
        pool = FakePool(WONE.lower(), 7, 9)
        oracle = OrientedOracle.orient(FakeTwapOracle(USDC, WONE, pool), WONE)

        assert oracle.base_reserve() == 7

    def test_min_liquidity_inclusive(self) -> None:
        """A reserve equal to the minimum should pass, one below should fail."""
        assert ReliabilityPredicate().is_liquid(oriented(base_reserve=1_000_000)) is True
        assert ReliabilityPredicate().is_liquid(oriented(base_reserve=999_999)) is False


class TestFreshness:
    """Test the staleness check."""

    def test_explicit_now(self) -> None:
        predicate = ReliabilityPredicate(ReliabilityThresholds(freshness_window=1800))
        oracle = oriented(last_update=NOW - 1800)

        assert predicate.is_fresh(oracle, now=NOW) is True
        assert predicate.is_fresh(oracle, now=NOW + 1) is False

    def test_clock(self) -> None:
        """An injected clock should be used as the current time."""
        predicate = ReliabilityPredicate(clock=lambda: NOW + 1801)
        assert predicate.is_fresh(oriented(last_update=NOW)) is False

    @patch("price_feed.src.ReliabilityPredicate.time.time")
    def test_wall_clock_default(self, mock_time) -> None:
        """Without a clock, wall-clock time should be used."""
        predicate = ReliabilityPredicate()
        oracle = oriented(last_update=NOW)

        mock_time.return_value = NOW + 1800.9
        assert predicate.is_fresh(oracle) is True

        mock_time.return_value = NOW + 1801.0
        assert predicate.is_fresh(oracle) is False


class TestEvaluate:
    """Test the combined predicate."""

    def test_all_pass(self) -> None:
        predicate = ReliabilityPredicate(clock=lambda: NOW)
        assert predicate.evaluate(oriented(), oriented(USDC, base_first=True)) is True

    def test_stale_regardless_of_liquidity(self) -> None:
        """Staleness should fail the predicate even with deep pools."""
        predicate = ReliabilityPredicate(clock=lambda: NOW)
        asset = oriented(base_reserve=10**30, last_update=NOW - 1801)
        base_usd = oriented(USDC, base_reserve=10**30)

        assert predicate.evaluate(asset, base_usd) is False

    def test_shallow_asset_pool(self) -> None:
        predicate = ReliabilityPredicate(clock=lambda: NOW)
        assert predicate.evaluate(oriented(base_reserve=999_999), oriented(USDC)) is False

    def test_shallow_base_usd_pool(self) -> None:
        predicate = ReliabilityPredicate(clock=lambda: NOW)
        assert predicate.evaluate(oriented(), oriented(USDC, base_reserve=999_999)) is False

    def test_base_usd_staleness_not_checked(self) -> None:
        """Only the asset's own oracle is checked for staleness."""
        predicate = ReliabilityPredicate(clock=lambda: NOW)
        assert predicate.evaluate(oriented(), oriented(USDC, last_update=0)) is True

    def test_same_oracle_for_base_asset(self) -> None:
        """For the base asset, the base/USD oracle plays both roles."""
        predicate = ReliabilityPredicate(clock=lambda: NOW)
        base_usd = oriented(USDC)

        assert predicate.evaluate(base_usd, base_usd) is True
