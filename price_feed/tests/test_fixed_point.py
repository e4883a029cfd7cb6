"""Unit tests for checked uint256 arithmetic."""

import pytest

from price_feed.src.errors import ArithmeticOverflowError
from price_feed.src.fixed_point import (
    UINT256_MAX,
    checked_add,
    checked_mul,
    checked_sub,
    checked_uint,
    mantissa_exponent,
    pow10,
)


class TestCheckedArithmetic:
    """Test range-checked operations."""

    def test_in_range(self) -> None:
        assert checked_uint(0) == 0
        assert checked_uint(UINT256_MAX) == UINT256_MAX
        assert checked_mul(2 * 10**6, 10**12) == 2 * 10**18
        assert checked_add(1, 2) == 3
        assert checked_sub(5, 5) == 0

    def test_overflow(self) -> None:
        with pytest.raises(ArithmeticOverflowError, match="overflow"):
            checked_uint(UINT256_MAX + 1)
        with pytest.raises(ArithmeticOverflowError):
            checked_mul(2**128, 2**128)
        with pytest.raises(ArithmeticOverflowError):
            checked_add(UINT256_MAX, 1)

    def test_underflow(self) -> None:
        with pytest.raises(ArithmeticOverflowError, match="underflow"):
            checked_sub(1, 2)
        with pytest.raises(ArithmeticOverflowError):
            checked_uint(-1)

    def test_is_arithmetic_error(self) -> None:
        """Overflow errors should also be catchable as ArithmeticError."""
        with pytest.raises(ArithmeticError):
            checked_sub(0, 1)


class TestExponent:
    """Test the mantissa rescaling exponent."""

    def test_values(self) -> None:
        assert mantissa_exponent(usd_decimals=6, token_decimals=18) == 12
        assert mantissa_exponent(usd_decimals=18, token_decimals=18) == 0
        assert mantissa_exponent(usd_decimals=6, token_decimals=8) == 22

    def test_negative(self) -> None:
        with pytest.raises(ArithmeticOverflowError, match="decimals too large"):
            mantissa_exponent(usd_decimals=18, token_decimals=19)

    def test_pow10(self) -> None:
        assert pow10(0) == 1
        assert pow10(12) == 10**12
        with pytest.raises(ArithmeticOverflowError):
            pow10(-1)
        with pytest.raises(ArithmeticOverflowError):
            pow10(78)
