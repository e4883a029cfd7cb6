"""Checked uint256 arithmetic for price mantissas and supply figures.

The consuming lending protocol stores prices as uint256 mantissas. Python
integers never wrap, so every intermediate result is range-checked instead and
anything outside ``[0, 2**256 - 1]`` raises :class:`ArithmeticOverflowError`.

.. code-block:: python

    >>> mantissa_exponent(usd_decimals=6, token_decimals=18)
    12
    >>> checked_mul(2 * 10**6, 10**12)
    2000000000000000000
"""

from .errors import ArithmeticOverflowError

UINT256_MAX = 2**256 - 1

# Lending protocol convention: price of one smallest token unit scaled by 1e36,
# so 1 USD per whole 18-decimal token is 1e18.
MANTISSA_SCALE_DECIMALS = 36


def checked_uint(value: int) -> int:
    """Ensure a value fits into uint256.

    :param value: Integer to check.
    :returns: The unchanged value.
    :raises ArithmeticOverflowError: If value is negative or above UINT256_MAX.
    """
    if value < 0:
        raise ArithmeticOverflowError(f"uint256 underflow: {value}")
    if value > UINT256_MAX:
        raise ArithmeticOverflowError(f"uint256 overflow: {value}")
    return value


def checked_mul(a: int, b: int) -> int:
    """Multiply two uint256 values, failing instead of wrapping."""
    return checked_uint(checked_uint(a) * checked_uint(b))


def checked_sub(a: int, b: int) -> int:
    """Subtract two uint256 values, failing on underflow."""
    return checked_uint(checked_uint(a) - checked_uint(b))


def checked_add(a: int, b: int) -> int:
    return checked_uint(checked_uint(a) + checked_uint(b))


def pow10(exponent: int) -> int:
    """Return 10**exponent as a uint256.

    :raises ArithmeticOverflowError: If exponent is negative or the result overflows.
    """
    if exponent < 0:
        raise ArithmeticOverflowError(f"negative decimal exponent: {exponent}")
    return checked_uint(10**exponent)


def mantissa_exponent(usd_decimals: int, token_decimals: int) -> int:
    """Compute the rescaling exponent ``36 - usd_decimals - token_decimals``.

    :param usd_decimals: Decimals of the USD reference token.
    :param token_decimals: Decimals of the priced token.
    :returns: Non-negative exponent.
    :raises ArithmeticOverflowError: If the exponent would be negative.
    """
    exponent = MANTISSA_SCALE_DECIMALS - usd_decimals - token_decimals
    if exponent < 0:
        raise ArithmeticOverflowError(
            f"decimals too large for mantissa: usd={usd_decimals}, token={token_decimals}"
        )
    return exponent
