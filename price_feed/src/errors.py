"""Exception hierarchy for the price feed.

All failures abort the enclosing operation. Nothing here is retried or
downgraded to a default price; only the reliability check routes a query to
the fallback oracle.
"""


class PriceFeedError(Exception):
    """Base exception for price feed errors."""

    pass


class NotConfiguredError(PriceFeedError):
    """Raised when a required oracle reference is unset.

    :ivar what: Description of the missing reference.
    """

    def __init__(self, what: str):
        """Initialize the error.

        :param what: Which reference is missing (e.g. "base/USD oracle").
        """
        self.what = what
        super().__init__(f"{what} is not configured")


class InvalidPairError(PriceFeedError):
    """Raised when a sub-oracle's constituent tokens do not match the expected pair."""

    pass


class InvalidDecimalsError(InvalidPairError):
    """Raised when a registration would make the price scaling exponent negative."""

    pass


class ArithmeticOverflowError(PriceFeedError, ArithmeticError):
    """Raised when a price or supply computation leaves the uint256 range."""

    pass


class UnauthorizedError(PriceFeedError):
    """Raised when a mutating operation is called without a valid admin capability."""

    pass
