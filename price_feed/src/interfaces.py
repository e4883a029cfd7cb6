"""Collaborator interfaces consumed by the price feed.

These mirror the on-chain contracts the aggregator reads from. Production code
uses the web3-backed implementations in :mod:`.ContractAdapters`; tests use
in-memory fakes.
"""

from abc import ABC, abstractmethod


class LiquidityPool(ABC):
    """A constant-product liquidity pool (UniswapV2 pair)."""

    @abstractmethod
    def token0(self) -> str:
        """Return the address of the pool's first token."""
        pass

    @abstractmethod
    def get_reserves(self) -> tuple[int, int]:
        """Return the current ``(reserve0, reserve1)``."""
        pass


class PairTwapOracle(ABC):
    """A TWAP oracle bound to a single liquidity pool."""

    @abstractmethod
    def consult(self, token: str, amount_in: int) -> int:
        """Return the TWAP amount of the other pair token for ``amount_in`` of ``token``.

        :param token: Address of the input token (must be token0 or token1).
        :param amount_in: Input amount in smallest units.
        :returns: Output amount in smallest units of the other token.
        """
        pass

    @abstractmethod
    def token0(self) -> str:
        pass

    @abstractmethod
    def token1(self) -> str:
        pass

    @abstractmethod
    def block_timestamp_last(self) -> int:
        """Return the unix timestamp of the oracle's last accumulator update."""
        pass

    @abstractmethod
    def pair(self) -> LiquidityPool:
        """Return the underlying liquidity pool."""
        pass


class FallbackOracle(ABC):
    """Secondary price source consulted when the TWAP source is unreliable."""

    @abstractmethod
    def get_price(self, token: str) -> int:
        """Return the price mantissa for ``token``."""
        pass


class AssetRef(ABC):
    """A lending market asset reference (cToken-like)."""

    @abstractmethod
    def symbol(self) -> str:
        pass

    @abstractmethod
    def underlying_token(self) -> str:
        """Return the address of the underlying ERC20 token."""
        pass


class Erc20Token(ABC):
    """Read-only view of an ERC20 token."""

    @abstractmethod
    def decimals(self) -> int:
        pass

    @abstractmethod
    def total_supply(self) -> int:
        pass

    @abstractmethod
    def balance_of(self, account: str) -> int:
        pass
