"""In-memory stand-ins for the on-chain collaborators used by the unit tests."""

from __future__ import annotations

from web3 import Web3

from price_feed.src.interfaces import (
    AssetRef,
    Erc20Token,
    FallbackOracle,
    LiquidityPool,
    PairTwapOracle,
)


def addr(n: int) -> str:
    """Deterministic checksummed test address."""
    return Web3.to_checksum_address(f"0x{n:040x}")


WONE = addr(0x1001)
USDC = addr(0x1002)
WBTC = addr(0x1003)
WETH = addr(0x1004)
OTHER = addr(0x1005)

NOW = 1_700_000_000


class FakeToken(Erc20Token):
    def __init__(self, decimals: int = 18, total_supply: int = 0) -> None:
        self._decimals = decimals
        self._total_supply = total_supply
        self.balances: dict[str, int] = {}
        self.decimals_calls = 0

    def decimals(self) -> int:
        self.decimals_calls += 1
        return self._decimals

    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)


class TokenBook:
    """``address -> FakeToken`` loader."""

    def __init__(self) -> None:
        self.tokens: dict[str, FakeToken] = {}

    def add(self, address: str, decimals: int) -> FakeToken:
        token = FakeToken(decimals)
        self.tokens[address] = token
        return token

    def __call__(self, address: str) -> FakeToken:
        return self.tokens[Web3.to_checksum_address(address)]


class FakePool(LiquidityPool):
    def __init__(self, token0: str, reserve0: int, reserve1: int) -> None:
        self._token0 = token0
        self.reserves = (reserve0, reserve1)

    def token0(self) -> str:
        return self._token0

    def get_reserves(self) -> tuple[int, int]:
        return self.reserves


class FakeTwapOracle(PairTwapOracle):
    """TWAP oracle with a fixed linear rate per input token.

    ``rates[token] = (numerator, denominator)`` so that
    ``consult(token, amount) == amount * numerator // denominator``.
    """

    def __init__(
        self,
        token0: str,
        token1: str,
        pool: FakePool,
        rates: dict[str, tuple[int, int]] | None = None,
        last_update: int = NOW,
    ) -> None:
        self._token0 = token0
        self._token1 = token1
        self._pool = pool
        self.rates = rates or {}
        self.last_update = last_update
        self.consult_calls: list[tuple[str, int]] = []

    def consult(self, token: str, amount_in: int) -> int:
        self.consult_calls.append((token, amount_in))
        numerator, denominator = self.rates[token]
        return amount_in * numerator // denominator

    def token0(self) -> str:
        return self._token0

    def token1(self) -> str:
        return self._token1

    def block_timestamp_last(self) -> int:
        return self.last_update

    def pair(self) -> LiquidityPool:
        return self._pool


class FakeFallbackOracle(FallbackOracle):
    def __init__(self, prices: dict[str, int] | None = None) -> None:
        self.prices = prices or {}
        self.calls: list[str] = []

    def get_price(self, token: str) -> int:
        self.calls.append(token)
        return self.prices[token]


class FakeAssetRef(AssetRef):
    def __init__(self, symbol: str, underlying: str | None = None) -> None:
        self._symbol = symbol
        self._underlying = underlying

    def __repr__(self) -> str:
        return f"FakeAssetRef({self._symbol})"

    def symbol(self) -> str:
        return self._symbol

    def underlying_token(self) -> str:
        if self._underlying is None:
            raise RuntimeError(f"{self._symbol} has no underlying token")
        return self._underlying
