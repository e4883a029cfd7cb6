"""Web3-backed implementations of the collaborator interfaces.

Each adapter wraps a ``web3`` contract instance and forwards calls to the
chain. Contract reverts (``ContractLogicError``) and connection errors are not
caught here; they abort the enclosing price query.
"""

from __future__ import annotations

from functools import cache

from web3 import Web3
from web3.contract import Contract

from .addresses import to_address
from .ContractUtility import ContractUtility
from .interfaces import AssetRef, Erc20Token, FallbackOracle, LiquidityPool, PairTwapOracle


def _contract(w3: Web3, address: str, contract_name: str) -> Contract:
    return w3.eth.contract(
        address=to_address(address), abi=ContractUtility.get_contract(contract_name)
    )


class Web3LiquidityPool(LiquidityPool):
    """UniswapV2 pair contract."""

    def __init__(self, w3: Web3, address: str) -> None:
        self.address = to_address(address)
        self.contract = _contract(w3, address, "UniswapV2Pair")

    def __repr__(self) -> str:
        return f"Web3LiquidityPool({self.address})"

    def token0(self) -> str:
        return self.contract.functions.token0().call()

    def get_reserves(self) -> tuple[int, int]:
        reserve0, reserve1, _ = self.contract.functions.getReserves().call()
        return reserve0, reserve1


class Web3PairTwapOracle(PairTwapOracle):
    """Per-pair TWAP oracle contract.

    :ivar address: Oracle contract address.
    """

    def __init__(self, w3: Web3, address: str) -> None:
        self.w3 = w3
        self.address = to_address(address)
        self.contract = _contract(w3, address, "UniswapPairTwapOracle")

    def __repr__(self) -> str:
        return f"Web3PairTwapOracle({self.address})"

    def consult(self, token: str, amount_in: int) -> int:
        return self.contract.functions.consult(to_address(token), amount_in).call()

    def token0(self) -> str:
        return self.contract.functions.token0().call()

    def token1(self) -> str:
        return self.contract.functions.token1().call()

    def block_timestamp_last(self) -> int:
        return self.contract.functions.blockTimestampLast().call()

    def pair(self) -> LiquidityPool:
        return Web3LiquidityPool(self.w3, self.contract.functions.pair().call())


class Web3FallbackOracle(FallbackOracle):
    def __init__(self, w3: Web3, address: str) -> None:
        self.address = to_address(address)
        self.contract = _contract(w3, address, "FallbackOracle")

    def __repr__(self) -> str:
        return f"Web3FallbackOracle({self.address})"

    def get_price(self, token: str) -> int:
        return self.contract.functions.getPrice(to_address(token)).call()


class Web3AssetRef(AssetRef):
    """Lending market token exposing ``underlyingToken()`` and ``symbol()``."""

    def __init__(self, w3: Web3, address: str) -> None:
        self.address = to_address(address)
        self.contract = _contract(w3, address, "AssetRef")

    def __repr__(self) -> str:
        return f"Web3AssetRef({self.address})"

    def symbol(self) -> str:
        return self.contract.functions.symbol().call()

    def underlying_token(self) -> str:
        return self.contract.functions.underlyingToken().call()


class Web3Erc20Token(Erc20Token):
    """ERC20 token; ``decimals()`` is immutable and read only once."""

    def __init__(self, w3: Web3, address: str) -> None:
        self.address = to_address(address)
        self.contract = _contract(w3, address, "ERC20")
        self._decimals: int | None = None

    def __repr__(self) -> str:
        return f"Web3Erc20Token({self.address})"

    def decimals(self) -> int:
        if self._decimals is None:
            self._decimals = self.contract.functions.decimals().call()
        return self._decimals

    def total_supply(self) -> int:
        return self.contract.functions.totalSupply().call()

    def balance_of(self, account: str) -> int:
        return self.contract.functions.balanceOf(to_address(account)).call()


def token_loader(w3: Web3):
    """Return a memoized ``address -> Web3Erc20Token`` loader bound to ``w3``."""

    @cache
    def load(address: str) -> Erc20Token:
        return Web3Erc20Token(w3, address)

    return lambda address: load(to_address(address))
