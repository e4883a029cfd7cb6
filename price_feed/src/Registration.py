"""Registration: registry slots and oracle orientation.

A registry slot is either :data:`UNSET` or :class:`Active`. Both a missing key
and an explicit null replacement read back as ``UNSET``, so every caller has to
handle the "not configured" case instead of relying on a zero address.

The orientation of a TWAP oracle (which side of its pool holds the base asset)
is resolved once, when the oracle is registered, and stored on
:class:`OrientedOracle`.

.. code-block:: python

    >>> oriented = OrientedOracle.orient(oracle, base_asset=WONE)
    >>> oriented.counter_token
    '0x985458E523dB3d53125813eD68c274899e9DfAb4'
    >>> slot = Active(oriented)
    >>> is_active(slot)
    True
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from .addresses import to_address
from .errors import InvalidPairError, NotConfiguredError
from .interfaces import LiquidityPool, PairTwapOracle

logger = logging.getLogger(__name__)


class Unset:
    """Marker for an empty registry slot."""

    _instance: Unset | None = None

    def __new__(cls) -> Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = Unset()


@dataclass(frozen=True)
class OrientedOracle:
    """A TWAP oracle with its pool and the base-asset side resolved.

    :ivar oracle: The TWAP pair oracle.
    :ivar pool: Liquidity pool the oracle observes.
    :ivar base_asset: Base asset address.
    :ivar counter_token: The pair's other (non-base) token.
    :ivar base_index: Index of the base asset in ``pool.get_reserves()``.
    """

    oracle: PairTwapOracle
    pool: LiquidityPool
    base_asset: str
    counter_token: str
    base_index: int

    @classmethod
    def orient(cls, oracle: PairTwapOracle, base_asset: str) -> OrientedOracle:
        """Resolve which side of the oracle's pair is the base asset.

        :param oracle: TWAP oracle to inspect.
        :param base_asset: Base asset address.
        :returns: Oriented oracle.
        :raises InvalidPairError: If neither side of the pair is the base asset, or
            the oracle's pool does not hold the same pair.
        """
        base_asset = to_address(base_asset)
        token0 = to_address(oracle.token0())
        token1 = to_address(oracle.token1())

        if token0 == base_asset:
            counter_token = token1
        elif token1 == base_asset:
            counter_token = token0
        else:
            raise InvalidPairError(
                f"Oracle pair ({token0}, {token1}) does not contain base asset {base_asset}"
            )

        pool = oracle.pair()
        base_index = base_side_index(pool, base_asset, counter_token)
        return cls(
            oracle=oracle,
            pool=pool,
            base_asset=base_asset,
            counter_token=counter_token,
            base_index=base_index,
        )

    def base_reserve(self) -> int:
        """Return the pool's current reserve of the base asset."""
        reserves = self.pool.get_reserves()
        return reserves[self.base_index]

    def last_update(self) -> int:
        return self.oracle.block_timestamp_last()

    def consult(self, token: str, amount_in: int) -> int:
        return self.oracle.consult(token, amount_in)


def base_side_index(pool: LiquidityPool, base_asset: str, counter_token: str) -> int:
    """Return the index of the base asset in ``pool.get_reserves()``.

    Pools may store a pair in either order, so the side is looked up on the
    pool's own ``token0`` rather than taken from the oracle.

    :param pool: Liquidity pool observed by the oracle.
    :param base_asset: Base asset address.
    :param counter_token: The pair's other token.
    :returns: 0 if the base asset is the pool's token0, 1 if it is token1.
    :raises InvalidPairError: If the pool's token0 is neither side of the pair.
    """
    token0 = to_address(pool.token0())
    if token0 == to_address(base_asset):
        return 0
    if token0 == to_address(counter_token):
        return 1
    raise InvalidPairError(
        f"Pool token0 {token0} is not part of the pair ({base_asset}, {counter_token})"
    )


@dataclass(frozen=True)
class Active:
    """An occupied registry slot."""

    oriented: OrientedOracle


Registration = Union[Unset, Active]


def is_active(slot: Registration) -> bool:
    return isinstance(slot, Active)


def require_active(slot: Registration, what: str) -> OrientedOracle:
    """Unwrap an active slot.

    :param slot: Registry slot.
    :param what: Description used in the error message.
    :returns: The registered oriented oracle.
    :raises NotConfiguredError: If the slot is unset.
    """
    if isinstance(slot, Active):
        return slot.oriented
    raise NotConfiguredError(what)
