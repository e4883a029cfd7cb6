"""ReliabilityPredicate: freshness and liquidity checks for TWAP sources.

A TWAP price is trusted only if:
    1. The asset's own oracle was updated within ``freshness_window`` seconds
    2. The base/USD pool holds at least ``min_base_reserves`` of the base asset
    3. The asset's own pool holds at least ``min_base_reserves`` of the base asset

Liquidity is always measured in base-asset units on whichever side of the pool
the base asset sits. That side is resolved once, when the oracle is registered
(see :func:`Registration.base_side_index`), and :meth:`ReliabilityPredicate.is_liquid`
reads live reserves from it. Both bounds are inclusive: an update exactly
``freshness_window`` seconds old is fresh, and a reserve exactly equal to
``min_base_reserves`` is deep enough.

.. code-block:: python

    >>> predicate = ReliabilityPredicate(ReliabilityThresholds(freshness_window=1800))
    >>> predicate.is_fresh(asset_oracle, now=1_700_001_801)
    False
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from .Registration import OrientedOracle

logger = logging.getLogger(__name__)

DEFAULT_FRESHNESS_WINDOW = 30 * 60  # 30 minutes
DEFAULT_MIN_BASE_RESERVES = 1_000_000


@dataclass(frozen=True)
class ReliabilityThresholds:
    """Deployment-time thresholds for the reliability predicate.

    :ivar freshness_window: Maximum age in seconds of the last TWAP update.
    :ivar min_base_reserves: Minimum base-asset reserve of a pool.
    """

    freshness_window: int = DEFAULT_FRESHNESS_WINDOW
    min_base_reserves: int = DEFAULT_MIN_BASE_RESERVES

    def __post_init__(self) -> None:
        if self.freshness_window < 0:
            raise ValueError("freshness_window must not be negative")
        if self.min_base_reserves < 0:
            raise ValueError("min_base_reserves must not be negative")


class ReliabilityPredicate:
    """Stateless freshness + liquidity test.

    :ivar thresholds: Freshness and liquidity thresholds.
    """

    def __init__(
        self,
        thresholds: ReliabilityThresholds | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize the predicate.

        :param thresholds: Thresholds to apply (defaults: 30 minutes, 1e6 units).
        :param clock: Callable returning the current unix time. Defaults to
            wall-clock time; pass a block-timestamp reader when running
            against a chain.
        """
        self.thresholds = thresholds or ReliabilityThresholds()
        self._clock = clock

    def now(self) -> int:
        if self._clock is not None:
            return int(self._clock())
        return int(time.time())

    def is_fresh(self, oriented: OrientedOracle, now: int | None = None) -> bool:
        """Check the staleness of an oracle's last accumulator update."""
        if now is None:
            now = self.now()
        age = now - oriented.last_update()
        return age <= self.thresholds.freshness_window

    def is_liquid(self, oriented: OrientedOracle) -> bool:
        """Check the base-asset depth of an oracle's pool."""
        return oriented.base_reserve() >= self.thresholds.min_base_reserves

    def evaluate(self, asset: OrientedOracle, base_usd: OrientedOracle) -> bool:
        """Combine freshness of ``asset`` with liquidity of both pools.

        For the base asset itself, ``asset`` and ``base_usd`` are the same oracle.

        :param asset: The queried asset's own oracle.
        :param base_usd: The base/USD oracle.
        :returns: True if the TWAP source can be trusted.
        """
        if not self.is_fresh(asset):
            logger.debug(
                f"Oracle for {asset.counter_token} stale: last update "
                f"{asset.last_update()}, window {self.thresholds.freshness_window}s"
            )
            return False
        if not self.is_liquid(base_usd):
            logger.debug("Base/USD pool below minimum base reserves")
            return False
        if not self.is_liquid(asset):
            logger.debug(f"Pool for {asset.counter_token} below minimum base reserves")
            return False
        return True
