"""PriceAggregator: TWAP oracle registry, reliability check and USD conversion.

Pricing algorithm for a token ``t`` with ``d`` decimals:
    1. ``price_in_base = oracle(t).consult(t, 10**d)``
    2. ``price_in_usd = base_usd.consult(base, price_in_base)`` (skipped when
       ``t`` is the base asset, whose oracle already is the base/USD oracle)
    3. ``mantissa = price_in_usd * 10**(36 - usd_decimals - d)``

The mantissa is the USD value of one smallest unit of ``t`` scaled by 1e36,
the fixed-point convention of the consuming lending protocol.

.. code-block:: python

    >>> aggregator = PriceAggregator(controller, AggregatorConfig(WONE), load_token)
    >>> aggregator.register_base_usd_oracle(cap, wone_usdc_oracle)
    >>> aggregator.register_asset_oracle(cap, WBTC, wbtc_wone_oracle)
    >>> aggregator.is_reliable(WBTC)
    True
    >>> aggregator.get_usd_price(WBTC)
    250000000000000000000000000000000
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from .addresses import to_address
from .Controller import AdminCapability, Controller
from .errors import ArithmeticOverflowError, InvalidDecimalsError, InvalidPairError
from .fixed_point import MANTISSA_SCALE_DECIMALS, checked_mul, checked_uint, mantissa_exponent, pow10
from .interfaces import Erc20Token, PairTwapOracle
from .Registration import UNSET, Active, OrientedOracle, Registration, require_active
from .ReliabilityPredicate import ReliabilityPredicate, ReliabilityThresholds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregatorConfig:
    """Controller-owned aggregator configuration.

    :ivar base_asset: Address of the token every asset is paired against.
    :ivar thresholds: Reliability thresholds.
    """

    base_asset: str
    thresholds: ReliabilityThresholds = field(default_factory=ReliabilityThresholds)

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_asset", to_address(self.base_asset))


class PriceAggregator:
    """Registry of TWAP sub-oracles producing USD price mantissas.

    :ivar controller: Administrator gate for all registrations.
    """

    def __init__(
        self,
        controller: Controller,
        config: AggregatorConfig,
        token_loader: Callable[[str], Erc20Token],
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize the aggregator.

        :param controller: Controller whose capability gates mutations.
        :param config: Base asset and reliability thresholds.
        :param token_loader: Callable returning an ERC20 view for an address.
        :param clock: Optional current-time source for the freshness check.
        """
        self.controller = controller
        self._config = config
        self._token_loader = token_loader
        self._clock = clock
        self._predicate = ReliabilityPredicate(config.thresholds, clock)

        self._assets: dict[str, Registration] = {}
        self._base_usd: Registration = UNSET
        self._usd_token_decimals: int | None = None

    @property
    def config(self) -> AggregatorConfig:
        return self._config

    @property
    def base_asset(self) -> str:
        return self._config.base_asset

    @property
    def usd_token_decimals(self) -> int | None:
        """Cached decimals of the base/USD pair's USD side, or None if unset."""
        return self._usd_token_decimals

    def registration(self, token: str) -> Registration:
        """Return the registry slot for a token (``UNSET`` if never registered)."""
        return self._assets.get(to_address(token), UNSET)

    @property
    def base_usd_registration(self) -> Registration:
        return self._base_usd

    def registered_tokens(self) -> list[str]:
        return [t for t, slot in self._assets.items() if isinstance(slot, Active)]

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def update_config(self, capability: AdminCapability, config: AggregatorConfig) -> None:
        """Replace the aggregator configuration.

        Stored orientations are relative to the base asset, so a new base asset
        clears every registration.

        :param capability: Administrator capability.
        :param config: New configuration.
        """
        self.controller.require(capability)

        base_changed = config.base_asset != self._config.base_asset
        self._config = config
        self._predicate = ReliabilityPredicate(config.thresholds, self._clock)

        if base_changed:
            cleared = len(self.registered_tokens())
            self._assets = {}
            self._base_usd = UNSET
            self._usd_token_decimals = None
            logger.warning(
                f"Base asset changed to {config.base_asset}; cleared {cleared} "
                "asset registrations and the base/USD oracle"
            )
            self.controller.events.emit("BaseAssetUpdated", base_asset=config.base_asset)

    def register_base_usd_oracle(
        self, capability: AdminCapability, oracle: PairTwapOracle
    ) -> None:
        """Register the canonical base/USD oracle.

        :param capability: Administrator capability.
        :param oracle: TWAP oracle over ``{base_asset, usd_token}``.
        :raises InvalidPairError: If the pair does not contain the base asset.
        :raises InvalidDecimalsError: If the decimals leave no room for the
            base asset's own mantissa exponent.
        """
        self.controller.require(capability)

        try:
            oriented = OrientedOracle.orient(oracle, self.base_asset)
        except InvalidPairError as e:
            logger.warning(f"Rejected base/USD oracle: {e}")
            raise

        usd_decimals = self._decimals_of(oriented.counter_token)
        base_decimals = self._decimals_of(self.base_asset)
        if MANTISSA_SCALE_DECIMALS - usd_decimals - base_decimals < 0:
            raise InvalidDecimalsError(
                f"USD token decimals {usd_decimals} with base decimals "
                f"{base_decimals} exceed {MANTISSA_SCALE_DECIMALS}"
            )

        self._base_usd = Active(oriented)
        self._usd_token_decimals = usd_decimals
        logger.info(
            f"Registered base/USD oracle: usd_token={oriented.counter_token}, "
            f"usd_decimals={usd_decimals}"
        )
        self.controller.events.emit(
            "BaseUsdOracleUpdated",
            usd_token=oriented.counter_token,
            usd_decimals=usd_decimals,
        )

    def register_asset_oracle(
        self,
        capability: AdminCapability,
        token: str,
        oracle: PairTwapOracle | None,
    ) -> None:
        """Register or replace the TWAP oracle for an asset.

        Passing ``None`` replaces the registration with ``UNSET``; subsequent
        queries for the token fail with :class:`NotConfiguredError`.

        :param capability: Administrator capability.
        :param token: Asset address.
        :param oracle: TWAP oracle over ``{token, base_asset}``, or None.
        :raises InvalidPairError: If the oracle's pair is not ``{token, base_asset}``.
        :raises InvalidDecimalsError: If the token's decimals would make the
            mantissa exponent negative with the registered base/USD oracle.
        """
        self.controller.require(capability)
        token = to_address(token)

        if oracle is None:
            self._assets[token] = UNSET
            logger.info(f"Unset oracle for {token}")
            self.controller.events.emit("AssetOracleUpdated", token=token, oracle=None)
            return

        if token == self.base_asset:
            raise InvalidPairError(
                f"{token} is the base asset; it is priced by the base/USD oracle"
            )

        try:
            oriented = OrientedOracle.orient(oracle, self.base_asset)
        except InvalidPairError as e:
            logger.warning(f"Rejected oracle for {token}: {e}")
            raise

        if oriented.counter_token != token:
            logger.warning(
                f"Rejected oracle for {token}: pair is "
                f"({oriented.base_asset}, {oriented.counter_token})"
            )
            raise InvalidPairError(
                f"Oracle pair {{{oriented.base_asset}, {oriented.counter_token}}} "
                f"does not match {{{token}, {self.base_asset}}}"
            )

        if self._usd_token_decimals is not None:
            token_decimals = self._decimals_of(token)
            if MANTISSA_SCALE_DECIMALS - self._usd_token_decimals - token_decimals < 0:
                raise InvalidDecimalsError(
                    f"{token} decimals {token_decimals} with USD decimals "
                    f"{self._usd_token_decimals} exceed {MANTISSA_SCALE_DECIMALS}"
                )

        replaced = isinstance(self._assets.get(token), Active)
        self._assets[token] = Active(oriented)
        logger.info(
            f"{'Replaced' if replaced else 'Registered'} oracle for {token} "
            f"(base side index {oriented.base_index})"
        )
        self.controller.events.emit("AssetOracleUpdated", token=token, oracle=repr(oracle))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _resolve(self, token: str) -> tuple[OrientedOracle, OrientedOracle]:
        """Return ``(asset_oracle, base_usd_oracle)`` for a token.

        :raises NotConfiguredError: If either oracle is unset.
        """
        base_usd = require_active(self._base_usd, "base/USD oracle")
        if token == self.base_asset:
            return base_usd, base_usd
        asset = require_active(self.registration(token), f"oracle for {token}")
        return asset, base_usd

    def is_reliable(self, token: str) -> bool:
        """Check whether the TWAP price for a token can be trusted.

        :param token: Asset address (the base asset uses the base/USD oracle).
        :returns: True if fresh and both pools are deep enough.
        :raises NotConfiguredError: If a required oracle is unset.
        """
        token = to_address(token)
        asset, base_usd = self._resolve(token)
        reliable = self._predicate.evaluate(asset, base_usd)
        logger.debug(f"{token}: reliable={reliable}")
        return reliable

    def get_usd_price(self, token: str) -> int:
        """Compute the USD price mantissa of a token from the TWAP oracles.

        Does not re-check reliability; callers route through :meth:`is_reliable`.

        :param token: Asset address.
        :returns: ``price_in_usd * 10**(36 - usd_decimals - token_decimals)``.
        :raises NotConfiguredError: If a required oracle is unset.
        :raises ArithmeticOverflowError: If the result leaves uint256 or the
            exponent is negative.
        """
        token = to_address(token)
        asset, base_usd = self._resolve(token)
        if self._usd_token_decimals is None:
            raise ArithmeticOverflowError("USD token decimals are not cached")

        decimals = self._decimals_of(token)
        price_in_base = checked_uint(asset.consult(token, pow10(decimals)))

        if token == self.base_asset:
            price_in_usd = price_in_base
        else:
            price_in_usd = checked_uint(base_usd.consult(self.base_asset, price_in_base))

        exponent = mantissa_exponent(self._usd_token_decimals, decimals)
        mantissa = checked_mul(price_in_usd, pow10(exponent))
        logger.debug(
            f"{token}: price_in_base={price_in_base}, price_in_usd={price_in_usd}, "
            f"mantissa={mantissa}"
        )
        return mantissa

    def _decimals_of(self, token: str) -> int:
        return self._token_loader(token).decimals()
