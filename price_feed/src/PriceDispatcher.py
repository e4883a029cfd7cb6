"""PriceDispatcher: entry point consumed by the lending protocol.

Resolves an asset reference to its underlying token and asks the aggregator
whether its TWAP price is reliable. Exactly one source is consulted per query:
the aggregator when reliable, the fallback oracle otherwise. Failures of the
chosen source propagate; an aggregator configuration error never escalates to
the fallback oracle.
"""

from __future__ import annotations

import logging

from .addresses import to_address
from .Controller import AdminCapability, Controller
from .interfaces import AssetRef, FallbackOracle
from .PriceAggregator import PriceAggregator

logger = logging.getLogger(__name__)


class PriceDispatcher:
    """Routes price queries between the TWAP aggregator and the fallback oracle.

    :ivar controller: Administrator gate for the setters.
    :ivar native_symbol: Symbol of the asset reference for the native gas token.
    """

    def __init__(
        self,
        controller: Controller,
        aggregator: PriceAggregator,
        fallback: FallbackOracle,
        native_symbol: str,
        native_token: str,
    ) -> None:
        """Initialize the dispatcher.

        :param controller: Controller whose capability gates the setters.
        :param aggregator: Primary TWAP price source.
        :param fallback: Secondary price source.
        :param native_symbol: Asset reference symbol of the native gas token
            (e.g. "tqONE"); such references have no ``underlyingToken()``.
        :param native_token: Wrapped native token address used in its place.
        """
        self.controller = controller
        self.native_symbol = native_symbol
        self._aggregator = aggregator
        self._fallback = fallback
        self._native_token = to_address(native_token)

    @property
    def aggregator(self) -> PriceAggregator:
        return self._aggregator

    @property
    def fallback(self) -> FallbackOracle:
        return self._fallback

    @property
    def native_token(self) -> str:
        return self._native_token

    def resolve_token(self, asset_ref: AssetRef) -> str:
        """Map an asset reference to the token that is actually priced."""
        if asset_ref.symbol() == self.native_symbol:
            return self._native_token
        return to_address(asset_ref.underlying_token())

    def get_price_for_asset(self, asset_ref: AssetRef) -> int:
        """Return the USD price mantissa for an asset reference.

        :param asset_ref: Lending market asset reference.
        :returns: Price mantissa from the aggregator or the fallback oracle.
        :raises NotConfiguredError: If the aggregator lacks a required oracle.
        """
        token = self.resolve_token(asset_ref)
        if self._aggregator.is_reliable(token):
            price = self._aggregator.get_usd_price(token)
            logger.debug(f"{token}: TWAP price {price}")
            return price

        price = self._fallback.get_price(token)
        logger.warning(f"{token}: TWAP unreliable, fallback price {price}")
        return price

    def set_aggregator(self, capability: AdminCapability, aggregator: PriceAggregator) -> None:
        self.controller.require(capability)
        self._aggregator = aggregator
        self.controller.events.emit("AggregatorUpdated", aggregator=repr(aggregator))

    def set_fallback(self, capability: AdminCapability, fallback: FallbackOracle) -> None:
        self.controller.require(capability)
        self._fallback = fallback
        self.controller.events.emit("FallbackOracleUpdated", fallback=repr(fallback))

    def set_native_token(self, capability: AdminCapability, token: str) -> None:
        """Replace the token used for the native asset reference."""
        self.controller.require(capability)
        self._native_token = to_address(token)
        self.controller.events.emit("NativeTokenUpdated", token=self._native_token)
