"""PriceFeed: wires the price feed components to on-chain contracts.

Architecture:
    - A Controller holds the administrator identity; its capability is used
      once at startup to register the configured oracles
    - PriceAggregator reads per-asset TWAP oracles and the base/USD oracle
    - PriceDispatcher routes each query to the aggregator or the fallback
      oracle depending on the reliability check
    - CirculatingSupply reports the governance token supply
    - ``run()`` reports all configured assets every ``watch_period`` seconds
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from eth_account import Account
from web3.exceptions import Web3Exception

from .addresses import is_zero_address
from .CirculatingSupply import CirculatingSupply
from .ContractAdapters import (
    Web3AssetRef,
    Web3FallbackOracle,
    Web3PairTwapOracle,
    token_loader,
)
from .ContractUtility import ContractUtility
from .Controller import Controller
from .errors import PriceFeedError
from .interfaces import AssetRef
from .PriceAggregator import AggregatorConfig, PriceAggregator
from .PriceDispatcher import PriceDispatcher
from .ReliabilityPredicate import ReliabilityThresholds

logger = logging.getLogger(__name__)

# Wrapped native token per network, used for the native asset reference.
DEFAULT_NATIVE_TOKEN: dict[str, str | None] = {
    "harmony": "0xcF664087a5bB0237a0BAd6742852ec6c8d69A27a",
    "harmony-testnet": None,
    "localnet": None,
}

DEFAULT_NATIVE_SYMBOL = "tqONE"


@dataclass(frozen=True)
class PriceFeedSettings:
    """Startup configuration for :class:`PriceFeed`.

    :ivar network_name: Network name or RPC URL.
    :ivar base_token: Base asset address.
    :ivar base_usd_oracle: Address of the base/USD TWAP oracle.
    :ivar fallback_oracle: Address of the fallback oracle.
    :ivar native_token: Wrapped native token address.
    :ivar native_symbol: Asset reference symbol of the native token.
    :ivar asset_oracles: Token address to TWAP oracle address.
    :ivar assets: Asset reference addresses to report.
    :ivar thresholds: Reliability thresholds.
    :ivar governance_token: Optional governance token for supply reports.
    :ivar excluded_addresses: Non-circulating holders of the governance token.
    :ivar admin_private_key: Optional administrator key.
    :ivar watch_period: Seconds between reports, 0 to report once.
    """

    network_name: str
    base_token: str
    base_usd_oracle: str
    fallback_oracle: str
    native_token: str
    native_symbol: str = DEFAULT_NATIVE_SYMBOL
    asset_oracles: dict[str, str] = field(default_factory=dict)
    assets: tuple[str, ...] = ()
    thresholds: ReliabilityThresholds = field(default_factory=ReliabilityThresholds)
    governance_token: str | None = None
    excluded_addresses: tuple[str, ...] = ()
    admin_private_key: str | None = None
    watch_period: int = 0


class PriceFeed:
    """Reports prices of asset references and the governance token supply.

    :ivar dispatcher: Price dispatcher.
    :ivar assets: Asset references to report.
    :ivar supply: Optional circulating supply calculator.
    :ivar watch_period: Seconds between reports in :meth:`run`.
    """

    def __init__(
        self,
        dispatcher: PriceDispatcher,
        assets: list[AssetRef],
        supply: CirculatingSupply | None = None,
        watch_period: int = 0,
    ) -> None:
        self.dispatcher = dispatcher
        self.assets = assets
        self.supply = supply
        self.watch_period = watch_period

    @classmethod
    def from_settings(cls, settings: PriceFeedSettings) -> PriceFeed:
        """Connect to the network and register all configured oracles.

        :param settings: Startup configuration.
        :returns: Ready-to-run price feed.
        :raises InvalidPairError: If a configured oracle does not match its pair.
        """
        contract_utility = ContractUtility(settings.network_name)
        w3 = contract_utility.w3

        if settings.admin_private_key:
            admin = Account.from_key(settings.admin_private_key)
        else:
            admin = Account.create()
            logger.info(f"No admin key configured, using ephemeral admin {admin.address}")

        controller = Controller(admin.address)
        capability = controller.issue_for(admin)

        aggregator = PriceAggregator(
            controller,
            AggregatorConfig(settings.base_token, settings.thresholds),
            token_loader(w3),
            clock=contract_utility.latest_block_timestamp,
        )
        aggregator.register_base_usd_oracle(
            capability, Web3PairTwapOracle(w3, settings.base_usd_oracle)
        )
        for token, oracle in settings.asset_oracles.items():
            # A zero oracle address leaves the asset unconfigured
            twap = None if is_zero_address(oracle) else Web3PairTwapOracle(w3, oracle)
            aggregator.register_asset_oracle(capability, token, twap)

        dispatcher = PriceDispatcher(
            controller,
            aggregator,
            Web3FallbackOracle(w3, settings.fallback_oracle),
            native_symbol=settings.native_symbol,
            native_token=settings.native_token,
        )

        supply = None
        if settings.governance_token:
            supply = CirculatingSupply(
                controller,
                token_loader(w3)(settings.governance_token),
                excluded=settings.excluded_addresses,
            )

        assets: list[AssetRef] = [Web3AssetRef(w3, a) for a in settings.assets]
        logger.info(
            f"PriceFeed initialized: network={contract_utility.network}, "
            f"base={aggregator.base_asset}, oracles={len(settings.asset_oracles)}, "
            f"assets={len(assets)}"
        )
        return cls(dispatcher, assets, supply=supply, watch_period=settings.watch_period)

    def report(self) -> dict[str, int | None]:
        """Price every configured asset reference once.

        A failing asset is logged and reported as None; the others are still priced.

        :returns: Dict mapping asset reference (repr) to price mantissa or None.
        """
        prices: dict[str, int | None] = {}
        for asset in self.assets:
            key = repr(asset)
            try:
                prices[key] = self.dispatcher.get_price_for_asset(asset)
            except (PriceFeedError, Web3Exception) as exc:
                logger.error(f"{key}: price query failed: {exc}")
                prices[key] = None
                continue
            logger.info(f"{key}: {prices[key]}")
        return prices

    def report_supply(self) -> int | None:
        """Return the circulating supply, or None if unconfigured or the query failed."""
        if self.supply is None:
            return None
        try:
            circulating = self.supply.circulating_supply()
        except (PriceFeedError, Web3Exception) as exc:
            logger.error(f"Circulating supply query failed: {exc}")
            return None
        logger.info(f"Circulating supply: {circulating}")
        return circulating

    async def run(self) -> None:
        """Report prices and supply, repeating every ``watch_period`` seconds."""
        while True:
            self.report()
            self.report_supply()
            if self.watch_period <= 0:
                return
            await asyncio.sleep(self.watch_period)
