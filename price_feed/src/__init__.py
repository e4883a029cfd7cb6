"""
TWAP Price Feed - On-Chain TWAP Aggregation Module

This module prices lending market assets from on-chain TWAP oracles:
- PriceAggregator: TWAP oracle registry and USD mantissa conversion
- ReliabilityPredicate: Freshness and liquidity checks
- PriceDispatcher: Routing between the TWAP aggregator and the fallback oracle
- CirculatingSupply: Governance token supply net of excluded holders
- Controller: Administrator capability gating all registrations
- PriceFeed: Web3 wiring and reporting loop
"""

from .CirculatingSupply import CirculatingSupply
from .Controller import AdminCapability, Controller
from .errors import (
    ArithmeticOverflowError,
    InvalidDecimalsError,
    InvalidPairError,
    NotConfiguredError,
    PriceFeedError,
    UnauthorizedError,
)
from .events import EventEmitter, OracleEvent
from .PriceAggregator import AggregatorConfig, PriceAggregator
from .PriceDispatcher import PriceDispatcher
from .PriceFeed import PriceFeed, PriceFeedSettings
from .Registration import UNSET, Active, OrientedOracle, Registration
from .ReliabilityPredicate import ReliabilityPredicate, ReliabilityThresholds

__all__ = [
    "Active",
    "AdminCapability",
    "AggregatorConfig",
    "ArithmeticOverflowError",
    "CirculatingSupply",
    "Controller",
    "EventEmitter",
    "InvalidDecimalsError",
    "InvalidPairError",
    "NotConfiguredError",
    "OracleEvent",
    "OrientedOracle",
    "PriceAggregator",
    "PriceDispatcher",
    "PriceFeed",
    "PriceFeedError",
    "PriceFeedSettings",
    "Registration",
    "ReliabilityPredicate",
    "ReliabilityThresholds",
    "UNSET",
    "UnauthorizedError",
]
