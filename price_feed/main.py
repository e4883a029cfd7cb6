#!/usr/bin/env python3
"""TWAP Price Feed.

Reports USD price mantissas of lending market assets from on-chain TWAP
oracles, falling back to a secondary oracle when a TWAP source is stale or
illiquid, and reports the circulating supply of the governance token.

Configure via CLI arguments or environment variables (CLI args take precedence).
"""

import argparse
import asyncio
import logging
import os
import sys

from .src.ContractUtility import NETWORKS
from .src.PriceFeed import (
    DEFAULT_NATIVE_SYMBOL,
    DEFAULT_NATIVE_TOKEN,
    PriceFeed,
    PriceFeedSettings,
)
from .src.ReliabilityPredicate import (
    DEFAULT_FRESHNESS_WINDOW,
    DEFAULT_MIN_BASE_RESERVES,
    ReliabilityThresholds,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def parse_list(value: str | None) -> list[str]:
    """Split a comma-separated string, dropping empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_asset_oracles(value: str | None) -> dict[str, str]:
    """Parse comma-separated token=oracle assignments into a dictionary.

    Format: token1=oracle1,token2=oracle2

    :param value: Comma-separated assignment string.
    :returns: Dict mapping token addresses to oracle addresses.
    :raises ValueError: If an item is not of the form token=oracle.
    """
    oracles: dict[str, str] = {}
    for item in parse_list(value):
        if "=" not in item:
            raise ValueError(f"Invalid asset oracle '{item}'. Expected 'token=oracle'")
        token, oracle = item.split("=", 1)
        oracles[token.strip()] = oracle.strip()
    return oracles


def main() -> None:
    """Main entry point for the TWAP Price Feed CLI."""
    parser = argparse.ArgumentParser(
        description="TWAP Price Feed: on-chain TWAP prices with fallback oracle",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Networks:
  {', '.join(NETWORKS)}

Examples:
  # Price two lending markets once
  python -m price_feed.main --network harmony \\
      --base-token 0xWONE --base-usd-oracle 0xORACLE --fallback-oracle 0xFALLBACK \\
      --asset-oracles 0xWBTC=0xWBTC_WONE_ORACLE --assets 0xTQBTC,0xTQONE

  # Report every 60 seconds, including governance token supply
  python -m price_feed.main ... --watch 60 --governance-token 0xTRANQ \\
      --excluded 0xTREASURY,0xVESTING

Environment variables (CLI args take precedence):
  NETWORK, RPC_URL, BASE_TOKEN, BASE_USD_ORACLE, ASSET_ORACLES, FALLBACK_ORACLE,
  NATIVE_SYMBOL, NATIVE_TOKEN, FRESHNESS_WINDOW, MIN_BASE_RESERVES, ASSETS,
  GOVERNANCE_TOKEN, EXCLUDED_ADDRESSES, ADMIN_PRIVATE_KEY, WATCH_PERIOD
""",
    )

    parser.add_argument(
        "--network",
        type=str,
        help=f"Network to connect to ({', '.join(NETWORKS)}) or an RPC URL",
        default=os.environ.get("NETWORK") or "harmony",
    )

    parser.add_argument(
        "--base-token",
        dest="base_token",
        type=str,
        help="Address of the base asset every token is paired against",
        default=os.environ.get("BASE_TOKEN"),
    )

    parser.add_argument(
        "--base-usd-oracle",
        dest="base_usd_oracle",
        type=str,
        help="Address of the base/USD TWAP oracle",
        default=os.environ.get("BASE_USD_ORACLE"),
    )

    parser.add_argument(
        "--asset-oracles",
        dest="asset_oracles",
        type=str,
        help="Comma-separated token=oracle TWAP oracle assignments",
        default=os.environ.get("ASSET_ORACLES"),
    )

    parser.add_argument(
        "--fallback-oracle",
        dest="fallback_oracle",
        type=str,
        help="Address of the fallback oracle",
        default=os.environ.get("FALLBACK_ORACLE"),
    )

    parser.add_argument(
        "--native-symbol",
        dest="native_symbol",
        type=str,
        help=f"Asset reference symbol of the native token (default: {DEFAULT_NATIVE_SYMBOL})",
        default=os.environ.get("NATIVE_SYMBOL") or DEFAULT_NATIVE_SYMBOL,
    )

    parser.add_argument(
        "--native-token",
        dest="native_token",
        type=str,
        help="Wrapped native token address (default: per network)",
        default=os.environ.get("NATIVE_TOKEN"),
    )

    parser.add_argument(
        "--freshness-window",
        dest="freshness_window",
        type=int,
        help=f"Max TWAP age in seconds (default: {DEFAULT_FRESHNESS_WINDOW})",
        default=int(os.environ.get("FRESHNESS_WINDOW") or DEFAULT_FRESHNESS_WINDOW),
    )

    parser.add_argument(
        "--min-base-reserves",
        dest="min_base_reserves",
        type=int,
        help=f"Min base-asset pool reserve (default: {DEFAULT_MIN_BASE_RESERVES})",
        default=int(os.environ.get("MIN_BASE_RESERVES") or DEFAULT_MIN_BASE_RESERVES),
    )

    parser.add_argument(
        "--assets",
        type=str,
        help="Comma-separated asset reference addresses to price",
        default=os.environ.get("ASSETS"),
    )

    parser.add_argument(
        "--governance-token",
        dest="governance_token",
        type=str,
        help="Governance token address for circulating supply reports",
        default=os.environ.get("GOVERNANCE_TOKEN"),
    )

    parser.add_argument(
        "--excluded",
        type=str,
        help="Comma-separated non-circulating holder addresses",
        default=os.environ.get("EXCLUDED_ADDRESSES"),
    )

    parser.add_argument(
        "--watch",
        type=int,
        help="Seconds between reports (default: 0, report once)",
        default=int(os.environ.get("WATCH_PERIOD") or "0"),
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    args = parser.parse_args()

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # Validate arguments
    for name in ("base_token", "base_usd_oracle", "fallback_oracle"):
        if not getattr(args, name):
            parser.error(f"--{name.replace('_', '-')} is required")

    if args.freshness_window < 0:
        parser.error("--freshness-window must not be negative")

    if args.min_base_reserves < 0:
        parser.error("--min-base-reserves must not be negative")

    if args.watch < 0:
        parser.error("--watch must not be negative")

    try:
        asset_oracles = parse_asset_oracles(args.asset_oracles)
    except ValueError as e:
        parser.error(str(e))

    native_token = args.native_token or DEFAULT_NATIVE_TOKEN.get(args.network)
    if not native_token:
        parser.error(f"No native token configured for network {args.network}")

    assets = parse_list(args.assets)
    excluded = parse_list(args.excluded)

    # Log configuration
    logger.info("=" * 60)
    logger.info("TWAP Price Feed")
    logger.info("=" * 60)
    logger.info(f"Network:           {args.network}")
    logger.info(f"Base Token:        {args.base_token}")
    logger.info(f"Base/USD Oracle:   {args.base_usd_oracle}")
    logger.info(f"Fallback Oracle:   {args.fallback_oracle}")
    logger.info(f"Native:            {args.native_symbol} -> {native_token}")
    logger.info(f"Asset Oracles:     {len(asset_oracles)}")
    logger.info(f"Assets:            {', '.join(assets) or 'none'}")
    logger.info(f"Freshness Window:  {args.freshness_window}s")
    logger.info(f"Min Base Reserves: {args.min_base_reserves}")
    if args.governance_token:
        logger.info(f"Governance Token:  {args.governance_token} ({len(excluded)} excluded)")
    logger.info(f"Watch Period:      {args.watch}s" if args.watch else "Watch Period:      once")
    logger.info("=" * 60)

    settings = PriceFeedSettings(
        network_name=args.network,
        base_token=args.base_token,
        base_usd_oracle=args.base_usd_oracle,
        fallback_oracle=args.fallback_oracle,
        native_token=native_token,
        native_symbol=args.native_symbol,
        asset_oracles=asset_oracles,
        assets=tuple(assets),
        thresholds=ReliabilityThresholds(
            freshness_window=args.freshness_window,
            min_base_reserves=args.min_base_reserves,
        ),
        governance_token=args.governance_token,
        excluded_addresses=tuple(excluded),
        admin_private_key=os.environ.get("ADMIN_PRIVATE_KEY"),
        watch_period=args.watch,
    )

    try:
        price_feed = PriceFeed.from_settings(settings)
        asyncio.run(price_feed.run())
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
