"""TWAP price feed for lending protocols."""
