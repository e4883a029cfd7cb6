"""Address normalization helpers."""

from eth_typing import ChecksumAddress
from web3 import Web3

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def to_address(value: str) -> ChecksumAddress:
    """Normalize an address to its EIP-55 checksum form.

    :param value: Hex address in any letter case.
    :returns: Checksummed address.
    :raises ValueError: If value is not a valid 20-byte hex address.
    """
    return Web3.to_checksum_address(value)


def is_zero_address(value: str | None) -> bool:
    """Check whether an address is unset (None, empty or the zero address)."""
    return not value or value.lower() == ZERO_ADDRESS
