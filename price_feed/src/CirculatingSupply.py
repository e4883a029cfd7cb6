"""CirculatingSupply: governance token supply net of non-circulating holders."""

from __future__ import annotations

import logging

from .addresses import to_address
from .Controller import AdminCapability, Controller
from .fixed_point import checked_add, checked_sub
from .interfaces import Erc20Token

logger = logging.getLogger(__name__)


class CirculatingSupply:
    """Total supply minus the balances of an admin-managed exclude list.

    :ivar controller: Administrator gate for the exclude list.
    :ivar token: Governance token.
    """

    def __init__(
        self,
        controller: Controller,
        token: Erc20Token,
        excluded: list[str] | tuple[str, ...] = (),
    ) -> None:
        self.controller = controller
        self.token = token
        self._excluded: list[str] = []
        for address in excluded:
            address = to_address(address)
            if address not in self._excluded:
                self._excluded.append(address)

    def excluded_addresses(self) -> list[str]:
        return list(self._excluded)

    def add_excluded(self, capability: AdminCapability, address: str) -> None:
        """Append an address to the non-circulating list.

        :param capability: Administrator capability.
        :param address: Holder whose balance is not circulating.
        :raises ValueError: If the address is already excluded.
        """
        self.controller.require(capability)
        address = to_address(address)
        if address in self._excluded:
            raise ValueError(f"{address} is already excluded")
        self._excluded.append(address)
        self.controller.events.emit("ExcludedAddressAdded", address=address)

    def circulating_supply(self) -> int:
        """Return ``totalSupply - sum(balanceOf(excluded))``.

        :raises ArithmeticOverflowError: If excluded balances exceed the supply.
        """
        locked = 0
        for address in self._excluded:
            locked = checked_add(locked, self.token.balance_of(address))
        supply = checked_sub(self.token.total_supply(), locked)
        logger.debug(f"Circulating supply {supply} ({len(self._excluded)} excluded)")
        return supply
