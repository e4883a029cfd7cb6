"""Controller: administrator identity and capability issuing.

Every mutating operation in the price feed takes an :class:`AdminCapability`.
A capability is only issued to whoever can sign the controller's current
challenge with the administrator's key, and transferring the admin role bumps
the epoch so that previously issued capabilities stop working.

.. code-block:: python

    >>> account = Account.create()
    >>> controller = Controller(account.address)
    >>> cap = controller.issue_for(account)
    >>> controller.require(cap)
"""

from __future__ import annotations

import logging

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount

from .addresses import to_address
from .errors import UnauthorizedError
from .events import EventEmitter

logger = logging.getLogger(__name__)


class AdminCapability:
    """Proof that the holder is the controller's administrator.

    :ivar admin: Address the capability was issued to.
    :ivar epoch: Controller epoch at issue time.
    """

    def __init__(self, controller: Controller, admin: str, epoch: int) -> None:
        self._controller = controller
        self.admin = admin
        self.epoch = epoch

    def __repr__(self) -> str:
        return f"AdminCapability(admin={self.admin!r}, epoch={self.epoch})"


class Controller:
    """Single administrator role gating all registry mutations.

    :ivar events: Emitter shared with the components this controller gates.
    """

    def __init__(self, admin: str, events: EventEmitter | None = None) -> None:
        """Initialize the controller.

        :param admin: Administrator address.
        :param events: Optional shared event emitter.
        """
        self._admin = to_address(admin)
        self._epoch = 0
        self.events = events or EventEmitter()

    @property
    def admin(self) -> str:
        return self._admin

    def challenge(self) -> str:
        """Return the message the administrator must sign to obtain a capability."""
        return f"price-feed admin {self._admin} epoch {self._epoch}"

    def issue(self, signature: bytes | str) -> AdminCapability:
        """Issue a capability for a signature over :meth:`challenge`.

        :param signature: EIP-191 signature of the current challenge.
        :returns: A capability valid until the admin role is transferred.
        :raises UnauthorizedError: If the signer is not the administrator.
        """
        message = encode_defunct(text=self.challenge())
        try:
            signer = Account.recover_message(message, signature=signature)
        except Exception as e:  # malformed signature bytes
            raise UnauthorizedError(f"Invalid admin signature: {e}") from e

        if to_address(signer) != self._admin:
            logger.warning(f"Rejected capability request from {signer}")
            raise UnauthorizedError(f"{signer} is not the administrator")

        logger.debug(f"Issued admin capability to {signer} (epoch {self._epoch})")
        return AdminCapability(self, self._admin, self._epoch)

    def issue_for(self, account: LocalAccount) -> AdminCapability:
        """Sign the current challenge with a local account and issue a capability."""
        signed = account.sign_message(encode_defunct(text=self.challenge()))
        return self.issue(signed.signature)

    def require(self, capability: AdminCapability | None) -> None:
        """Check that a capability authorizes mutations on this controller.

        :raises UnauthorizedError: If the capability is missing, foreign or revoked.
        """
        if not isinstance(capability, AdminCapability) or capability._controller is not self:
            raise UnauthorizedError("Caller is not the administrator")
        if capability.epoch != self._epoch or capability.admin != self._admin:
            raise UnauthorizedError("Admin capability has been revoked")

    def transfer_admin(self, capability: AdminCapability, new_admin: str) -> None:
        """Hand the administrator role to a new address, revoking all capabilities.

        :param capability: Capability of the current administrator.
        :param new_admin: Address of the new administrator.
        """
        self.require(capability)
        new_admin = to_address(new_admin)
        previous = self._admin
        self._admin = new_admin
        self._epoch += 1
        self.events.emit("AdminTransferred", previous=previous, admin=new_admin)
