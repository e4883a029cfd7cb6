"""Notification events emitted by administrative operations.

Off-chain observers subscribe a callback; every event is also logged at INFO.

.. code-block:: python

    >>> emitter = EventEmitter()
    >>> seen = []
    >>> emitter.subscribe(seen.append)
    >>> emitter.emit("BaseAssetUpdated", base_asset="0x...")
    >>> seen[0].name
    'BaseAssetUpdated'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OracleEvent:
    """A single administrative notification.

    :ivar name: Event name (e.g. "AssetOracleUpdated").
    :ivar args: Event arguments.
    """

    name: str
    args: dict[str, Any] = field(default_factory=dict)


class EventEmitter:
    """Fan-out of :class:`OracleEvent` to subscribed listeners."""

    def __init__(self) -> None:
        self._listeners: list[Callable[[OracleEvent], None]] = []

    def subscribe(self, listener: Callable[[OracleEvent], None]) -> None:
        """Register a listener called synchronously for every emitted event."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[OracleEvent], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, name: str, **args: Any) -> OracleEvent:
        """Emit an event to the log and all listeners.

        :param name: Event name.
        :param args: Event arguments.
        :returns: The emitted event.
        """
        event = OracleEvent(name=name, args=args)
        logger.info(f"{name}: {args}")
        for listener in list(self._listeners):
            listener(event)
        return event
