"""
ERC1155 notification events.

Events are appended to the ledger's event list only after an operation has
committed; a rejected operation emits nothing.
"""

from __future__ import annotations

import hashlib
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Sequence

logger = logging.getLogger(__name__)

# Event signatures
TRANSFER_SINGLE_EVENT = hashlib.sha3_256(
    b"TransferSingle(address,address,address,uint256,uint256)"
).digest()
TRANSFER_BATCH_EVENT = hashlib.sha3_256(
    b"TransferBatch(address,address,address,uint256[],uint256[])"
).digest()
APPROVAL_FOR_ALL_EVENT = hashlib.sha3_256(
    b"ApprovalForAll(address,address,bool)"
).digest()

EVENT_TOPICS = {
    "TransferSingle": TRANSFER_SINGLE_EVENT,
    "TransferBatch": TRANSFER_BATCH_EVENT,
    "ApprovalForAll": APPROVAL_FOR_ALL_EVENT,
}


@dataclass
class MultiTokenEvent:
    """ERC1155 event.

    For ApprovalForAll, from_address is the owner, to_address the operator
    and approved the new flag.
    """

    event_type: str
    operator: int
    from_address: int
    to_address: int
    ids: list[int]
    values: list[int]
    approved: bool | None = None
    data: tuple[int, ...] = ()
    timestamp: float = field(default_factory=time.time)

    @property
    def topic(self) -> bytes:
        return EVENT_TOPICS[self.event_type]


EventListener = Callable[[MultiTokenEvent], None]


class EventLog:
    """Append-only list of committed events with optional listeners."""

    def __init__(self) -> None:
        self.events: list[MultiTokenEvent] = []
        self._listeners: list[EventListener] = []

    def subscribe(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def emit(
        self,
        event_type: str,
        operator: int,
        from_address: int,
        to_address: int,
        ids: Sequence[int],
        values: Sequence[int],
        approved: bool | None = None,
        data: Sequence[int] = (),
    ) -> MultiTokenEvent:
        """
        Record an event and notify listeners.

        Called only after the operation has committed, so a failing listener
        is logged and skipped; it never undoes or fails the operation.
        """
        event = MultiTokenEvent(
            event_type=event_type,
            operator=operator,
            from_address=from_address,
            to_address=to_address,
            ids=list(ids),
            values=list(values),
            approved=approved,
            data=tuple(data),
        )
        self.events.append(event)
        for listener in self._listeners:
            try:
                listener(event)
            except Exception as exc:
                logger.error(
                    "Event listener failed: %s - %s",
                    type(exc).__name__,
                    str(exc),
                    extra={
                        "event": "erc1155.listener_failed",
                        "event_type": event_type,
                        "listener": getattr(listener, "__qualname__", repr(listener)),
                        "error_type": type(exc).__name__,
                    },
                )
        return event

    def of_type(self, event_type: str) -> list[MultiTokenEvent]:
        return [event for event in self.events if event.event_type == event_type]

    def __len__(self) -> int:
        return len(self.events)
