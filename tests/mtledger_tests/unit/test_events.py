"""
Tests for ERC1155 event records and listeners.
"""

import logging

import pytest

from mtledger.core.contracts.erc1155 import ERC1155Ledger
from mtledger.core.contracts.events import (
    APPROVAL_FOR_ALL_EVENT,
    TRANSFER_BATCH_EVENT,
    TRANSFER_SINGLE_EVENT,
    EventLog,
)
from mtledger.core.ledger_exceptions import InsufficientBalanceError


def test_emit_copies_sequences():
    log = EventLog()
    ids = [1, 2]
    event = log.emit("TransferBatch", 5, 0, 6, ids, [10, 20], data=b"\x07")
    ids.append(3)

    assert event.ids == [1, 2]
    assert event.data == (7,)
    assert event.topic == TRANSFER_BATCH_EVENT
    assert len(log) == 1


def test_listeners_receive_committed_events():
    ledger = ERC1155Ledger()
    seen = []
    ledger.event_log.subscribe(seen.append)

    ledger.mint(1, 2, 111, 10)
    ledger.set_approval_for_all(2, 3, 1)

    assert [event.topic for event in seen] == [TRANSFER_SINGLE_EVENT, APPROVAL_FOR_ALL_EVENT]


def test_rejected_operation_emits_nothing():
    ledger = ERC1155Ledger()
    seen = []
    ledger.event_log.subscribe(seen.append)
    with pytest.raises(InsufficientBalanceError):
        ledger.burn(1, 2, 111, 10)
    assert seen == []
    assert ledger.events == []


def test_of_type_filters():
    ledger = ERC1155Ledger()
    ledger.mint_batch(1, 2, [111, 222], [1, 2])
    ledger.safe_transfer_from(2, 2, 3, 111, 1)

    assert len(ledger.event_log.of_type("TransferBatch")) == 1
    (single,) = ledger.event_log.of_type("TransferSingle")
    assert (single.operator, single.from_address, single.to_address) == (2, 2, 3)


def test_failing_listener_does_not_undo_committed_transfer(caplog):
    ledger = ERC1155Ledger()
    ledger.mint(5, 5, 111, 1000)
    seen = []

    def broken(event):
        raise RuntimeError("listener down")

    ledger.event_log.subscribe(broken)
    ledger.event_log.subscribe(seen.append)

    with caplog.at_level(logging.ERROR, logger="mtledger.core.contracts.events"):
        assert ledger.safe_transfer_from(5, 5, 6, 111, 400) is True

    assert ledger.balance_of_batch([5, 6], [111, 111]) == [600, 400]
    assert ledger.events[-1].values == [400]
    # later listeners still run
    assert len(seen) == 1
    assert any(
        getattr(record, "event", None) == "erc1155.listener_failed" for record in caplog.records
    )
