"""
Tests for structured JSON logging of ledger operations.
"""

import io
import json

import pytest

from mtledger.core.contracts.erc1155 import ERC1155Ledger
from mtledger.core.ledger_exceptions import ZeroAddressError
from mtledger.core.logging_config import setup_logging


def _records(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


def test_setup_logging_emits_json(package_logger):
    stream = io.StringIO()
    logger = setup_logging(level="INFO", environment="test", stream=stream)
    logger.info("Ledger ready", extra={"event": "ledger.ready"})

    (record,) = _records(stream)
    assert record["message"] == "Ledger ready"
    assert record["event"] == "ledger.ready"
    assert record["environment"] == "test"
    assert record["service"] == "mtledger"
    assert record["level"] == "info"
    assert "timestamp" in record
    assert record["source"]["function"] == "test_setup_logging_emits_json"


def test_ledger_operations_are_logged(package_logger):
    stream = io.StringIO()
    setup_logging(level="DEBUG", stream=stream)

    ledger = ERC1155Ledger()
    ledger.mint(1001, 123, 111, 10)
    ledger.safe_transfer_from(123, 123, 456, 111, 4)

    events = [record.get("event") for record in _records(stream)]
    assert "erc1155.mint" in events
    assert "erc1155.transfer" in events


def test_rejections_logged_with_error_context(package_logger):
    stream = io.StringIO()
    setup_logging(level="DEBUG", stream=stream)

    with pytest.raises(ZeroAddressError):
        ERC1155Ledger().mint(1001, 0, 111, 10)

    (record,) = [r for r in _records(stream) if r.get("event") == "erc1155.mint.rejected"]
    assert record["error_type"] == "ZeroAddressError"
    assert record["recoverable"] is False


def test_info_level_hides_debug_events(package_logger):
    stream = io.StringIO()
    setup_logging(level="INFO", stream=stream)
    ERC1155Ledger().set_approval_for_all(1001, 1002, 1)
    assert _records(stream) == []


def test_repeated_setup_replaces_handlers(package_logger):
    setup_logging(stream=io.StringIO())
    logger = setup_logging(stream=io.StringIO())
    assert len(logger.handlers) == 1


def test_unknown_level_rejected(package_logger):
    with pytest.raises(ValueError):
        setup_logging(level="chatty")
