"""
Shared fixtures for ledger tests.
"""

import logging

import pytest

from mtledger.core.contracts.abi import ERC1155Contract
from mtledger.core.contracts.erc1155 import ERC1155Ledger
from tests.mtledger_tests.ledger_constants import MINT_AMOUNTS, OWNER, TOKEN_IDS


@pytest.fixture
def ledger():
    """Fresh ledger with the open supply policy."""
    return ERC1155Ledger()


@pytest.fixture
def contract(ledger):
    """Wire boundary around the ledger fixture."""
    return ERC1155Contract(ledger)


@pytest.fixture
def funded_ledger(ledger):
    """Ledger where OWNER holds MINT_AMOUNTS of TOKEN_IDS."""
    ledger.mint_batch(OWNER, OWNER, TOKEN_IDS, MINT_AMOUNTS)
    return ledger


@pytest.fixture
def package_logger():
    """The mtledger package logger, with handlers and level reset afterwards."""
    logger = logging.getLogger("mtledger")
    level = logger.level
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)
