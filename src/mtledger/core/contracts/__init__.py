"""
mtledger Contract Standards.

This module provides the multi-token ledger contract:
- ERC1155Ledger: balances, approvals and the mint/burn/transfer operations
- ERC1155Contract: felt calldata and JSON payload entry points
- Supply policies gating mint and burn
"""

from .abi import CalldataReader, ERC1155Contract
from .approvals import ApprovalRegistry
from .balance_table import BalanceTable
from .erc1155 import ERC1155Ledger
from .events import EventLog, MultiTokenEvent
from .interfaces import InterfaceRegistry
from .supply_policy import OpenSupplyPolicy, RestrictedSupplyPolicy, SupplyPolicy

__all__ = [
    # Ledger
    "ERC1155Ledger",
    "ERC1155Contract",
    "CalldataReader",
    # State
    "BalanceTable",
    "ApprovalRegistry",
    "InterfaceRegistry",
    # Events
    "EventLog",
    "MultiTokenEvent",
    # Supply Policies
    "SupplyPolicy",
    "OpenSupplyPolicy",
    "RestrictedSupplyPolicy",
]
