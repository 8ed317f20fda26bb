"""
mtledger - Multi-Token Ledger

Accounting and authorization core for ERC1155-style multi-token balances.

Main Components:
- Safe Math: 256-bit checked arithmetic over two-limb wire values
- Balance Table: (account, token id) -> balance with journaled rollback
- Approvals: owner/operator delegation registry
- Ledger: mint, burn, transfer and their batch variants
- ABI: felt calldata and JSON payload boundary
"""

__version__ = "0.1.0"
__author__ = "mtledger Development Team"

__all__ = []
