"""
mtledger Core Module

Core functionality for the multi-token ledger including:
- Checked uint256 arithmetic
- Contract state (balances, approvals, interface discovery)
- Error hierarchy, configuration and structured logging
"""

__all__ = []
