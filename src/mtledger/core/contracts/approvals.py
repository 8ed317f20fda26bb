"""
Operator approvals: (owner, operator) -> approved.

An owner can always act on its own balances, so self-approval is stored like
any other pair and changes nothing.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from ..ledger_exceptions import InvalidBooleanError

ApprovalKey = Tuple[int, int]


def require_boolean(value: object) -> bool:
    """Accept exactly 0 or 1 (bools included); raise InvalidBooleanError otherwise."""
    if not isinstance(value, int) or value not in (0, 1):
        raise InvalidBooleanError(
            f"ERC1155: approval must be 0 or 1, got {value!r}",
            details={"approved": value},
        )
    return bool(value)


class ApprovalRegistry:
    """Owner/operator approval flags, defaulting to not approved."""

    def __init__(self, approvals: Optional[Dict[ApprovalKey, bool]] = None) -> None:
        self._approvals: Dict[ApprovalKey, bool] = dict(approvals or {})

    def set_approval(self, owner: int, operator: int, approved: object) -> bool:
        """
        Store the approval flag for (owner, operator).

        Args:
            owner: Account granting or revoking the approval
            operator: Account being approved
            approved: 0 or 1

        Returns:
            The stored flag

        Raises:
            InvalidBooleanError: If approved is not 0 or 1
        """
        flag = require_boolean(approved)
        self._approvals[(owner, operator)] = flag
        return flag

    def is_approved(self, owner: int, operator: int) -> bool:
        return self._approvals.get((owner, operator), False)

    def snapshot(self) -> Dict[ApprovalKey, bool]:
        return dict(self._approvals)

    def restore(self, snapshot: Dict[ApprovalKey, bool]) -> None:
        self._approvals = dict(snapshot)

    def to_dict(self) -> Dict[str, Dict[str, bool]]:
        """Serialize as owner -> operator -> flag (string keys)."""
        result: Dict[str, Dict[str, bool]] = {}
        for (owner, operator), flag in sorted(self._approvals.items()):
            result.setdefault(str(owner), {})[str(operator)] = flag
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Dict[str, bool]]) -> "ApprovalRegistry":
        return cls(
            {
                (int(owner), int(operator)): require_boolean(int(flag))
                for owner, operators in data.items()
                for operator, flag in operators.items()
            }
        )
