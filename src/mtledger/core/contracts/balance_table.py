"""
Balance table for the multi-token ledger.

Maps (account, token_id) -> balance. Absent keys read as zero and entries
are never deleted: a balance that drops to zero stays in the table.

Writes go through credit/debit only, and only the ledger calls those.
The journal() context manager restores every key written inside it when
the block raises.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Sequence, Tuple

from ..ledger_exceptions import (
    InsufficientBalanceError,
    InvalidAccountError,
    LengthMismatchError,
    Uint256UnderflowError,
    ZeroAddressError,
)
from ..safe_math import add, sub, validate

logger = logging.getLogger(__name__)

ZERO_ACCOUNT = 0

BalanceKey = Tuple[int, int]

_MISSING = object()


class BalanceTable:
    """
    Persistent (account, token_id) -> balance mapping.

    Balances are ints in [0, 2**256 - 1]. Keys are created implicitly on the
    first credit.
    """

    def __init__(self, balances: Optional[Dict[BalanceKey, int]] = None) -> None:
        self._balances: Dict[BalanceKey, int] = dict(balances or {})
        self._journal: Optional[Dict[BalanceKey, Any]] = None
        self._lock = threading.RLock()

    # ==================== Reads ====================

    def get(self, account: int, token_id: int) -> int:
        """
        Get the balance of token_id held by account.

        Raises:
            ZeroAddressError: If account is the zero account
        """
        if account == ZERO_ACCOUNT:
            raise ZeroAddressError("ERC1155: balance query for the zero address")
        return self._balances.get((account, token_id), 0)

    def get_batch(
        self, accounts: Sequence[int], token_ids: Sequence[int]
    ) -> list[int]:
        """
        Element-wise get over paired arrays.

        Shape is checked before any account, so a malformed batch fails the
        same way regardless of its contents.
        """
        if len(accounts) != len(token_ids):
            raise LengthMismatchError(
                "ERC1155: accounts and ids length mismatch",
                details={"accounts": len(accounts), "ids": len(token_ids)},
            )
        if any(account == ZERO_ACCOUNT for account in accounts):
            raise ZeroAddressError("ERC1155: balance query for the zero address")
        return [
            self._balances.get((account, token_id), 0)
            for account, token_id in zip(accounts, token_ids)
        ]

    def contains(self, account: int, token_id: int) -> bool:
        """True if an entry exists, even a zero one."""
        return (account, token_id) in self._balances

    def total_supply(self, token_id: int) -> int:
        """Sum of all balances of token_id."""
        return sum(
            amount for (_, tid), amount in self._balances.items() if tid == token_id
        )

    def holders(self, token_id: int) -> Dict[int, int]:
        """account -> balance for every entry of token_id, in account order."""
        return {
            account: self._balances[(account, tid)]
            for account, tid in sorted(self._balances)
            if tid == token_id
        }

    def __len__(self) -> int:
        return len(self._balances)

    # ==================== Writes ====================

    def credit(self, account: int, token_id: int, amount: int) -> int:
        """Add amount to a balance; Uint256OverflowError propagates unchanged."""
        new_balance = add(self.get(account, token_id), amount)
        self._store(account, token_id, new_balance)
        return new_balance

    def debit(self, account: int, token_id: int, amount: int) -> int:
        """Subtract amount from a balance, reporting underflow as insufficient balance."""
        current = self.get(account, token_id)
        try:
            new_balance = sub(current, amount)
        except Uint256UnderflowError as exc:
            raise InsufficientBalanceError(
                f"ERC1155: insufficient balance ({amount} > {current})",
                details={"account": account, "token_id": token_id, **exc.details},
            ) from exc
        self._store(account, token_id, new_balance)
        return new_balance

    def _store(self, account: int, token_id: int, amount: int) -> None:
        key = (account, token_id)
        with self._lock:
            if self._journal is not None and key not in self._journal:
                self._journal[key] = self._balances.get(key, _MISSING)
            self._balances[key] = amount

    @contextmanager
    def journal(self) -> Iterator[None]:
        """
        Record prior values of keys written inside the block.

        If the block raises, those keys are put back (keys that did not exist
        are removed again) and the exception propagates. Nested journals join
        the outermost one.
        """
        with self._lock:
            if self._journal is not None:
                yield
                return

            self._journal = {}
            try:
                yield
            except BaseException:
                restored = len(self._journal)
                for key, previous in self._journal.items():
                    if previous is _MISSING:
                        self._balances.pop(key, None)
                    else:
                        self._balances[key] = previous
                logger.debug(
                    "Balance journal rolled back",
                    extra={"event": "balance_table.rollback", "keys": restored},
                )
                raise
            finally:
                self._journal = None

    # ==================== Snapshots & Serialization ====================

    def snapshot(self) -> Dict[BalanceKey, int]:
        """Copy of the full table."""
        with self._lock:
            return dict(self._balances)

    def restore(self, snapshot: Dict[BalanceKey, int]) -> None:
        """Replace the table with a snapshot taken by snapshot()."""
        with self._lock:
            self._balances = dict(snapshot)

    def snapshot_digest(self) -> str:
        """Deterministic hash of the table, zero entries included."""
        with self._lock:
            entries = [
                f"{account}:{token_id}:{amount}"
                for (account, token_id), amount in sorted(self._balances.items())
            ]
        payload = "|".join(entries)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        """Serialize as token_id -> account -> balance (string keys)."""
        result: Dict[str, Dict[str, int]] = {}
        for (account, token_id), amount in sorted(self._balances.items()):
            result.setdefault(str(token_id), {})[str(account)] = amount
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Dict[str, int]]) -> "BalanceTable":
        """Deserialize a table produced by to_dict()."""
        balances: Dict[BalanceKey, int] = {}
        for token_id, holders in data.items():
            for account, amount in holders.items():
                account_id = int(account)
                if account_id < 0:
                    raise InvalidAccountError(
                        f"ERC1155: invalid account identifier {account!r} in balance data",
                        details={"account": account},
                    )
                if account_id == ZERO_ACCOUNT:
                    raise ZeroAddressError("ERC1155: zero address in balance data")
                balances[(account_id, validate(int(token_id)))] = validate(int(amount))
        return cls(balances)
