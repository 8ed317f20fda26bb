"""
ERC1155 Multi-Token Ledger.

State-transition core of the multi-token ledger, compatible with the
ERC1155 standard (EIP-1155) accounting rules:
- Many token ids per owner, fungible balances per id
- Single and batch mint, burn and transfer
- Operator approvals
- ERC165 interface discovery

Security features:
- Checked uint256 arithmetic (no wraparound)
- Zero address checks on every balance-affecting operation
- Batch operation atomicity: validation before mutation, and a balance
  journal that rolls back partially applied batches
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Sequence, Union

from ..ledger_exceptions import (
    InsufficientBalanceError,
    InvalidAccountError,
    InvalidDataError,
    LedgerError,
    LengthMismatchError,
    SupplyMismatchError,
    UnauthorizedError,
    ZeroAddressError,
    get_error_context,
)
from ..safe_math import UintLike, validate
from .approvals import ApprovalRegistry
from .balance_table import ZERO_ACCOUNT, BalanceTable
from .events import EventLog, MultiTokenEvent
from .interfaces import InterfaceRegistry
from .supply_policy import OpenSupplyPolicy, SupplyPolicy

logger = logging.getLogger(__name__)

DataPayload = Union[bytes, Sequence[int]]


@dataclass
class ERC1155Ledger:
    """
    Multi-token ledger over an injected balance table and approval registry.

    Every state-changing method takes the authenticated caller first. A
    method either commits completely or raises a LedgerError with balances,
    approvals and supply untouched.
    """

    # State
    balances: BalanceTable = field(default_factory=BalanceTable)
    approvals: ApprovalRegistry = field(default_factory=ApprovalRegistry)

    # Minted minus burned, per token id
    supply: Dict[int, int] = field(default_factory=dict)

    # Collaborators
    interfaces: InterfaceRegistry = field(default_factory=InterfaceRegistry)
    supply_policy: SupplyPolicy = field(default_factory=OpenSupplyPolicy)
    event_log: EventLog = field(default_factory=EventLog)

    # ==================== View Functions ====================

    def balance_of(self, account: int, token_id: UintLike) -> int:
        """
        Get balance of a specific token for an account.

        Args:
            account: Account identifier (non-zero)
            token_id: Token ID

        Returns:
            Token balance
        """
        with self._operation("balance_of", account=account):
            account = self._require_account(account, "balance query for")
            return self.balances.get(account, validate(token_id))

    def balance_of_batch(
        self, accounts: Sequence[int], token_ids: Sequence[UintLike]
    ) -> list[int]:
        """
        Get balances for multiple account/token pairs.

        Args:
            accounts: List of account identifiers
            token_ids: List of token IDs

        Returns:
            List of balances
        """
        with self._operation("balance_of_batch"):
            self._require_same_length(accounts, token_ids, "accounts and ids")
            checked = [self._require_account(a, "balance query for") for a in accounts]
            ids = [validate(token_id) for token_id in token_ids]
            return self.balances.get_batch(checked, ids)

    def is_approved_for_all(self, owner: int, operator: int) -> bool:
        """
        Check if operator is approved for all tokens of owner.

        Args:
            owner: Token owner
            operator: Operator account

        Returns:
            True if approved
        """
        return self.approvals.is_approved(
            self._coerce_account(owner), self._coerce_account(operator)
        )

    def supports_interface(self, interface_id: int) -> bool:
        """ERC165 supportsInterface."""
        return self.interfaces.supports_interface(interface_id)

    def total_supply(self, token_id: UintLike) -> int:
        """Minted minus burned for a token."""
        return self.supply.get(validate(token_id), 0)

    def verify_conservation(self, token_id: UintLike) -> bool:
        """True if the tracked supply equals the sum of all balances of token_id."""
        tid = validate(token_id)
        return self.supply.get(tid, 0) == self.balances.total_supply(tid)

    @property
    def events(self) -> list[MultiTokenEvent]:
        return self.event_log.events

    # ==================== State-Changing Functions ====================

    def set_approval_for_all(self, caller: int, operator: int, approved: object) -> bool:
        """
        Set operator approval for all of the caller's tokens.

        Args:
            caller: Token owner
            operator: Operator account
            approved: 0 or 1

        Returns:
            True if successful
        """
        with self._operation("set_approval_for_all", caller=caller, operator=operator):
            caller_id = self._coerce_account(caller)
            operator_id = self._coerce_account(operator)
            flag = self.approvals.set_approval(caller_id, operator_id, approved)

        self.event_log.emit(
            "ApprovalForAll",
            operator=caller_id,
            from_address=caller_id,
            to_address=operator_id,
            ids=[],
            values=[],
            approved=flag,
        )
        logger.debug(
            "ERC1155 approval set",
            extra={
                "event": "erc1155.approval",
                "owner": caller_id,
                "operator": operator_id,
                "approved": flag,
            },
        )
        return True

    def safe_transfer_from(
        self,
        caller: int,
        from_addr: int,
        to_addr: int,
        token_id: UintLike,
        amount: UintLike,
        data: DataPayload = (),
    ) -> bool:
        """
        Transfer tokens from one account to another.

        Args:
            caller: Transaction sender
            from_addr: Token source
            to_addr: Token destination
            token_id: Token ID
            amount: Amount to transfer
            data: Opaque payload, recorded on the event

        Returns:
            True if successful
        """
        with self._operation("transfer", caller=caller):
            from_id = self._require_account(from_addr, "transfer from")
            to_id = self._require_account(to_addr, "transfer to")
            caller_id = self._require_owner_or_approved(caller, from_id)
            tid = validate(token_id)
            value = validate(amount)
            payload = self._normalize_data(data)

            from_balance = self.balances.get(from_id, tid)
            if value > from_balance:
                raise InsufficientBalanceError(
                    f"ERC1155: insufficient balance for transfer "
                    f"({value} > {from_balance})",
                    details={"token_id": tid},
                )

            # Credit may still overflow; the journal undoes the debit.
            with self.balances.journal():
                self.balances.debit(from_id, tid, value)
                self.balances.credit(to_id, tid, value)

        self.event_log.emit(
            "TransferSingle",
            operator=caller_id,
            from_address=from_id,
            to_address=to_id,
            ids=[tid],
            values=[value],
            data=payload,
        )
        logger.debug(
            "ERC1155 transfer",
            extra={
                "event": "erc1155.transfer",
                "token_id": tid,
                "amount": value,
                "from": from_id,
                "to": to_id,
            },
        )
        return True

    def safe_batch_transfer_from(
        self,
        caller: int,
        from_addr: int,
        to_addr: int,
        token_ids: Sequence[UintLike],
        amounts: Sequence[UintLike],
        data: DataPayload = (),
    ) -> bool:
        """
        Batch transfer multiple token types.

        Either every (id, amount) pair moves or none does.

        Args:
            caller: Transaction sender
            from_addr: Token source
            to_addr: Token destination
            token_ids: List of token IDs
            amounts: List of amounts
            data: Opaque payload, recorded on the event

        Returns:
            True if successful
        """
        with self._operation("batch_transfer", caller=caller):
            from_id = self._require_account(from_addr, "transfer from")
            to_id = self._require_account(to_addr, "transfer to")
            caller_id = self._require_owner_or_approved(caller, from_id)
            self._require_same_length(token_ids, amounts, "ids and amounts")
            ids, values = self._validate_batch(token_ids, amounts)
            payload = self._normalize_data(data)

            with self.balances.journal():
                for tid, value in zip(ids, values):
                    self.balances.debit(from_id, tid, value)
                    self.balances.credit(to_id, tid, value)

        self.event_log.emit(
            "TransferBatch",
            operator=caller_id,
            from_address=from_id,
            to_address=to_id,
            ids=ids,
            values=values,
            data=payload,
        )
        logger.debug(
            "ERC1155 batch transfer",
            extra={
                "event": "erc1155.batch_transfer",
                "count": len(ids),
                "from": from_id,
                "to": to_id,
            },
        )
        return True

    # ==================== Minting & Burning ====================

    def mint(
        self,
        caller: int,
        to: int,
        token_id: UintLike,
        amount: UintLike,
        data: DataPayload = (),
    ) -> bool:
        """
        Mint tokens.

        Args:
            caller: Checked against the supply policy
            to: Recipient account
            token_id: Token ID
            amount: Amount to mint
            data: Opaque payload, recorded on the event

        Returns:
            True if successful
        """
        with self._operation("mint", caller=caller):
            to_id = self._require_account(to, "mint to")
            tid = validate(token_id)
            value = validate(amount)
            payload = self._normalize_data(data)
            caller_id = self._coerce_account(caller)
            self.supply_policy.authorize_mint(caller_id, to_id, [tid], [value])

            with self.balances.journal():
                self.balances.credit(to_id, tid, value)

        self._adjust_supply([tid], [value], sign=1)
        self.event_log.emit(
            "TransferSingle",
            operator=caller_id,
            from_address=ZERO_ACCOUNT,
            to_address=to_id,
            ids=[tid],
            values=[value],
            data=payload,
        )
        logger.info(
            "ERC1155 mint",
            extra={"event": "erc1155.mint", "token_id": tid, "amount": value, "to": to_id},
        )
        return True

    def mint_batch(
        self,
        caller: int,
        to: int,
        token_ids: Sequence[UintLike],
        amounts: Sequence[UintLike],
        data: DataPayload = (),
    ) -> bool:
        """
        Batch mint multiple token types.

        Args:
            caller: Checked against the supply policy
            to: Recipient account
            token_ids: List of token IDs
            amounts: List of amounts
            data: Opaque payload, recorded on the event

        Returns:
            True if successful
        """
        with self._operation("mint_batch", caller=caller):
            self._require_same_length(token_ids, amounts, "ids and amounts")
            to_id = self._require_account(to, "mint to")
            ids, values = self._validate_batch(token_ids, amounts)
            payload = self._normalize_data(data)
            caller_id = self._coerce_account(caller)
            self.supply_policy.authorize_mint(caller_id, to_id, ids, values)

            with self.balances.journal():
                for tid, value in zip(ids, values):
                    self.balances.credit(to_id, tid, value)

        self._adjust_supply(ids, values, sign=1)
        self.event_log.emit(
            "TransferBatch",
            operator=caller_id,
            from_address=ZERO_ACCOUNT,
            to_address=to_id,
            ids=ids,
            values=values,
            data=payload,
        )
        logger.info(
            "ERC1155 batch mint",
            extra={"event": "erc1155.mint_batch", "count": len(ids), "to": to_id},
        )
        return True

    def burn(
        self, caller: int, from_addr: int, token_id: UintLike, amount: UintLike
    ) -> bool:
        """
        Burn tokens.

        Args:
            caller: Checked against the supply policy
            from_addr: Token holder
            token_id: Token ID
            amount: Amount to burn

        Returns:
            True if successful
        """
        with self._operation("burn", caller=caller):
            from_id = self._require_account(from_addr, "burn from")
            tid = validate(token_id)
            value = validate(amount)
            caller_id = self._coerce_account(caller)
            self.supply_policy.authorize_burn(caller_id, from_id, [tid], [value])

            with self.balances.journal():
                self.balances.debit(from_id, tid, value)

        self._adjust_supply([tid], [value], sign=-1)
        self.event_log.emit(
            "TransferSingle",
            operator=caller_id,
            from_address=from_id,
            to_address=ZERO_ACCOUNT,
            ids=[tid],
            values=[value],
        )
        logger.info(
            "ERC1155 burn",
            extra={"event": "erc1155.burn", "token_id": tid, "amount": value, "from": from_id},
        )
        return True

    def burn_batch(
        self,
        caller: int,
        from_addr: int,
        token_ids: Sequence[UintLike],
        amounts: Sequence[UintLike],
    ) -> bool:
        """
        Batch burn multiple token types.

        Args:
            caller: Checked against the supply policy
            from_addr: Token holder
            token_ids: List of token IDs
            amounts: List of amounts

        Returns:
            True if successful
        """
        with self._operation("burn_batch", caller=caller):
            self._require_same_length(token_ids, amounts, "ids and amounts")
            from_id = self._require_account(from_addr, "burn from")
            ids, values = self._validate_batch(token_ids, amounts)
            caller_id = self._coerce_account(caller)
            self.supply_policy.authorize_burn(caller_id, from_id, ids, values)

            with self.balances.journal():
                for tid, value in zip(ids, values):
                    self.balances.debit(from_id, tid, value)

        self._adjust_supply(ids, values, sign=-1)
        self.event_log.emit(
            "TransferBatch",
            operator=caller_id,
            from_address=from_id,
            to_address=ZERO_ACCOUNT,
            ids=ids,
            values=values,
        )
        logger.info(
            "ERC1155 batch burn",
            extra={"event": "erc1155.burn_batch", "count": len(ids), "from": from_id},
        )
        return True

    # ==================== Helpers ====================

    @contextmanager
    def _operation(self, name: str, **context: Any) -> Iterator[None]:
        """Log rejected operations with their error context, then re-raise."""
        try:
            yield
        except LedgerError as exc:
            logger.debug(
                "ERC1155 %s rejected: %s",
                name,
                exc.message,
                extra={"event": f"erc1155.{name}.rejected", **context, **get_error_context(exc)},
            )
            raise

    @staticmethod
    def _coerce_account(account: object) -> int:
        """Require a non-negative int account identifier."""
        if isinstance(account, bool) or not isinstance(account, int) or account < 0:
            raise InvalidAccountError(
                f"ERC1155: invalid account identifier {account!r}",
                details={"account": account},
            )
        return account

    def _require_account(self, account: object, action: str) -> int:
        """Require a valid, non-zero account."""
        account_id = self._coerce_account(account)
        if account_id == ZERO_ACCOUNT:
            raise ZeroAddressError(f"ERC1155: {action} the zero address")
        return account_id

    def _require_owner_or_approved(self, caller: object, owner: int) -> int:
        caller_id = self._coerce_account(caller)
        if caller_id != owner and not self.approvals.is_approved(owner, caller_id):
            raise UnauthorizedError(
                "ERC1155: caller is not owner nor approved",
                details={"caller": caller_id, "owner": owner},
            )
        return caller_id

    @staticmethod
    def _require_same_length(left: Sequence[Any], right: Sequence[Any], what: str) -> None:
        if len(left) != len(right):
            raise LengthMismatchError(
                f"ERC1155: {what} length mismatch",
                details={"left": len(left), "right": len(right)},
            )

    @staticmethod
    def _validate_batch(
        token_ids: Sequence[UintLike], amounts: Sequence[UintLike]
    ) -> tuple[list[int], list[int]]:
        """Range-check the whole batch before any element is applied."""
        ids = [validate(token_id) for token_id in token_ids]
        values = [validate(amount) for amount in amounts]
        return ids, values

    def _adjust_supply(self, ids: Sequence[int], values: Sequence[int], sign: int) -> None:
        for tid, value in zip(ids, values):
            self.supply[tid] = self.supply.get(tid, 0) + sign * value

    @staticmethod
    def _normalize_data(data: object) -> tuple[int, ...]:
        """Return the data payload as a tuple of non-negative ints."""
        if isinstance(data, (bytes, bytearray)):
            return tuple(data)
        if isinstance(data, (list, tuple)) and all(
            isinstance(item, int) and not isinstance(item, bool) and item >= 0
            for item in data
        ):
            return tuple(data)
        raise InvalidDataError(
            "ERC1155: data must be bytes or a sequence of non-negative ints",
            details={"data_type": type(data).__name__},
        )

    # ==================== Snapshots & Serialization ====================

    def snapshot(self) -> Dict[str, Any]:
        """Copy of balances, approvals and supply for later restore()."""
        return {
            "balances": self.balances.snapshot(),
            "approvals": self.approvals.snapshot(),
            "supply": dict(self.supply),
        }

    def restore(self, snapshot: Dict[str, Any]) -> None:
        """Restore state captured by snapshot(). Events are not rewound."""
        self.balances.restore(snapshot["balances"])
        self.approvals.restore(snapshot["approvals"])
        self.supply = dict(snapshot["supply"])

    def to_dict(self) -> dict:
        """Serialize state to dictionary."""
        return {
            "balances": self.balances.to_dict(),
            "operator_approvals": self.approvals.to_dict(),
            "total_supply": {str(k): v for k, v in sorted(self.supply.items())},
            "supported_interfaces": sorted(self.interfaces.supported),
        }

    @classmethod
    def from_dict(
        cls, data: dict, supply_policy: SupplyPolicy | None = None
    ) -> "ERC1155Ledger":
        """
        Deserialize state from dictionary.

        Supply totals are recomputed from the balances when absent. When
        present they must match the balances for every token id.

        Raises:
            SupplyMismatchError: If a stored total disagrees with the balances
        """
        balances = BalanceTable.from_dict(data.get("balances", {}))
        token_ids = {int(k) for k in data.get("balances", {})}
        actual = {tid: balances.total_supply(tid) for tid in token_ids}

        if "total_supply" in data:
            supply = {int(k): int(v) for k, v in data["total_supply"].items()}
            for tid in sorted(set(supply) | token_ids):
                if supply.get(tid, 0) != actual.get(tid, 0):
                    raise SupplyMismatchError(
                        f"ERC1155: stored supply of token {tid} does not match balances",
                        details={
                            "token_id": tid,
                            "stored": supply.get(tid, 0),
                            "balances": actual.get(tid, 0),
                        },
                    )
        else:
            supply = actual

        return cls(
            balances=balances,
            approvals=ApprovalRegistry.from_dict(data.get("operator_approvals", {})),
            supply=supply,
            interfaces=InterfaceRegistry(data.get("supported_interfaces", ())),
            supply_policy=supply_policy or OpenSupplyPolicy(),
        )
