"""
Wire boundary for the ERC1155 ledger.

Two calling conventions reach the same ledger:

- call(): flat felt calldata as sent by account contracts. A uint256 takes
  two slots (low, high), arrays are length-prefixed, and uint256 arrays are
  a length followed by that many (low, high) pairs. The trailing data
  argument is a length-prefixed felt array.
- invoke(): JSON-style payloads checked by the pydantic schemas, with
  uint256 values as {"low", "high"} objects and uint256 arrays as parallel
  {"low": [...], "high": [...]} limb arrays.

This layer only decodes and encodes. Limb range checks, address checks and
authorization all happen inside ERC1155Ledger, in the ledger's order.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Sequence

from pydantic import ValidationError

from ..input_validation_schemas import (
    ENTRYPOINT_SCHEMAS,
    uint256_array_output,
    uint256_output,
)
from ..ledger_exceptions import MalformedCalldataError
from ..safe_math import Uint256
from .erc1155 import ERC1155Ledger

logger = logging.getLogger(__name__)

# Felts are elements of the STARK field.
FIELD_PRIME = 2**251 + 17 * 2**192 + 1


class CalldataReader:
    """Sequential reader over a flat felt array."""

    def __init__(self, calldata: Sequence[int]) -> None:
        self._calldata = list(calldata)
        self._pos = 0

    def felt(self) -> int:
        if self._pos >= len(self._calldata):
            raise MalformedCalldataError(
                "calldata: unexpected end of input", details={"position": self._pos}
            )
        value = self._calldata[self._pos]
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < FIELD_PRIME:
            raise MalformedCalldataError(
                f"calldata: slot {self._pos} is not a field element",
                details={"position": self._pos},
            )
        self._pos += 1
        return value

    def uint256(self) -> Uint256:
        low = self.felt()
        high = self.felt()
        return Uint256(low=low, high=high)

    def _length(self, slot_width: int) -> int:
        length = self.felt()
        if length * slot_width > self.remaining:
            raise MalformedCalldataError(
                "calldata: array length exceeds remaining input",
                details={"length": length, "remaining": self.remaining},
            )
        return length

    def felt_array(self) -> list[int]:
        return [self.felt() for _ in range(self._length(1))]

    def uint256_array(self) -> list[Uint256]:
        return [self.uint256() for _ in range(self._length(2))]

    @property
    def remaining(self) -> int:
        return len(self._calldata) - self._pos

    def finish(self) -> None:
        if self.remaining:
            raise MalformedCalldataError(
                "calldata: unexpected trailing input", details={"remaining": self.remaining}
            )


def encode_uint256(value: int) -> list[int]:
    return list(Uint256.from_int(value).as_tuple())


def encode_uint256_array(values: Sequence[int]) -> list[int]:
    encoded = [len(values)]
    for value in values:
        encoded.extend(encode_uint256(value))
    return encoded


class ERC1155Contract:
    """External entry points of the multi-token ledger."""

    def __init__(self, ledger: ERC1155Ledger | None = None) -> None:
        self.ledger = ledger or ERC1155Ledger()
        self._calldata_handlers: Dict[str, Callable[[int, CalldataReader], list[int]]] = {
            "supportsInterface": self._call_supports_interface,
            "balanceOf": self._call_balance_of,
            "balanceOfBatch": self._call_balance_of_batch,
            "isApprovedForAll": self._call_is_approved_for_all,
            "setApprovalForAll": self._call_set_approval_for_all,
            "safeTransferFrom": self._call_safe_transfer_from,
            "safeBatchTransferFrom": self._call_safe_batch_transfer_from,
            "mint": self._call_mint,
            "mint_batch": self._call_mint_batch,
            "burn": self._call_burn,
            "burn_batch": self._call_burn_batch,
        }

    # ==================== Felt Calldata ====================

    def call(self, caller: int, entrypoint: str, calldata: Sequence[int]) -> list[int]:
        """
        Execute an entry point with flat felt calldata.

        Args:
            caller: Authenticated caller account
            entrypoint: Entry point name, e.g. "safeTransferFrom"
            calldata: Flat felt arguments

        Returns:
            Flat felt results

        Raises:
            MalformedCalldataError: Unknown entry point or undecodable calldata
            LedgerError: Any rejection from the ledger
        """
        handler = self._calldata_handlers.get(entrypoint)
        if handler is None:
            raise MalformedCalldataError(
                f"calldata: unknown entry point {entrypoint!r}",
                details={"entrypoint": entrypoint},
            )
        logger.debug(
            "ERC1155 call",
            extra={"event": "erc1155.call", "entrypoint": entrypoint, "caller": caller},
        )
        return handler(caller, CalldataReader(calldata))

    def _call_supports_interface(self, caller: int, reader: CalldataReader) -> list[int]:
        interface_id = reader.felt()
        reader.finish()
        return [int(self.ledger.supports_interface(interface_id))]

    def _call_balance_of(self, caller: int, reader: CalldataReader) -> list[int]:
        account = reader.felt()
        token_id = reader.uint256()
        reader.finish()
        return encode_uint256(self.ledger.balance_of(account, token_id))

    def _call_balance_of_batch(self, caller: int, reader: CalldataReader) -> list[int]:
        accounts = reader.felt_array()
        token_ids = reader.uint256_array()
        reader.finish()
        return encode_uint256_array(self.ledger.balance_of_batch(accounts, token_ids))

    def _call_is_approved_for_all(self, caller: int, reader: CalldataReader) -> list[int]:
        owner = reader.felt()
        operator = reader.felt()
        reader.finish()
        return [int(self.ledger.is_approved_for_all(owner, operator))]

    def _call_set_approval_for_all(self, caller: int, reader: CalldataReader) -> list[int]:
        operator = reader.felt()
        approved = reader.felt()
        reader.finish()
        self.ledger.set_approval_for_all(caller, operator, approved)
        return []

    def _call_safe_transfer_from(self, caller: int, reader: CalldataReader) -> list[int]:
        from_addr = reader.felt()
        to_addr = reader.felt()
        token_id = reader.uint256()
        amount = reader.uint256()
        data = reader.felt_array()
        reader.finish()
        self.ledger.safe_transfer_from(caller, from_addr, to_addr, token_id, amount, data)
        return []

    def _call_safe_batch_transfer_from(self, caller: int, reader: CalldataReader) -> list[int]:
        from_addr = reader.felt()
        to_addr = reader.felt()
        token_ids = reader.uint256_array()
        amounts = reader.uint256_array()
        data = reader.felt_array()
        reader.finish()
        self.ledger.safe_batch_transfer_from(
            caller, from_addr, to_addr, token_ids, amounts, data
        )
        return []

    def _call_mint(self, caller: int, reader: CalldataReader) -> list[int]:
        to = reader.felt()
        token_id = reader.uint256()
        amount = reader.uint256()
        data = reader.felt_array()
        reader.finish()
        self.ledger.mint(caller, to, token_id, amount, data)
        return []

    def _call_mint_batch(self, caller: int, reader: CalldataReader) -> list[int]:
        to = reader.felt()
        token_ids = reader.uint256_array()
        amounts = reader.uint256_array()
        data = reader.felt_array()
        reader.finish()
        self.ledger.mint_batch(caller, to, token_ids, amounts, data)
        return []

    def _call_burn(self, caller: int, reader: CalldataReader) -> list[int]:
        from_addr = reader.felt()
        token_id = reader.uint256()
        amount = reader.uint256()
        reader.finish()
        self.ledger.burn(caller, from_addr, token_id, amount)
        return []

    def _call_burn_batch(self, caller: int, reader: CalldataReader) -> list[int]:
        from_addr = reader.felt()
        token_ids = reader.uint256_array()
        amounts = reader.uint256_array()
        reader.finish()
        self.ledger.burn_batch(caller, from_addr, token_ids, amounts)
        return []

    # ==================== JSON Payloads ====================

    def invoke(self, caller: int, entrypoint: str, payload: Dict[str, Any]) -> Any:
        """
        Execute an entry point with a JSON-style payload.

        Returns:
            {"low", "high"} for balances, {"low": [...], "high": [...]} for
            batch balances, a bool for queries, {"success": True} for
            state-changing entry points
        """
        schema = ENTRYPOINT_SCHEMAS.get(entrypoint)
        if schema is None:
            raise MalformedCalldataError(
                f"payload: unknown entry point {entrypoint!r}",
                details={"entrypoint": entrypoint},
            )
        try:
            request = schema.model_validate(payload)
        except ValidationError as exc:
            raise MalformedCalldataError(
                f"payload: invalid arguments for {entrypoint}",
                details={"errors": exc.errors(include_url=False)},
            ) from exc

        ledger = self.ledger
        if entrypoint == "supportsInterface":
            return ledger.supports_interface(request.interface_id)
        if entrypoint == "balanceOf":
            return uint256_output(ledger.balance_of(request.account, request.id.to_uint256()))
        if entrypoint == "balanceOfBatch":
            balances = ledger.balance_of_batch(request.accounts, request.ids.to_uint256_list())
            return uint256_array_output(balances)
        if entrypoint == "isApprovedForAll":
            return ledger.is_approved_for_all(request.owner, request.operator)
        if entrypoint == "setApprovalForAll":
            ledger.set_approval_for_all(caller, request.operator, request.approved)
        elif entrypoint == "safeTransferFrom":
            ledger.safe_transfer_from(
                caller,
                request.from_,
                request.to,
                request.id.to_uint256(),
                request.amount.to_uint256(),
                request.data,
            )
        elif entrypoint == "safeBatchTransferFrom":
            ledger.safe_batch_transfer_from(
                caller,
                request.from_,
                request.to,
                request.ids.to_uint256_list(),
                request.amounts.to_uint256_list(),
                request.data,
            )
        elif entrypoint == "mint":
            ledger.mint(
                caller, request.to, request.id.to_uint256(), request.amount.to_uint256(), request.data
            )
        elif entrypoint == "mint_batch":
            ledger.mint_batch(
                caller,
                request.to,
                request.ids.to_uint256_list(),
                request.amounts.to_uint256_list(),
                request.data,
            )
        elif entrypoint == "burn":
            ledger.burn(caller, request.from_, request.id.to_uint256(), request.amount.to_uint256())
        elif entrypoint == "burn_batch":
            ledger.burn_batch(
                caller,
                request.from_,
                request.ids.to_uint256_list(),
                request.amounts.to_uint256_list(),
            )
        return {"success": True}
