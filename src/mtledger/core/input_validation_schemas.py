from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from .safe_math import Uint256, join_limbs, split_limbs


class _Request(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class Uint256Input(_Request):
    low: StrictInt
    high: StrictInt

    def to_uint256(self) -> Uint256:
        return Uint256(low=self.low, high=self.high)

    @classmethod
    def from_int(cls, value: int) -> "Uint256Input":
        limbs = Uint256.from_int(value)
        return cls(low=limbs.low, high=limbs.high)


class Uint256ArrayInput(_Request):
    """Parallel limb arrays; lengths are checked when converted."""

    low: list[StrictInt]
    high: list[StrictInt]

    def to_uint256_list(self) -> list[Uint256]:
        return join_limbs(self.low, self.high)

    @classmethod
    def from_ints(cls, values: list[int]) -> "Uint256ArrayInput":
        lows, highs = split_limbs(values)
        return cls(low=lows, high=highs)


class SupportsInterfaceInput(_Request):
    interface_id: StrictInt


class BalanceOfInput(_Request):
    account: StrictInt
    id: Uint256Input


class BalanceOfBatchInput(_Request):
    accounts: list[StrictInt]
    ids: Uint256ArrayInput


class IsApprovedForAllInput(_Request):
    owner: StrictInt
    operator: StrictInt


class SetApprovalForAllInput(_Request):
    operator: StrictInt
    approved: StrictInt


class SafeTransferFromInput(_Request):
    from_: StrictInt = Field(alias="from")
    to: StrictInt
    id: Uint256Input
    amount: Uint256Input
    data: list[StrictInt] = Field(default_factory=list)


class SafeBatchTransferFromInput(_Request):
    from_: StrictInt = Field(alias="from")
    to: StrictInt
    ids: Uint256ArrayInput
    amounts: Uint256ArrayInput
    data: list[StrictInt] = Field(default_factory=list)


class MintInput(_Request):
    to: StrictInt
    id: Uint256Input
    amount: Uint256Input
    data: list[StrictInt] = Field(default_factory=list)


class MintBatchInput(_Request):
    to: StrictInt
    ids: Uint256ArrayInput
    amounts: Uint256ArrayInput
    data: list[StrictInt] = Field(default_factory=list)


class BurnInput(_Request):
    from_: StrictInt = Field(alias="from")
    id: Uint256Input
    amount: Uint256Input


class BurnBatchInput(_Request):
    from_: StrictInt = Field(alias="from")
    ids: Uint256ArrayInput
    amounts: Uint256ArrayInput


ENTRYPOINT_SCHEMAS: dict[str, type[_Request]] = {
    "supportsInterface": SupportsInterfaceInput,
    "balanceOf": BalanceOfInput,
    "balanceOfBatch": BalanceOfBatchInput,
    "isApprovedForAll": IsApprovedForAllInput,
    "setApprovalForAll": SetApprovalForAllInput,
    "safeTransferFrom": SafeTransferFromInput,
    "safeBatchTransferFrom": SafeBatchTransferFromInput,
    "mint": MintInput,
    "mint_batch": MintBatchInput,
    "burn": BurnInput,
    "burn_batch": BurnBatchInput,
}


def uint256_output(value: int) -> dict[str, Any]:
    return Uint256Input.from_int(value).model_dump()


def uint256_array_output(values: list[int]) -> dict[str, Any]:
    return Uint256ArrayInput.from_ints(values).model_dump()
