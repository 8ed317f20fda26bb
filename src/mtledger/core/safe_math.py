"""
Checked uint256 arithmetic for ledger balances.

Values cross the wire as two 128-bit limbs (low, high). Inside the ledger they
are plain Python ints, so the only job of this module is to range-check limbs
on the way in and to make add/sub fail loudly instead of leaving the
uint256 domain.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

from .ledger_exceptions import (
    LengthMismatchError,
    OutOfRangeError,
    Uint256OverflowError,
    Uint256UnderflowError,
)

LIMB_BITS = 128
LIMB_BOUND = 2**LIMB_BITS
MAX_UINT128 = LIMB_BOUND - 1
MAX_UINT256 = 2**256 - 1


@dataclass(frozen=True)
class Uint256:
    """A 256-bit unsigned value in its two-limb wire shape."""

    low: int
    high: int = 0

    @classmethod
    def from_int(cls, value: int) -> "Uint256":
        """Split an in-range integer into limbs."""
        if isinstance(value, bool) or not isinstance(value, int):
            raise OutOfRangeError(f"uint256: expected int, got {type(value).__name__}")
        if value < 0 or value > MAX_UINT256:
            raise OutOfRangeError(
                "uint256: value out of range", details={"value": value}
            )
        return cls(low=value & MAX_UINT128, high=value >> LIMB_BITS)

    def to_int(self) -> int:
        """Combine limbs, checking both are below 2**128."""
        return validate(self)

    def as_tuple(self) -> tuple[int, int]:
        return (self.low, self.high)


UintLike = Union[int, Uint256]


def _is_limb(limb: object) -> bool:
    return (
        isinstance(limb, int)
        and not isinstance(limb, bool)
        and 0 <= limb < LIMB_BOUND
    )


def validate(value: UintLike) -> int:
    """
    Range-check a uint256 and return it as an int.

    Args:
        value: A Uint256 (both limbs must be in [0, 2**128)) or an int
            (must be in [0, 2**256 - 1])

    Returns:
        The integer value

    Raises:
        OutOfRangeError: If a limb or the value is out of range
    """
    if isinstance(value, Uint256):
        if not _is_limb(value.low) or not _is_limb(value.high):
            raise OutOfRangeError(
                "uint256: limb out of range",
                details={"low": value.low, "high": value.high},
            )
        return value.low + (value.high << LIMB_BITS)

    if isinstance(value, bool) or not isinstance(value, int):
        raise OutOfRangeError(f"uint256: expected int, got {type(value).__name__}")
    if value < 0 or value > MAX_UINT256:
        raise OutOfRangeError("uint256: value out of range", details={"value": value})
    return value


def add(a: int, b: int) -> int:
    """Checked add: raise on results above MAX_UINT256."""
    total = a + b
    if total > MAX_UINT256:
        raise Uint256OverflowError(
            "uint256: addition overflow", details={"a": a, "b": b}
        )
    return total


def sub(a: int, b: int) -> int:
    """Checked sub: raise when b > a."""
    if b > a:
        raise Uint256UnderflowError(
            "uint256: subtraction underflow", details={"a": a, "b": b}
        )
    return a - b


def join_limbs(lows: Sequence[int], highs: Sequence[int]) -> list[Uint256]:
    """
    Pair parallel low/high limb arrays into Uint256 values.

    Limbs are not range-checked here; that happens in validate().

    Raises:
        LengthMismatchError: If the limb arrays differ in length
    """
    if len(lows) != len(highs):
        raise LengthMismatchError(
            "uint256: low and high limb arrays length mismatch",
            details={"low_len": len(lows), "high_len": len(highs)},
        )
    return [Uint256(low=low, high=high) for low, high in zip(lows, highs)]


def split_limbs(values: Sequence[int]) -> tuple[list[int], list[int]]:
    """Inverse of join_limbs for in-range integers."""
    limbs = [Uint256.from_int(v) for v in values]
    return [u.low for u in limbs], [u.high for u in limbs]
