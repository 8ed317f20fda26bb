"""
Ledger-specific exception hierarchy for mtledger.

Provides typed exceptions for every way a ledger operation can be rejected so
callers can distinguish bad input, arithmetic failures and authorization
failures without parsing messages.
"""

from __future__ import annotations
from typing import Optional, Any, Dict


class LedgerError(Exception):
    """Base exception for all ledger errors.

    Every ledger exception aborts the enclosing operation; state is left as it
    was before the call.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the operation can be retried as-is
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable


# ==================== Validation Errors ====================


class LedgerValidationError(LedgerError):
    """Raised when operation arguments fail validation before any mutation."""
    pass


class ZeroAddressError(LedgerValidationError):
    """Raised when an account argument that must be non-zero is zero."""
    pass


class InvalidAccountError(LedgerValidationError):
    """Raised when an account identifier is not a non-negative integer."""
    pass


class OutOfRangeError(LedgerValidationError):
    """Raised when a uint256 limb is outside [0, 2**128) or a value outside uint256."""
    pass


class InvalidBooleanError(LedgerValidationError):
    """Raised when an approval flag is not exactly 0 or 1."""
    pass


class LengthMismatchError(LedgerValidationError):
    """Raised when paired batch arrays differ in length."""
    pass


class MalformedCalldataError(LedgerValidationError):
    """Raised when calldata or a request payload cannot be decoded.

    Examples: truncated calldata, trailing slots, unknown entry point.
    """
    pass


class InvalidDataError(LedgerValidationError):
    """Raised when the opaque data payload is not bytes or a sequence of felts."""
    pass


class SupplyMismatchError(LedgerValidationError):
    """Raised when loaded supply totals disagree with the loaded balances."""
    pass


# ==================== Arithmetic Errors ====================


class LedgerArithmeticError(LedgerError):
    """Raised when checked uint256 arithmetic fails."""
    pass


class Uint256OverflowError(LedgerArithmeticError):
    """Raised when a credit would push a balance above 2**256 - 1."""
    pass


class Uint256UnderflowError(LedgerArithmeticError):
    """Raised when a subtraction would go below zero."""
    pass


class InsufficientBalanceError(Uint256UnderflowError):
    """Raised when a debit exceeds the current balance."""
    pass


# ==================== Authorization Errors ====================


class LedgerAuthorizationError(LedgerError):
    """Raised when the caller may not perform the operation."""
    pass


class UnauthorizedError(LedgerAuthorizationError):
    """Raised when the caller is neither the owner nor an approved operator."""
    pass


# ==================== Configuration Errors ====================


class ConfigurationError(LedgerError):
    """Raised when ledger configuration is invalid."""
    recoverable = False


# ==================== Utility Functions ====================


def get_error_context(exc: Exception) -> Dict[str, Any]:
    """Extract error context from an exception for logging.

    Args:
        exc: The exception to extract context from

    Returns:
        Dictionary containing error type, message, and any additional details
    """
    context: Dict[str, Any] = {
        "error_type": type(exc).__name__,
        "error_message": str(exc),
    }

    if isinstance(exc, LedgerError):
        context["recoverable"] = exc.recoverable
        if exc.details:
            context["details"] = exc.details

    return context
