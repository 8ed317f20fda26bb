"""
Tests for the ledger exception hierarchy.
"""

import pytest

from mtledger.core.ledger_exceptions import (
    ConfigurationError,
    InsufficientBalanceError,
    LedgerArithmeticError,
    LedgerAuthorizationError,
    LedgerError,
    LedgerValidationError,
    LengthMismatchError,
    MalformedCalldataError,
    OutOfRangeError,
    Uint256OverflowError,
    Uint256UnderflowError,
    UnauthorizedError,
    ZeroAddressError,
    get_error_context,
)


@pytest.mark.parametrize(
    "exc_class, parent",
    [
        (ZeroAddressError, LedgerValidationError),
        (OutOfRangeError, LedgerValidationError),
        (LengthMismatchError, LedgerValidationError),
        (MalformedCalldataError, LedgerValidationError),
        (Uint256OverflowError, LedgerArithmeticError),
        (InsufficientBalanceError, Uint256UnderflowError),
        (UnauthorizedError, LedgerAuthorizationError),
        (ConfigurationError, LedgerError),
    ],
)
def test_hierarchy(exc_class, parent):
    assert issubclass(exc_class, parent)
    assert issubclass(exc_class, LedgerError)


def test_error_attributes():
    exc = OutOfRangeError("limb too large", details={"limb": "low"})
    assert str(exc) == "limb too large"
    assert exc.message == "limb too large"
    assert exc.details == {"limb": "low"}
    assert exc.recoverable is False


def test_error_context_for_ledger_error():
    context = get_error_context(UnauthorizedError("no", details={"caller": 5}))
    assert context == {
        "error_type": "UnauthorizedError",
        "error_message": "no",
        "recoverable": False,
        "details": {"caller": 5},
    }


def test_error_context_for_plain_exception():
    context = get_error_context(ValueError("bad"))
    assert context == {"error_type": "ValueError", "error_message": "bad"}
