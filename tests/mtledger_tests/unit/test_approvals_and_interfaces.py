"""
Unit tests for the operator approval registry and ERC165 interface discovery.
"""

import pytest

from mtledger.core.contracts.approvals import ApprovalRegistry, require_boolean
from mtledger.core.contracts.interfaces import INVALID_INTERFACE_ID, InterfaceRegistry
from mtledger.core.ledger_exceptions import ConfigurationError, InvalidBooleanError
from tests.mtledger_tests.ledger_constants import (
    SUPPORTED_INTERFACES,
    UNSUPPORTED_INTERFACES,
)


class TestApprovalRegistry:
    def test_default_not_approved(self):
        assert ApprovalRegistry().is_approved(1, 2) is False

    def test_set_and_revoke(self):
        registry = ApprovalRegistry()
        registry.set_approval(1, 2, 1)
        assert registry.is_approved(1, 2) is True
        assert registry.is_approved(2, 1) is False

        registry.set_approval(1, 2, 0)
        assert registry.is_approved(1, 2) is False

    def test_setting_same_value_twice(self):
        registry = ApprovalRegistry()
        registry.set_approval(1, 2, 1)
        snap = registry.snapshot()
        registry.set_approval(1, 2, 1)
        assert registry.snapshot() == snap

    def test_self_approval_allowed(self):
        registry = ApprovalRegistry()
        assert registry.set_approval(7, 7, True) is True
        assert registry.is_approved(7, 7) is True

    @pytest.mark.parametrize("value", [2, -1, "1", 1.0, None])
    def test_non_boolean_rejected(self, value):
        registry = ApprovalRegistry()
        with pytest.raises(InvalidBooleanError):
            registry.set_approval(1, 2, value)
        assert registry.snapshot() == {}

    def test_require_boolean_accepts_bools(self):
        assert require_boolean(True) is True
        assert require_boolean(False) is False

    def test_dict_roundtrip(self):
        registry = ApprovalRegistry()
        registry.set_approval(1, 2, 1)
        registry.set_approval(1, 3, 0)
        restored = ApprovalRegistry.from_dict(registry.to_dict())
        assert restored.snapshot() == registry.snapshot()


class TestInterfaceRegistry:
    def test_supported_interfaces(self):
        registry = InterfaceRegistry()
        for interface_id in SUPPORTED_INTERFACES:
            assert registry.supports_interface(interface_id) is True

    def test_unsupported_interfaces(self):
        registry = InterfaceRegistry()
        for interface_id in UNSUPPORTED_INTERFACES:
            assert registry.supports_interface(interface_id) is False

    def test_extra_interfaces(self):
        registry = InterfaceRegistry(extra=[0x12345678])
        assert registry.supports_interface(0x12345678) is True
        assert registry.supports_interface(INVALID_INTERFACE_ID) is False

    def test_reserved_id_cannot_be_registered(self):
        with pytest.raises(ConfigurationError):
            InterfaceRegistry(extra=[INVALID_INTERFACE_ID])
