"""
ERC165 interface discovery for the multi-token ledger.
"""

from __future__ import annotations

from typing import FrozenSet, Iterable

from ..ledger_exceptions import ConfigurationError

ERC165_INTERFACE_ID = 0x01FFC9A7
ERC1155_INTERFACE_ID = 0xD9B67A26
ERC1155_METADATA_URI_INTERFACE_ID = 0x0E89341C

# ERC165 reserves this id; supportsInterface must return false for it.
INVALID_INTERFACE_ID = 0xFFFFFFFF

DEFAULT_INTERFACES: FrozenSet[int] = frozenset(
    {
        ERC165_INTERFACE_ID,
        ERC1155_INTERFACE_ID,
        ERC1155_METADATA_URI_INTERFACE_ID,
    }
)


class InterfaceRegistry:
    """
    Static set of supported interface ids.

    Extra ids may be given at construction; the set is fixed afterwards.
    """

    def __init__(self, extra: Iterable[int] = ()) -> None:
        extra_ids = frozenset(extra)
        if INVALID_INTERFACE_ID in extra_ids:
            raise ConfigurationError(
                "interface id 0xffffffff cannot be registered",
                details={"interface_id": INVALID_INTERFACE_ID},
            )
        self._supported: FrozenSet[int] = DEFAULT_INTERFACES | extra_ids

    @property
    def supported(self) -> FrozenSet[int]:
        return self._supported

    def supports_interface(self, interface_id: int) -> bool:
        if interface_id == INVALID_INTERFACE_ID:
            return False
        return interface_id in self._supported
