"""
Pluggable gate for mint and burn.

The ledger itself places no caller restriction on supply changes; whichever
policy is injected decides. OpenSupplyPolicy reproduces the unrestricted
behaviour, RestrictedSupplyPolicy limits supply changes to admin accounts.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol, Sequence

from ..ledger_exceptions import ConfigurationError, UnauthorizedError

logger = logging.getLogger(__name__)


class SupplyPolicy(Protocol):
    """Decides whether caller may mint to / burn from an account."""

    name: str

    def authorize_mint(
        self, caller: int, to: int, token_ids: Sequence[int], amounts: Sequence[int]
    ) -> None:
        ...

    def authorize_burn(
        self,
        caller: int,
        from_addr: int,
        token_ids: Sequence[int],
        amounts: Sequence[int],
    ) -> None:
        ...


class OpenSupplyPolicy:
    """Any caller may mint or burn."""

    name = "open"

    def authorize_mint(self, caller, to, token_ids, amounts) -> None:
        return None

    def authorize_burn(self, caller, from_addr, token_ids, amounts) -> None:
        return None


class RestrictedSupplyPolicy:
    """Only admin accounts may mint or burn."""

    name = "restricted"

    def __init__(self, admins: Iterable[int]) -> None:
        self.admins = frozenset(admins)
        if not self.admins:
            raise ConfigurationError("RestrictedSupplyPolicy requires at least one admin")

    def _require_admin(self, caller: int, action: str) -> None:
        if caller not in self.admins:
            logger.warning(
                "Supply change rejected for non-admin caller",
                extra={"event": "supply_policy.rejected", "action": action, "caller": caller},
            )
            raise UnauthorizedError(
                f"ERC1155: caller is not allowed to {action}",
                details={"caller": caller},
            )

    def authorize_mint(self, caller, to, token_ids, amounts) -> None:
        self._require_admin(caller, "mint")

    def authorize_burn(self, caller, from_addr, token_ids, amounts) -> None:
        self._require_admin(caller, "burn")
