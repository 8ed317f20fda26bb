"""
mtledger Configuration

Settings are read from MTLEDGER_* environment variables and validated with
pydantic. Invalid settings raise ConfigurationError at load time.
"""

from __future__ import annotations

import logging
import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .contracts.abi import ERC1155Contract
from .contracts.erc1155 import ERC1155Ledger
from .contracts.supply_policy import OpenSupplyPolicy, RestrictedSupplyPolicy, SupplyPolicy
from .ledger_exceptions import ConfigurationError
from .logging_config import setup_logging

logger = logging.getLogger(__name__)

ENV_PREFIX = "MTLEDGER_"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LedgerConfig(BaseModel):
    """Validated ledger settings."""

    model_config = ConfigDict(frozen=True)

    environment: str = "development"
    log_level: str = "INFO"
    log_file: Optional[str] = None
    supply_policy: Literal["open", "restricted"] = "open"
    supply_admins: tuple[int, ...] = Field(default_factory=tuple)

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"log level must be one of {', '.join(VALID_LOG_LEVELS)}")
        return level

    @field_validator("supply_admins")
    @classmethod
    def _check_admins(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        if any(admin <= 0 for admin in value):
            raise ValueError("supply admins must be positive account ids")
        return value

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LedgerConfig":
        """
        Load settings from MTLEDGER_* variables.

        Raises:
            ConfigurationError: If a variable is malformed or the combination
                is invalid
        """
        env = os.environ if environ is None else environ

        raw_admins = env.get(f"{ENV_PREFIX}SUPPLY_ADMINS", "").strip()
        try:
            admins = tuple(int(part) for part in raw_admins.split(",") if part.strip())
        except ValueError as exc:
            raise ConfigurationError(
                f"{ENV_PREFIX}SUPPLY_ADMINS must be comma separated integers",
                details={"value": raw_admins},
            ) from exc

        values = {
            "environment": env.get(f"{ENV_PREFIX}ENVIRONMENT", "development").strip(),
            "log_level": env.get(f"{ENV_PREFIX}LOG_LEVEL", "INFO").strip(),
            "log_file": env.get(f"{ENV_PREFIX}LOG_FILE", "").strip() or None,
            "supply_policy": env.get(f"{ENV_PREFIX}SUPPLY_POLICY", "open").strip().lower(),
            "supply_admins": admins,
        }
        try:
            config = cls(**values)
        except ValidationError as exc:
            raise ConfigurationError(
                "Invalid ledger configuration",
                details={"errors": exc.errors(include_url=False)},
            ) from exc

        if config.supply_policy == "restricted" and not config.supply_admins:
            raise ConfigurationError(
                f"{ENV_PREFIX}SUPPLY_ADMINS is required when the supply policy is restricted"
            )
        return config


def build_supply_policy(config: LedgerConfig) -> SupplyPolicy:
    if config.supply_policy == "restricted":
        return RestrictedSupplyPolicy(config.supply_admins)
    return OpenSupplyPolicy()


def create_contract(
    config: Optional[LedgerConfig] = None, configure_logging: bool = False
) -> ERC1155Contract:
    """
    Build a ledger and its wire boundary from configuration.

    Args:
        config: Settings, loaded from the environment when omitted
        configure_logging: Install the JSON log handlers as well

    Returns:
        A contract wrapping a fresh, empty ledger
    """
    config = config or LedgerConfig.from_env()
    if configure_logging:
        setup_logging(
            name="mtledger",
            log_file=config.log_file,
            level=config.log_level,
            environment=config.environment,
        )

    ledger = ERC1155Ledger(supply_policy=build_supply_policy(config))
    logger.info(
        "Ledger created",
        extra={
            "event": "config.ledger_created",
            "environment": config.environment,
            "supply_policy": config.supply_policy,
        },
    )
    return ERC1155Contract(ledger)
