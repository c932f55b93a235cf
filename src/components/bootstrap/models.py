"""
Bootstrap component data models.

Frozen dataclasses for settings, wallet handles and pass results, the
reconciliation states, and the error types raised by a pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from src.domain.entities import Market, Wallet


class BootstrapState(str, Enum):
    """Steps of one reconciliation pass, plus its terminal failure states."""

    READING_CONFIG = "reading_config"
    RESOLVING_WALLET = "resolving_wallet"
    UPSERTING_MARKET = "upserting_market"
    PROVISIONING_NODE_WALLET = "provisioning_node_wallet"
    IMPORTING_RECEIVE_KEY = "importing_receive_key"
    IMPORTING_PUBLISH_KEY = "importing_publish_key"
    REGISTERING_ADDRESSES = "registering_addresses"
    ACTIVATING_MESSAGING_WALLET = "activating_messaging_wallet"
    DONE = "done"

    CONFIG_MISSING = "config_missing"
    EXTERNAL_NODE_FAILURE = "external_node_failure"
    MESSAGING_FAILURE = "messaging_failure"
    KEY_IMPORT_REJECTED = "key_import_rejected"
    INTERNAL_INCONSISTENCY = "internal_inconsistency"


class ProvisionOutcome(str, Enum):
    """What the node-side wallet step actually did."""

    CREATED = "created"
    ALREADY_EXISTED = "already_existed"
    LOADED = "loaded"
    ALREADY_LOADED = "already_loaded"
    REUSED = "reused"


@dataclass(frozen=True)
class MarketSettings:
    """The three profile settings needed to seed the default market."""

    name: str
    private_key: str
    address: str


@dataclass(frozen=True)
class WalletHandle:
    """Local wallet row plus the outcome of provisioning it on the node."""

    wallet: Wallet
    outcome: ProvisionOutcome


@dataclass
class PassTrace:
    """States entered by one reconciliation pass, in order. Owned by that pass."""

    steps: list[BootstrapState] = field(default_factory=list)

    @property
    def current(self) -> BootstrapState | None:
        return self.steps[-1] if self.steps else None


@dataclass(frozen=True)
class BootstrapResult:
    """Result of a completed reconciliation pass."""

    market: Market
    created: bool
    wallet_outcome: ProvisionOutcome
    registered_addresses: tuple[str, ...]
    rejected_addresses: tuple[str, ...]
    steps: tuple[BootstrapState, ...] = ()

    @property
    def state(self) -> BootstrapState | None:
        return self.steps[-1] if self.steps else None

    @property
    def fully_registered(self) -> bool:
        return not self.rejected_addresses


# --- Error Types ---


class BootstrapError(Exception):
    """Base bootstrap error."""

    pass


class ConfigurationMissingError(BootstrapError):
    """Required profile settings are absent."""

    def __init__(self, profile_id: UUID, missing_keys: list[str]) -> None:
        self.profile_id = profile_id
        self.missing_keys = missing_keys
        super().__init__(
            f"Default market settings not found for profile {profile_id}: "
            f"{', '.join(missing_keys)}"
        )


class WalletNotFoundError(BootstrapError):
    """A market request references a wallet that has no local row."""

    def __init__(self, wallet_id: UUID) -> None:
        self.wallet_id = wallet_id
        super().__init__(f"Wallet {wallet_id} not found")


class KeyImportRejectedError(BootstrapError):
    """The secure-messaging subsystem refused a private key import."""

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"Secure messaging rejected the private key for {address}")


class InternalInconsistencyError(BootstrapError):
    """An imported key's address is missing from the local key listing."""

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"No public key found for imported address {address}")
