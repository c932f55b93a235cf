"""
Market bootstrap building blocks.

Each class wraps one external subsystem and turns its existence-check
semantics into a single idempotent call:
- resolve_market_settings: profile settings -> MarketSettings (fails before side effects)
- MarketRecordStore: find-then-create-or-update of market rows
- WalletProvisioner: local wallet row + create/load/activate on the node
- KeyImporter: import a private key and resolve its public key
- MessagingRegistrar: bind addresses and select the messaging wallet

Key behaviors:
- "already exists" / "already loaded" node answers become ProvisionOutcome values
- A rejected key import either continues or aborts, per policy
- A successful import whose address is not listed locally is fatal
"""

from __future__ import annotations

import logging
from uuid import UUID

from src.core.ports.db import MarketRepoPort, SettingRepoPort, WalletRepoPort
from src.core.ports.node import (
    NodeRpcPort,
    SmsgPort,
    WalletAlreadyExistsError,
    WalletAlreadyLoadedError,
)
from src.domain.entities import Market, MarketCreateRequest, Wallet
from src.rules.models import KeyImportRejectPolicy, SettingKeysRules

from .models import (
    ConfigurationMissingError,
    InternalInconsistencyError,
    KeyImportRejectedError,
    MarketSettings,
    ProvisionOutcome,
    WalletHandle,
    WalletNotFoundError,
)

logger = logging.getLogger(__name__)


# --- Settings ---


def resolve_market_settings(
    profile_id: UUID,
    settings_repo: SettingRepoPort,
    keys: SettingKeysRules | None = None,
) -> MarketSettings:
    """
    Read the default market settings of a profile.

    Raises:
        ConfigurationMissingError: If any of the three settings is absent
    """
    keys = keys or SettingKeysRules()
    values = {s.key: s.value for s in settings_repo.find_all_by_profile_id(profile_id)}

    required = (keys.marketplace_name, keys.marketplace_private_key, keys.marketplace_address)
    missing = [key for key in required if key not in values]
    if missing:
        raise ConfigurationMissingError(profile_id, missing)

    return MarketSettings(
        name=values[keys.marketplace_name],
        private_key=values[keys.marketplace_private_key],
        address=values[keys.marketplace_address],
    )


# --- Market Records ---


class MarketRecordStore:
    """Create-or-update of market rows keyed by (profile_id, receive_address)."""

    def __init__(self, repo: MarketRepoPort) -> None:
        self._repo = repo

    def find_one(self, market_id: UUID) -> Market | None:
        return self._repo.find_one(market_id)

    def find_by_profile_and_address(self, profile_id: UUID, address: str) -> Market | None:
        return self._repo.find_by_profile_and_address(profile_id, address)

    def create(self, request: MarketCreateRequest) -> Market:
        return self._repo.create(request)

    def update(self, market_id: UUID, request: MarketCreateRequest) -> Market:
        return self._repo.update(market_id, request)

    def upsert(self, request: MarketCreateRequest) -> tuple[Market, bool]:
        """
        Write the desired state of a market.

        An existing row is overwritten with the full request, even when
        nothing changed.

        Returns:
            Tuple of (market, created)
        """
        found = self.find_by_profile_and_address(request.profile_id, request.receive_address)
        if found is not None:
            logger.debug("Found market %s, updating", found.id)
            return self.update(found.id, request), False

        logger.debug("No market for %s, creating", request.receive_address)
        market = self.create(request)
        logger.info("Created market %s (%s)", market.name, market.receive_address)
        return market, True


# --- Wallets ---


class WalletProvisioner:
    """Makes a named wallet exist locally and be loaded and active on the node."""

    def __init__(self, repo: WalletRepoPort, node: NodeRpcPort) -> None:
        self._repo = repo
        self._node = node

    def ensure(self, profile_id: UUID, name: str) -> WalletHandle:
        wallet = self.ensure_local(profile_id, name)
        return WalletHandle(wallet=wallet, outcome=self.ensure_on_node(name))

    def ensure_local(self, profile_id: UUID, name: str) -> Wallet:
        """Return the local wallet row, creating it on first use."""
        wallet = self._repo.find_by_profile_and_name(profile_id, name)
        if wallet is not None:
            return wallet
        logger.info("Creating local wallet row %s", name)
        return self._repo.create(Wallet(profile_id=profile_id, name=name))

    def get_local(self, wallet_id: UUID) -> Wallet:
        wallet = self._repo.find_one(wallet_id)
        if wallet is None:
            raise WalletNotFoundError(wallet_id)
        return wallet

    def ensure_on_node(self, name: str) -> ProvisionOutcome:
        """
        Create or load the wallet on the node, then make it active.

        Raises:
            ExternalNodeError: Any node failure other than already-exists/loaded
        """
        exists = self._node.wallet_exists(name)
        logger.debug("Wallet %s exists on node: %s", name, exists)

        if not exists:
            outcome = self._create_on_node(name)
        elif not self._node.wallet_loaded(name):
            outcome = self._load_on_node(name)
        else:
            outcome = ProvisionOutcome.REUSED

        # Activation is not persisted by the node, so it is asserted every pass
        self._node.set_active_wallet(name)
        return outcome

    def _create_on_node(self, name: str) -> ProvisionOutcome:
        try:
            created = self._node.create_and_load_wallet(name)
        except WalletAlreadyExistsError:
            logger.debug("Wallet %s already exists.", name)
            return ProvisionOutcome.ALREADY_EXISTED
        logger.debug("Created wallet %s", created)
        return ProvisionOutcome.CREATED

    def _load_on_node(self, name: str) -> ProvisionOutcome:
        try:
            self._node.load_wallet(name)
        except WalletAlreadyLoadedError:
            logger.debug("Wallet %s already loaded.", name)
            return ProvisionOutcome.ALREADY_LOADED
        return ProvisionOutcome.LOADED


# --- Keys ---

MARKET_KEY_LABEL = "default market"


class KeyImporter:
    """Imports a market private key into secure messaging and finds its public key."""

    def __init__(self, smsg: SmsgPort, on_rejected: KeyImportRejectPolicy = "continue") -> None:
        self._smsg = smsg
        self._on_rejected = on_rejected

    def import_and_resolve(self, private_key: str, address: str) -> str | None:
        """
        Returns:
            The public key for address, or None if the import was rejected
            under the "continue" policy

        Raises:
            KeyImportRejectedError: Import rejected under the "abort" policy
            InternalInconsistencyError: Import succeeded but address is not listed
        """
        if not self._smsg.smsg_import_priv_key(private_key, MARKET_KEY_LABEL):
            logger.error("Error while importing market private key for %s.", address)
            if self._on_rejected == "abort":
                raise KeyImportRejectedError(address)
            return None

        public_key = self._public_key_for(address)
        if public_key is None:
            raise InternalInconsistencyError(address)
        logger.debug("Market public key for %s: %s", address, public_key)
        return public_key

    def _public_key_for(self, address: str) -> str | None:
        for key in self._smsg.smsg_local_keys():
            if key.address == address:
                return key.public_key
        return None


# --- Secure Messaging ---


class MessagingRegistrar:
    def __init__(self, smsg: SmsgPort) -> None:
        self._smsg = smsg

    def register(self, address: str, public_key: str) -> None:
        self._smsg.smsg_add_address(address, public_key)

    def set_active_wallet(self, name: str) -> None:
        self._smsg.smsg_set_wallet(name)
