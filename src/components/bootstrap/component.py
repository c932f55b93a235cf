"""Bootstrap component implementation.

Provisions the default marketplace of a profile: reads its settings,
upserts the market row, makes the wallet exist and be active on the node,
imports the market keys into secure messaging and registers their
addresses.

A pass has no rollback. Every step is idempotent on its own, so re-running
the pass after a failure is the recovery path.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager, nullcontext
from uuid import UUID

from src.core.ports.node import ExternalNodeError, MessagingSubsystemError
from src.domain.entities import Market, MarketCreateRequest, MarketType, Wallet
from src.rules.models import BootstrapRules

from ._impl import (
    KeyImporter,
    MarketRecordStore,
    MessagingRegistrar,
    WalletProvisioner,
    resolve_market_settings,
)
from .models import (
    BootstrapResult,
    BootstrapState,
    ConfigurationMissingError,
    InternalInconsistencyError,
    KeyImportRejectedError,
    PassTrace,
    WalletNotFoundError,
)
from .ports import (
    MarketRepoPort,
    NodeRpcPort,
    ProfileLockPort,
    SettingRepoPort,
    SmsgPort,
    WalletRepoPort,
)

logger = logging.getLogger(__name__)

# Checked in order, so subclasses come before their bases
_ERROR_STATES: tuple[tuple[type[Exception], BootstrapState], ...] = (
    (ConfigurationMissingError, BootstrapState.CONFIG_MISSING),
    (KeyImportRejectedError, BootstrapState.KEY_IMPORT_REJECTED),
    (InternalInconsistencyError, BootstrapState.INTERNAL_INCONSISTENCY),
    (WalletNotFoundError, BootstrapState.INTERNAL_INCONSISTENCY),
    (MessagingSubsystemError, BootstrapState.MESSAGING_FAILURE),
    (ExternalNodeError, BootstrapState.EXTERNAL_NODE_FAILURE),
)


def failure_state(exc: BaseException) -> BootstrapState | None:
    """Terminal failure state for an error raised by a pass, None if unknown."""
    for error_type, state in _ERROR_STATES:
        if isinstance(exc, error_type):
            return state
    return None


def distinct_publish_pair(market: Market) -> tuple[str, str] | None:
    """The (publish_key, publish_address) pair when it needs its own import, else None."""
    if not market.publish_key or not market.publish_address:
        return None
    if market.publish_key == market.receive_key:
        return None
    return market.publish_key, market.publish_address


class BootstrapOrchestrator:
    """
    Sequences one reconciliation pass.

    Holds only the ports and rules, so one instance can serve passes for
    several profiles at once. Each pass records its states in its own
    PassTrace; completed passes return them in BootstrapResult.steps and
    failed passes raise the original exception (see failure_state).
    """

    def __init__(
        self,
        settings_repo: SettingRepoPort,
        wallet_repo: WalletRepoPort,
        market_repo: MarketRepoPort,
        node: NodeRpcPort,
        smsg: SmsgPort,
        rules: BootstrapRules | None = None,
    ) -> None:
        self._rules = rules or BootstrapRules()
        self._settings_repo = settings_repo
        self._markets = MarketRecordStore(market_repo)
        self._wallets = WalletProvisioner(wallet_repo, node)
        self._keys = KeyImporter(smsg, self._rules.on_key_import_rejected)
        self._registrar = MessagingRegistrar(smsg)

    def seed_default_market(self, profile_id: UUID) -> BootstrapResult:
        """Reconcile the default market of a profile from its settings."""
        trace = PassTrace()
        with _tracking_failures(trace):
            _enter(trace, BootstrapState.READING_CONFIG)
            settings = resolve_market_settings(
                profile_id, self._settings_repo, self._rules.setting_keys
            )

            _enter(trace, BootstrapState.RESOLVING_WALLET)
            wallet = self._wallets.ensure_local(profile_id, self._rules.default_wallet_name)

            # The default market publishes and receives on the same key pair
            request = MarketCreateRequest(
                wallet_id=wallet.id,
                profile_id=profile_id,
                name=settings.name,
                type=MarketType.MARKETPLACE,
                receive_key=settings.private_key,
                receive_address=settings.address,
                publish_key=settings.private_key,
                publish_address=settings.address,
            )
            result = self._reconcile(trace, request, wallet)
            logger.debug("seed_default_market(), market: %s", result.market.model_dump_json())
            return result

    def insert_or_update_market(self, request: MarketCreateRequest) -> BootstrapResult:
        """Reconcile an explicit market request against its existing wallet."""
        trace = PassTrace()
        with _tracking_failures(trace):
            _enter(trace, BootstrapState.RESOLVING_WALLET)
            wallet = self._wallets.get_local(request.wallet_id)
            return self._reconcile(trace, request, wallet)

    def _reconcile(
        self, trace: PassTrace, request: MarketCreateRequest, wallet: Wallet
    ) -> BootstrapResult:
        _enter(trace, BootstrapState.UPSERTING_MARKET)
        market, created = self._markets.upsert(request)

        _enter(trace, BootstrapState.PROVISIONING_NODE_WALLET)
        outcome = self._wallets.ensure_on_node(wallet.name)

        _enter(trace, BootstrapState.IMPORTING_RECEIVE_KEY)
        pairs = [
            (
                market.receive_address,
                self._keys.import_and_resolve(market.receive_key, market.receive_address),
            )
        ]

        publish = distinct_publish_pair(market)
        if publish is not None:
            publish_key, publish_address = publish
            _enter(trace, BootstrapState.IMPORTING_PUBLISH_KEY)
            pairs.append(
                (publish_address, self._keys.import_and_resolve(publish_key, publish_address))
            )

        _enter(trace, BootstrapState.REGISTERING_ADDRESSES)
        registered: list[str] = []
        rejected: list[str] = []
        for address, public_key in pairs:
            if public_key is None:
                rejected.append(address)
                continue
            self._registrar.register(address, public_key)
            registered.append(address)

        _enter(trace, BootstrapState.ACTIVATING_MESSAGING_WALLET)
        self._registrar.set_active_wallet(wallet.name)

        final = self._markets.find_one(market.id) or market
        _enter(trace, BootstrapState.DONE)
        logger.info(
            "Market %s reconciled for profile %s (wallet %s: %s)",
            final.name,
            final.profile_id,
            wallet.name,
            outcome.value,
        )
        return BootstrapResult(
            market=final,
            created=created,
            wallet_outcome=outcome,
            registered_addresses=tuple(registered),
            rejected_addresses=tuple(rejected),
            steps=tuple(trace.steps),
        )


def _enter(trace: PassTrace, state: BootstrapState) -> None:
    logger.debug("bootstrap state: %s", state.value)
    trace.steps.append(state)


@contextmanager
def _tracking_failures(trace: PassTrace) -> Iterator[None]:
    try:
        yield
    except Exception as exc:
        if failure_state(exc) is not None:
            logger.error(
                "Market bootstrap failed during %s: %s",
                trace.current.value if trace.current else "start",
                exc,
            )
        raise


def run_bootstrap(
    profile_id: UUID,
    orchestrator: BootstrapOrchestrator,
    locks: ProfileLockPort | None = None,
) -> BootstrapResult:
    """Execute the default market bootstrap for a profile.

    Args:
        profile_id: Profile whose settings seed the market.
        orchestrator: Orchestrator wired to the store, node and messaging ports.
        locks: Optional per-profile lock; concurrent passes for the same
            profile are serialized when given.

    Returns:
        BootstrapResult of the completed pass.
    """
    guard = locks.hold(profile_id) if locks is not None else nullcontext()
    with guard:
        return orchestrator.seed_default_market(profile_id)


def run(
    profile_id: UUID,
    orchestrator: BootstrapOrchestrator,
    locks: ProfileLockPort | None = None,
) -> BootstrapResult:
    """Main entry point for the bootstrap component."""
    return run_bootstrap(profile_id, orchestrator, locks)
