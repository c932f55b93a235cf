"""
Integration tests for the bootstrap pass over the SQLite store.

Node and secure messaging are faked; settings, wallets and markets live in
a migrated temporary database.
"""

from __future__ import annotations

import threading

import pytest

from src.adapters.sqlite.repos import SQLiteMarketRepo, SQLiteSettingRepo, SQLiteWalletRepo
from src.app_shell.lock import ProfileLockRegistry
from src.components.bootstrap import (
    BootstrapOrchestrator,
    BootstrapState,
    ConfigurationMissingError,
    ProvisionOutcome,
    failure_state,
    run,
)
from src.domain.entities import Setting
from tests.conftest import ALICE_SETTINGS, FakeNode, FakeSmsg


@pytest.fixture
def repos(db_path):
    return SQLiteSettingRepo(db_path), SQLiteWalletRepo(db_path), SQLiteMarketRepo(db_path)


@pytest.fixture
def seeded_profile(repos, sqlite_profile):
    settings, _, _ = repos
    for key, value in ALICE_SETTINGS.items():
        settings.save(Setting(profile_id=sqlite_profile.id, key=key, value=value))
    return sqlite_profile


def _orchestrator(repos, node, smsg):
    settings, wallets, markets = repos
    return BootstrapOrchestrator(settings, wallets, markets, node, smsg)


def test_fresh_profile_gets_market_wallet_and_bindings(repos, seeded_profile):
    node = FakeNode()
    smsg = FakeSmsg({"K1": ("A1", "PUB1")})
    orchestrator = _orchestrator(repos, node, smsg)

    result = run(seeded_profile.id, orchestrator)

    _, wallets, markets = repos
    stored = markets.list_by_profile(seeded_profile.id)
    assert len(stored) == 1
    market = stored[0]
    assert market.name == "Alice Market"
    assert (market.receive_key, market.receive_address) == ("K1", "A1")
    assert (market.publish_key, market.publish_address) == ("K1", "A1")

    wallet = wallets.find_by_profile_and_name(seeded_profile.id, "market.dat")
    assert wallet is not None and market.wallet_id == wallet.id

    assert result.created is True
    assert result.wallet_outcome == ProvisionOutcome.CREATED
    assert smsg.bindings == {("A1", "PUB1")}
    assert smsg.wallet == "market.dat"
    assert result.state == BootstrapState.DONE


def test_rerun_updates_in_place(repos, seeded_profile):
    node = FakeNode()
    smsg = FakeSmsg({"K1": ("A1", "PUB1")})
    orchestrator = _orchestrator(repos, node, smsg)

    first = run(seeded_profile.id, orchestrator)

    settings, _, markets = repos
    settings.save(
        Setting(profile_id=seeded_profile.id, key="DEFAULT_MARKETPLACE_NAME", value="Alice Bazaar")
    )
    second = run(seeded_profile.id, orchestrator)

    stored = markets.list_by_profile(seeded_profile.id)
    assert len(stored) == 1
    assert stored[0].id == first.market.id
    assert stored[0].name == "Alice Bazaar"
    assert second.created is False
    assert second.wallet_outcome == ProvisionOutcome.REUSED
    assert node.count("create_and_load_wallet") == 1
    assert smsg.bindings == {("A1", "PUB1")}


def test_missing_settings_leave_store_untouched(repos, sqlite_profile):
    node = FakeNode()
    smsg = FakeSmsg()
    orchestrator = _orchestrator(repos, node, smsg)

    with pytest.raises(ConfigurationMissingError) as exc_info:
        run(sqlite_profile.id, orchestrator)

    _, wallets, markets = repos
    assert markets.list_by_profile(sqlite_profile.id) == []
    assert wallets.find_by_profile_and_name(sqlite_profile.id, "market.dat") is None
    assert node.calls == []
    assert smsg.calls == []
    assert failure_state(exc_info.value) == BootstrapState.CONFIG_MISSING


def test_concurrent_passes_for_one_profile_create_one_market(repos, seeded_profile):
    smsg = FakeSmsg({"K1": ("A1", "PUB1")})
    orchestrators = [_orchestrator(repos, FakeNode(), smsg) for _ in range(4)]
    locks = ProfileLockRegistry()
    errors: list[Exception] = []

    def worker(orchestrator):
        try:
            run(seeded_profile.id, orchestrator, locks)
        except Exception as e:  # pragma: no cover - surfaced by the assert below
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(o,)) for o in orchestrators]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    _, _, markets = repos
    assert errors == []
    assert len(markets.list_by_profile(seeded_profile.id)) == 1
