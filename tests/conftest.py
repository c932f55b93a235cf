from __future__ import annotations

import os
from datetime import UTC, datetime
from pathlib import Path
from uuid import UUID, uuid4

import pytest

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.core.ports.node import WalletAlreadyExistsError, WalletAlreadyLoadedError
from src.domain.entities import (
    Market,
    MarketCreateRequest,
    Profile,
    Setting,
    SmsgKey,
    Wallet,
)

PROJECT_ROOT = Path(__file__).parent.parent
MIGRATIONS_DIR = str(PROJECT_ROOT / "migrations")

ALICE_SETTINGS = {
    "DEFAULT_MARKETPLACE_NAME": "Alice Market",
    "DEFAULT_MARKETPLACE_PRIVATE_KEY": "K1",
    "DEFAULT_MARKETPLACE_ADDRESS": "A1",
}


# --- In-memory repositories ---


class MockSettingRepo:
    """Mock setting repository for testing."""

    def __init__(self, settings: list[Setting] | None = None) -> None:
        self.settings = list(settings or [])
        self.read_count = 0

    def find_all_by_profile_id(self, profile_id: UUID) -> list[Setting]:
        self.read_count += 1
        return [s for s in self.settings if s.profile_id == profile_id]

    def save(self, setting: Setting) -> Setting:
        self.settings = [
            s
            for s in self.settings
            if not (s.profile_id == setting.profile_id and s.key == setting.key)
        ]
        self.settings.append(setting)
        return setting


class MockWalletRepo:
    """Mock wallet repository for testing."""

    def __init__(self) -> None:
        self.wallets: dict[UUID, Wallet] = {}
        self.create_count = 0

    def find_one(self, wallet_id: UUID) -> Wallet | None:
        return self.wallets.get(wallet_id)

    def find_by_profile_and_name(self, profile_id: UUID, name: str) -> Wallet | None:
        for wallet in self.wallets.values():
            if wallet.profile_id == profile_id and wallet.name == name:
                return wallet
        return None

    def create(self, wallet: Wallet) -> Wallet:
        self.create_count += 1
        self.wallets[wallet.id] = wallet
        return wallet


class MockMarketRepo:
    """Mock market repository for testing."""

    def __init__(self) -> None:
        self.markets: dict[UUID, Market] = {}
        self.create_count = 0
        self.update_count = 0

    def find_one(self, market_id: UUID) -> Market | None:
        return self.markets.get(market_id)

    def find_by_profile_and_address(self, profile_id: UUID, receive_address: str) -> Market | None:
        for market in self.markets.values():
            if market.profile_id == profile_id and market.receive_address == receive_address:
                return market
        return None

    def create(self, request: MarketCreateRequest) -> Market:
        self.create_count += 1
        market = Market(**request.model_dump())
        self.markets[market.id] = market
        return market

    def update(self, market_id: UUID, request: MarketCreateRequest) -> Market:
        self.update_count += 1
        existing = self.markets[market_id]
        market = existing.model_copy(
            update={**request.model_dump(), "updated_at": datetime.now(UTC)}
        )
        self.markets[market_id] = market
        return market


# --- External node fakes ---


class FakeNode:
    """Records NodeRpcPort calls; wallets and loaded sets model the node's state."""

    def __init__(self, wallets: set[str] | None = None, loaded: set[str] | None = None) -> None:
        self.wallets = set(wallets or ())
        self.loaded = set(loaded or ())
        self.active_wallet: str | None = None
        self.calls: list[tuple[str, str]] = []
        self.error: Exception | None = None

    def _record(self, method: str, name: str) -> None:
        self.calls.append((method, name))
        if self.error is not None:
            raise self.error

    def count(self, method: str) -> int:
        return sum(1 for m, _ in self.calls if m == method)

    def wallet_exists(self, name: str) -> bool:
        self._record("wallet_exists", name)
        return name in self.wallets

    def create_and_load_wallet(self, name: str) -> str:
        self._record("create_and_load_wallet", name)
        if name in self.wallets:
            raise WalletAlreadyExistsError("createwallet", "Database already exists.", -4)
        self.wallets.add(name)
        self.loaded.add(name)
        return name

    def wallet_loaded(self, name: str) -> bool:
        self._record("wallet_loaded", name)
        return name in self.loaded

    def load_wallet(self, name: str) -> None:
        self._record("load_wallet", name)
        if name in self.loaded:
            raise WalletAlreadyLoadedError("loadwallet", "Wallet is already loaded.", -35)
        self.loaded.add(name)

    def set_active_wallet(self, name: str) -> None:
        self._record("set_active_wallet", name)
        self.active_wallet = name


class FakeSmsg:
    """
    Records SmsgPort calls.

    keyring maps private key -> (address, public key); a key mapped to None
    is accepted on import but never shows up in the local key listing.
    """

    def __init__(self, keyring: dict[str, tuple[str, str] | None] | None = None) -> None:
        self.keyring = dict(keyring or {})
        self.rejected: set[str] = set()
        self.local_keys: dict[str, str] = {}
        self.bindings: set[tuple[str, str]] = set()
        self.wallet: str | None = None
        self.calls: list[tuple[str, tuple[str, ...]]] = []

    def count(self, method: str) -> int:
        return sum(1 for m, _ in self.calls if m == method)

    def smsg_import_priv_key(self, private_key: str, label: str = "") -> bool:
        self.calls.append(("smsg_import_priv_key", (private_key, label)))
        if private_key in self.rejected:
            return False
        entry = self.keyring.get(private_key)
        if entry is not None:
            address, public_key = entry
            self.local_keys[address] = public_key
        return True

    def smsg_local_keys(self) -> list[SmsgKey]:
        self.calls.append(("smsg_local_keys", ()))
        return [SmsgKey(address=a, public_key=p) for a, p in self.local_keys.items()]

    def smsg_add_address(self, address: str, public_key: str) -> None:
        self.calls.append(("smsg_add_address", (address, public_key)))
        self.bindings.add((address, public_key))

    def smsg_set_wallet(self, name: str) -> None:
        self.calls.append(("smsg_set_wallet", (name,)))
        self.wallet = name


# --- Fixtures ---


@pytest.fixture
def profile_id() -> UUID:
    return uuid4()


@pytest.fixture
def setting_repo(profile_id: UUID) -> MockSettingRepo:
    return MockSettingRepo(
        [Setting(profile_id=profile_id, key=k, value=v) for k, v in ALICE_SETTINGS.items()]
    )


@pytest.fixture
def wallet_repo() -> MockWalletRepo:
    return MockWalletRepo()


@pytest.fixture
def market_repo() -> MockMarketRepo:
    return MockMarketRepo()


@pytest.fixture
def node() -> FakeNode:
    return FakeNode()


@pytest.fixture
def smsg() -> FakeSmsg:
    return FakeSmsg({"K1": ("A1", "PUB1"), "K2": ("A2", "PUB2")})


@pytest.fixture
def db_path(tmp_path) -> str:
    path = os.path.join(str(tmp_path), "market.db")
    SQLiteMigrator(path, MIGRATIONS_DIR).run_migrations()
    return path


@pytest.fixture
def sqlite_profile(db_path: str) -> Profile:
    from src.adapters.sqlite.repos import SQLiteProfileRepo

    return SQLiteProfileRepo(db_path).save(Profile(name="DEFAULT"))
