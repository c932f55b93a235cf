"""
Database Adapter Interfaces.

Protocol-based interfaces for the repositories the market bootstrap needs.
Implementations: SQLite (src/adapters/sqlite/repos.py).

Every lookup returns None when the row does not exist; callers decide
whether a miss is an error.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.domain.entities import Market, MarketCreateRequest, Profile, Setting, Wallet

# -----------------------------------------------------------------------------
# Profile Repository
# -----------------------------------------------------------------------------


class ProfileRepoPort(Protocol):
    """Repository for profiles."""

    def get_by_id(self, profile_id: UUID) -> Profile | None:
        """Get profile by ID."""
        ...

    def get_by_name(self, name: str) -> Profile | None:
        """Get profile by unique name."""
        ...

    def save(self, profile: Profile) -> Profile:
        """Insert or update a profile."""
        ...


# -----------------------------------------------------------------------------
# Setting Repository
# -----------------------------------------------------------------------------


class SettingRepoPort(Protocol):
    """
    Repository for profile-scoped settings.

    Invariants:
    - Keys are unique per profile
    """

    def find_all_by_profile_id(self, profile_id: UUID) -> list[Setting]:
        """List every setting of a profile."""
        ...

    def save(self, setting: Setting) -> Setting:
        """Insert or update a setting, keyed by (profile_id, key)."""
        ...


# -----------------------------------------------------------------------------
# Wallet Repository
# -----------------------------------------------------------------------------


class WalletRepoPort(Protocol):
    """
    Repository for locally tracked node wallets.

    Invariants:
    - Unique by (profile_id, name)
    """

    def find_one(self, wallet_id: UUID) -> Wallet | None:
        """Get wallet by ID."""
        ...

    def find_by_profile_and_name(self, profile_id: UUID, name: str) -> Wallet | None:
        """Get a wallet by owner and node wallet name."""
        ...

    def create(self, wallet: Wallet) -> Wallet:
        """Insert a new wallet row."""
        ...


# -----------------------------------------------------------------------------
# Market Repository
# -----------------------------------------------------------------------------


class MarketRepoPort(Protocol):
    """
    Repository for markets.

    Invariants:
    - Unique by (profile_id, receive_address)
    - wallet_id references an existing wallet
    """

    def find_one(self, market_id: UUID) -> Market | None:
        """Get market by ID."""
        ...

    def find_by_profile_and_address(
        self, profile_id: UUID, receive_address: str
    ) -> Market | None:
        """Get market by owner and receive address."""
        ...

    def create(self, request: MarketCreateRequest) -> Market:
        """Insert a new market from the request."""
        ...

    def update(self, market_id: UUID, request: MarketCreateRequest) -> Market:
        """Overwrite every field of an existing market with the request."""
        ...
