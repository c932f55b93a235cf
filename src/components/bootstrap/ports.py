"""
Bootstrap component port definitions.

Protocol interfaces for external dependencies. Persistence and node ports
are shared with the adapters and re-exported from src.core.ports.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol
from uuid import UUID

from src.core.ports.db import MarketRepoPort, SettingRepoPort, WalletRepoPort
from src.core.ports.node import NodeRpcPort, SmsgPort


class ProfileLockPort(Protocol):
    """Serializes reconciliation passes for one profile."""

    def hold(self, profile_id: UUID) -> AbstractContextManager[None]:
        """Block until the profile's lock is free and hold it for the block."""
        ...


__all__ = [
    "MarketRepoPort",
    "NodeRpcPort",
    "ProfileLockPort",
    "SettingRepoPort",
    "SmsgPort",
    "WalletRepoPort",
]
