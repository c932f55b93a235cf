# market-bootstrap - Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from src.core.ports.db import (
    MarketRepoPort,
    ProfileRepoPort,
    SettingRepoPort,
    WalletRepoPort,
)
from src.core.ports.node import (
    ExternalNodeError,
    MessagingSubsystemError,
    NodeRpcPort,
    SmsgPort,
    WalletAlreadyExistsError,
    WalletAlreadyLoadedError,
)

__all__ = [
    # Persistence
    "MarketRepoPort",
    "ProfileRepoPort",
    "SettingRepoPort",
    "WalletRepoPort",
    # Node
    "NodeRpcPort",
    "SmsgPort",
    "ExternalNodeError",
    "MessagingSubsystemError",
    "WalletAlreadyExistsError",
    "WalletAlreadyLoadedError",
]
