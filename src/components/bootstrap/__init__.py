"""Bootstrap component for default market provisioning.

This component reconciles a profile's marketplace identity: the market row,
its wallet on the node, and the secure-messaging registration of its keys.
"""

from ._impl import (
    KeyImporter,
    MarketRecordStore,
    MessagingRegistrar,
    WalletProvisioner,
    resolve_market_settings,
)
from .component import (
    BootstrapOrchestrator,
    distinct_publish_pair,
    failure_state,
    run,
    run_bootstrap,
)
from .models import (
    BootstrapError,
    BootstrapResult,
    BootstrapState,
    ConfigurationMissingError,
    InternalInconsistencyError,
    KeyImportRejectedError,
    MarketSettings,
    PassTrace,
    ProvisionOutcome,
    WalletHandle,
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

__all__ = [
    # Entry points
    "run",
    "run_bootstrap",
    "BootstrapOrchestrator",
    # Building blocks
    "KeyImporter",
    "MarketRecordStore",
    "MessagingRegistrar",
    "WalletProvisioner",
    "resolve_market_settings",
    "distinct_publish_pair",
    "failure_state",
    # Models
    "BootstrapResult",
    "BootstrapState",
    "MarketSettings",
    "PassTrace",
    "ProvisionOutcome",
    "WalletHandle",
    # Errors
    "BootstrapError",
    "ConfigurationMissingError",
    "InternalInconsistencyError",
    "KeyImportRejectedError",
    "WalletNotFoundError",
    # Ports
    "MarketRepoPort",
    "NodeRpcPort",
    "ProfileLockPort",
    "SettingRepoPort",
    "SmsgPort",
    "WalletRepoPort",
]
