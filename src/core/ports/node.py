"""
External node interfaces.

Two service boundaries the market bootstrap talks to:
- NodeRpcPort: wallet lifecycle on the wallet/blockchain node
- SmsgPort: the secure-messaging subsystem hosted by the same node

Implementations: JSON-RPC over HTTP (src/adapters/rpc/).
"""

from __future__ import annotations

from typing import Protocol

from src.domain.entities import SmsgKey


class NodeRpcPort(Protocol):
    """Wallet lifecycle operations on the external node."""

    def wallet_exists(self, name: str) -> bool:
        """Check whether a wallet with this name exists in the node's wallet dir."""
        ...

    def create_and_load_wallet(self, name: str) -> str:
        """
        Create a wallet and load it.

        Returns:
            The wallet name reported by the node

        Raises:
            WalletAlreadyExistsError: The node already has this wallet
            ExternalNodeError: Any other node failure
        """
        ...

    def wallet_loaded(self, name: str) -> bool:
        """Check whether the wallet is currently loaded."""
        ...

    def load_wallet(self, name: str) -> None:
        """
        Load an existing wallet.

        Raises:
            WalletAlreadyLoadedError: The wallet is already loaded
            ExternalNodeError: Any other node failure
        """
        ...

    def set_active_wallet(self, name: str) -> None:
        """Route subsequent wallet-scoped calls to this wallet."""
        ...


class SmsgPort(Protocol):
    """Secure-messaging key and address operations."""

    def smsg_import_priv_key(self, private_key: str, label: str = "") -> bool:
        """Import a private key. False means the node rejected it."""
        ...

    def smsg_local_keys(self) -> list[SmsgKey]:
        """List keys known locally. Re-queried on every call."""
        ...

    def smsg_add_address(self, address: str, public_key: str) -> None:
        """Bind an address and public key. Repeating a binding is a no-op."""
        ...

    def smsg_set_wallet(self, name: str) -> None:
        """Select the wallet secure messaging uses."""
        ...


class ExternalNodeError(Exception):
    """Connectivity or protocol failure talking to the node."""

    def __init__(self, method: str, message: str, code: int | None = None) -> None:
        self.method = method
        self.code = code
        self.message = message
        suffix = f" (code {code})" if code is not None else ""
        super().__init__(f"Node call {method} failed{suffix}: {message}")


class WalletAlreadyExistsError(ExternalNodeError):
    """The node refused to create a wallet because it already exists."""


class WalletAlreadyLoadedError(ExternalNodeError):
    """The node refused to load a wallet because it is already loaded."""


class MessagingSubsystemError(ExternalNodeError):
    """Failure reported by the secure-messaging subsystem."""
