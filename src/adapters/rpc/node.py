"""Wallet lifecycle adapter (NodeRpcPort) over JSON-RPC."""

from __future__ import annotations

import logging

from src.adapters.rpc.client import JsonRpcClient
from src.core.ports.node import (
    ExternalNodeError,
    WalletAlreadyExistsError,
    WalletAlreadyLoadedError,
)

logger = logging.getLogger(__name__)

# RPC_WALLET_ERROR / RPC_WALLET_ALREADY_LOADED
WALLET_ERROR_CODE = -4
WALLET_ALREADY_LOADED_CODE = -35


class CoreRpcNode:
    def __init__(self, client: JsonRpcClient) -> None:
        self._client = client
        self.active_wallet: str | None = None

    def wallet_exists(self, name: str) -> bool:
        result = self._client.call("listwalletdir")
        wallets = (result or {}).get("wallets", [])
        return any(w.get("name") == name for w in wallets)

    def create_and_load_wallet(self, name: str) -> str:
        try:
            result = self._client.call("createwallet", [name])
        except ExternalNodeError as exc:
            if exc.code == WALLET_ERROR_CODE and "already exists" in exc.message.lower():
                raise WalletAlreadyExistsError(exc.method, exc.message, exc.code) from exc
            raise
        created = (result or {}).get("name", name)
        logger.info("Node created wallet %s", created)
        return created

    def wallet_loaded(self, name: str) -> bool:
        return name in (self._client.call("listwallets") or [])

    def load_wallet(self, name: str) -> None:
        try:
            self._client.call("loadwallet", [name])
        except ExternalNodeError as exc:
            message = exc.message.lower()
            if (
                exc.code == WALLET_ALREADY_LOADED_CODE
                or "already loaded" in message
                or "duplicate -wallet filename" in message
            ):
                raise WalletAlreadyLoadedError(exc.method, exc.message, exc.code) from exc
            raise

    def set_active_wallet(self, name: str) -> None:
        # Client-side only: wallet-scoped calls are routed to /wallet/<name>
        self.active_wallet = name

