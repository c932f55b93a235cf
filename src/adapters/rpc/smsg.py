"""Secure-messaging adapter (SmsgPort) over JSON-RPC."""

from __future__ import annotations

import logging
from typing import Any

from src.adapters.rpc.client import JsonRpcClient
from src.adapters.rpc.node import CoreRpcNode
from src.core.ports.node import ExternalNodeError, MessagingSubsystemError
from src.domain.entities import SmsgKey

logger = logging.getLogger(__name__)

# RPC_INVALID_ADDRESS_OR_KEY / RPC_INVALID_PARAMETER: the node refused the key itself
KEY_REJECTED_CODES = frozenset({-5, -8})
# RPC_INTERNAL_ERROR, rejected only when the node reports "Import failed."
RPC_INTERNAL_ERROR = -32603


class SmsgRpcAdapter:
    """
    SMSG calls are routed to the node's active wallet, so wallet activation
    on the node must happen before keys are imported.
    """

    def __init__(self, client: JsonRpcClient, node: CoreRpcNode) -> None:
        self._client = client
        self._node = node

    def _call(self, method: str, params: list[Any] | None = None) -> Any:
        try:
            return self._client.call(method, params, wallet=self._node.active_wallet)
        except ExternalNodeError as exc:
            raise MessagingSubsystemError(exc.method, exc.message, exc.code) from exc

    def smsg_import_priv_key(self, private_key: str, label: str = "") -> bool:
        try:
            self._call("smsgimportprivkey", [private_key, label])
        except MessagingSubsystemError as exc:
            if not _is_key_rejection(exc):
                # Connectivity and protocol failures are not rejections
                raise
            logger.warning("smsgimportprivkey rejected: %s", exc.message)
            return False
        return True

    def smsg_local_keys(self) -> list[SmsgKey]:
        result = self._call("smsglocalkeys") or {}
        return [SmsgKey.model_validate(k) for k in result.get("smsg_keys", [])]

    def smsg_add_address(self, address: str, public_key: str) -> None:
        self._call("smsgaddaddress", [address, public_key])

    def smsg_set_wallet(self, name: str) -> None:
        self._call("smsgsetwallet", [name])


def _is_key_rejection(exc: MessagingSubsystemError) -> bool:
    if exc.code in KEY_REJECTED_CODES:
        return True
    return exc.code == RPC_INTERNAL_ERROR and "import failed" in exc.message.lower()
