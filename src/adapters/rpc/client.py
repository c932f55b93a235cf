"""
JSON-RPC 1.0 client for the wallet node.

The node answers RPC-level failures with HTTP 500 and a JSON body whose
"error" member carries {code, message}; both are surfaced as
ExternalNodeError with the node's code attached. Transport failures carry
no code.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any
from urllib.parse import quote

import httpx

from src.core.ports.node import ExternalNodeError

logger = logging.getLogger(__name__)


class JsonRpcClient:
    """Synchronous JSON-RPC client over HTTP basic auth."""

    def __init__(
        self,
        url: str,
        rpc_user: str = "",
        rpc_password: str = "",
        timeout_seconds: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        auth = (rpc_user, rpc_password) if rpc_user else None
        self._client = httpx.Client(
            base_url=url.rstrip("/"),
            auth=auth,
            timeout=timeout_seconds,
            transport=transport,
        )
        self._ids = itertools.count(1)

    def call(self, method: str, params: list[Any] | None = None, wallet: str | None = None) -> Any:
        """
        Invoke an RPC method and return its "result".

        Args:
            method: RPC method name
            params: Positional parameters
            wallet: Route the call to /wallet/<name> when set

        Raises:
            ExternalNodeError: Transport failure, HTTP failure or RPC error
        """
        path = f"/wallet/{quote(wallet, safe='')}" if wallet else "/"
        payload = {
            "jsonrpc": "1.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }
        logger.debug("rpc %s %s", method, path)

        try:
            response = self._client.post(path, json=payload)
        except httpx.HTTPError as exc:
            raise ExternalNodeError(method, str(exc)) from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get("error"):
            error = body["error"]
            if isinstance(error, dict):
                raise ExternalNodeError(method, str(error.get("message", "")), error.get("code"))
            raise ExternalNodeError(method, str(error))

        if response.status_code >= 400 or not isinstance(body, dict):
            raise ExternalNodeError(
                method, f"HTTP {response.status_code}: {response.text[:200]}"
            )

        return body.get("result")

    def close(self) -> None:
        self._client.close()
