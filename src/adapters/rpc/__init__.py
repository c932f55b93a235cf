"""JSON-RPC adapters for the wallet node and its secure-messaging subsystem."""

from src.adapters.rpc.client import JsonRpcClient
from src.adapters.rpc.node import CoreRpcNode
from src.adapters.rpc.smsg import SmsgRpcAdapter

__all__ = ["CoreRpcNode", "JsonRpcClient", "SmsgRpcAdapter"]
