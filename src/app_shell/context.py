from __future__ import annotations

from dataclasses import dataclass

from src.adapters.rpc.client import JsonRpcClient
from src.adapters.rpc.node import CoreRpcNode
from src.adapters.rpc.smsg import SmsgRpcAdapter
from src.adapters.sqlite.repos import (
    SQLiteMarketRepo,
    SQLiteProfileRepo,
    SQLiteSettingRepo,
    SQLiteWalletRepo,
)
from src.app_shell.lock import ProfileLockRegistry
from src.components.bootstrap import BootstrapOrchestrator
from src.rules.models import Rules


@dataclass
class ServiceContext:
    profile_repo: SQLiteProfileRepo
    setting_repo: SQLiteSettingRepo
    wallet_repo: SQLiteWalletRepo
    market_repo: SQLiteMarketRepo
    rpc_client: JsonRpcClient
    node: CoreRpcNode
    smsg: SmsgRpcAdapter
    orchestrator: BootstrapOrchestrator
    locks: ProfileLockRegistry
    rules: Rules

    @classmethod
    def create(
        cls, db_path: str, rules: Rules, rpc_client: JsonRpcClient | None = None
    ) -> ServiceContext:
        # Adapters
        profile_repo = SQLiteProfileRepo(db_path)
        setting_repo = SQLiteSettingRepo(db_path)
        wallet_repo = SQLiteWalletRepo(db_path)
        market_repo = SQLiteMarketRepo(db_path)

        if rpc_client is None:
            rpc_client = JsonRpcClient(
                rules.node.url,
                rpc_user=rules.node.rpc_user,
                rpc_password=rules.node.rpc_password,
                timeout_seconds=rules.node.timeout_seconds,
            )
        node = CoreRpcNode(rpc_client)
        smsg = SmsgRpcAdapter(rpc_client, node)

        orchestrator = BootstrapOrchestrator(
            settings_repo=setting_repo,
            wallet_repo=wallet_repo,
            market_repo=market_repo,
            node=node,
            smsg=smsg,
            rules=rules.bootstrap,
        )

        return cls(
            profile_repo=profile_repo,
            setting_repo=setting_repo,
            wallet_repo=wallet_repo,
            market_repo=market_repo,
            rpc_client=rpc_client,
            node=node,
            smsg=smsg,
            orchestrator=orchestrator,
            locks=ProfileLockRegistry(),
            rules=rules,
        )

    def close(self) -> None:
        self.rpc_client.close()
