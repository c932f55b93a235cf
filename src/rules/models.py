from typing import Literal

from pydantic import BaseModel, Field

KeyImportRejectPolicy = Literal["continue", "abort"]


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class NodeRules(BaseModel):
    url: str = "http://127.0.0.1:51935"
    rpc_user: str = ""
    rpc_password: str = ""
    timeout_seconds: float = Field(default=30.0, gt=0)

class SettingKeysRules(BaseModel):
    marketplace_name: str = "DEFAULT_MARKETPLACE_NAME"
    marketplace_private_key: str = "DEFAULT_MARKETPLACE_PRIVATE_KEY"
    marketplace_address: str = "DEFAULT_MARKETPLACE_ADDRESS"

class BootstrapRules(BaseModel):
    default_wallet_name: str = "market.dat"
    default_profile_name: str = "DEFAULT"
    on_key_import_rejected: KeyImportRejectPolicy = "continue"
    setting_keys: SettingKeysRules = Field(default_factory=SettingKeysRules)

class OpsRules(BaseModel):
    data_dir_required: bool = False
    required_env: list[str] = Field(default_factory=list)
    db_path: str = "market.db"
    migrations_dir: str = "migrations"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

class Rules(BaseModel):
    project: ProjectRules
    node: NodeRules = Field(default_factory=NodeRules)
    bootstrap: BootstrapRules = Field(default_factory=BootstrapRules)
    ops: OpsRules = Field(default_factory=OpsRules)
