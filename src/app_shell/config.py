import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path

from src.rules.models import Rules

logger = logging.getLogger(__name__)


def validate_ops_rules(
    rules: Rules, base_dir: Path, environ: Mapping[str, str] | None = None
) -> None:
    """
    Validate operational requirements before startup.
    Exits the process when a requirement is not met.
    """
    ops = rules.ops
    env = os.environ if environ is None else environ

    # 1. Check Data Dir
    if ops.data_dir_required:
        data_dir = (base_dir / ops.db_path).parent
        if not data_dir.is_dir() or not os.access(data_dir, os.W_OK):
            logger.critical("Data directory %s is missing or not writable", data_dir)
            sys.exit(1)

    # 2. Check Required Env
    missing = [env_var for env_var in ops.required_env if env_var not in env]
    if missing:
        logger.critical("Missing required environment variables: %s", ", ".join(missing))
        sys.exit(1)

    # 3. Node credentials are optional for a local regtest node, but worth flagging
    if not rules.node.rpc_user:
        logger.warning("No RPC user configured for node at %s", rules.node.url)

    logger.info("Configuration Validated.")
