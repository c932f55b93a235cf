import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from src.rules.models import Rules

# Environment variables that override node connection settings
ENV_OVERRIDES = {
    "MB_NODE_URL": "url",
    "MB_RPC_USER": "rpc_user",
    "MB_RPC_PASSWORD": "rpc_password",
}


def load_rules(path: Path, environ: dict[str, str] | None = None) -> Rules:
    """
    Load and validate the rules file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if YAML or schema invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    with open(path) as f:
        content = f.read()

    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("Rules file must contain a YAML mapping at the top level")

    env = os.environ if environ is None else environ
    node = dict(data.get("node") or {})
    for env_var, field_name in ENV_OVERRIDES.items():
        if env.get(env_var):
            node[field_name] = env[env_var]
    data["node"] = node

    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        # Re-raise with a clear message for the caller/logs
        raise ValueError(f"Rules validation failed:\n{e}") from e
