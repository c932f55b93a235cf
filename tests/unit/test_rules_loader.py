"""
Rules loader tests.

Loading the project's rules.yaml, defaults, environment overrides and
fail-fast errors.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from src.rules.loader import load_rules

PROJECT_ROOT = Path(__file__).parent.parent.parent


class TestLoadRules:
    def test_load_project_rules_file(self) -> None:
        rules = load_rules(PROJECT_ROOT / "rules.yaml", environ={})

        assert rules.project.slug == "market-bootstrap"
        assert rules.bootstrap.default_wallet_name == "market.dat"
        assert rules.bootstrap.on_key_import_rejected == "continue"
        assert rules.bootstrap.setting_keys.marketplace_address == "DEFAULT_MARKETPLACE_ADDRESS"

    def test_missing_file_raises(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_rules(Path("/nonexistent/rules.yaml"))

    def test_minimal_file_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("project:\n  slug: x\n  rules_version: '1'\n")

        rules = load_rules(path, environ={})

        assert rules.node.url == "http://127.0.0.1:51935"
        assert rules.ops.db_path == "market.db"
        assert rules.ops.log_level == "INFO"

    def test_env_overrides_node_credentials(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text(
            "project:\n  slug: x\n  rules_version: '1'\n"
            "node:\n  url: http://localhost:1\n  rpc_user: file-user\n"
        )

        rules = load_rules(
            path,
            environ={"MB_RPC_USER": "env-user", "MB_RPC_PASSWORD": "secret"},
        )

        assert rules.node.url == "http://localhost:1"
        assert rules.node.rpc_user == "env-user"
        assert rules.node.rpc_password == "secret"

    def test_invalid_yaml_raises_value_error(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("project: [unclosed\n")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_rules(path, environ={})

    def test_invalid_policy_raises_value_error(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text(
            "project:\n  slug: x\n  rules_version: '1'\n"
            "bootstrap:\n  on_key_import_rejected: retry\n"
        )

        with pytest.raises(ValueError, match="Rules validation failed"):
            load_rules(path, environ={})

    def test_missing_project_section_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("ops:\n  log_level: DEBUG\n")

        with pytest.raises(ValueError, match="Rules validation failed"):
            load_rules(path, environ={})
