import argparse
import logging
import sys
from pathlib import Path

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.app_shell.config import validate_ops_rules
from src.app_shell.context import ServiceContext
from src.components.bootstrap import BootstrapError, failure_state, run
from src.core.ports.node import ExternalNodeError
from src.domain.entities import Profile, Setting
from src.rules.loader import load_rules
from src.rules.models import Rules

logger = logging.getLogger("cli")

RULES_PATH = "rules.yaml"


def get_rules(rules_path: str) -> Rules:
    if not Path(rules_path).exists():
        logger.error(f"Rules file {rules_path} not found.")
        sys.exit(1)
    return load_rules(Path(rules_path))


def get_context(rules: Rules) -> ServiceContext:
    return ServiceContext.create(rules.ops.db_path, rules)


def get_profile(ctx: ServiceContext, name: str) -> Profile:
    profile = ctx.profile_repo.get_by_name(name)
    if profile is None:
        logger.error(f"Profile {name} not found. Run init-profile first.")
        sys.exit(1)
    return profile


def handle_migrate(rules: Rules) -> None:
    migrator = SQLiteMigrator(rules.ops.db_path, rules.ops.migrations_dir)
    applied = migrator.run_migrations()
    print(f"Applied {len(applied)} migration(s).")


def handle_init_profile(ctx: ServiceContext, args: argparse.Namespace) -> None:
    name = args.profile or ctx.rules.bootstrap.default_profile_name
    profile = ctx.profile_repo.get_by_name(name) or ctx.profile_repo.save(Profile(name=name))

    keys = ctx.rules.bootstrap.setting_keys
    values = {
        keys.marketplace_name: args.market_name,
        keys.marketplace_private_key: args.private_key,
        keys.marketplace_address: args.address,
    }
    for key, value in values.items():
        if value is not None:
            ctx.setting_repo.save(Setting(profile_id=profile.id, key=key, value=value))

    print(f"Profile '{profile.name}' ready ({profile.id}).")


def handle_seed_market(ctx: ServiceContext, args: argparse.Namespace) -> None:
    profile = get_profile(ctx, args.profile or ctx.rules.bootstrap.default_profile_name)
    try:
        result = run(profile.id, ctx.orchestrator, ctx.locks)
    except (BootstrapError, ExternalNodeError) as e:
        state = failure_state(e)
        logger.error(f"Market bootstrap failed ({state.value if state else 'unknown'}): {e}")
        sys.exit(1)

    market = result.market
    print(f"Market '{market.name}' {'created' if result.created else 'updated'} ({market.id}).")
    print(f"Wallet: {result.wallet_outcome.value}")
    print(f"Registered: {', '.join(result.registered_addresses) or '-'}")
    if result.rejected_addresses:
        print(f"Rejected: {', '.join(result.rejected_addresses)}")
        sys.exit(2)


def handle_show_market(ctx: ServiceContext, args: argparse.Namespace) -> None:
    profile = get_profile(ctx, args.profile or ctx.rules.bootstrap.default_profile_name)
    markets = ctx.market_repo.list_by_profile(profile.id)
    if not markets:
        print("No markets.")
        return
    for m in markets:
        print(f" - {m.name} [{m.type.value}] receive={m.receive_address} publish={m.publish_address}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Market Bootstrap CLI")
    parser.add_argument("--rules", default=RULES_PATH, help="Path to rules.yaml")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply database migrations")

    # init-profile
    init_parser = subparsers.add_parser("init-profile", help="Create a profile and its settings")
    init_parser.add_argument("--profile", help="Profile name (defaults to rules)")
    init_parser.add_argument("--market-name", help="Default marketplace name")
    init_parser.add_argument("--private-key", help="Default marketplace private key")
    init_parser.add_argument("--address", help="Default marketplace address")

    # seed-market
    seed_parser = subparsers.add_parser("seed-market", help="Reconcile the default market")
    seed_parser.add_argument("--profile", help="Profile name (defaults to rules)")

    # show-market
    show_parser = subparsers.add_parser("show-market", help="List markets of a profile")
    show_parser.add_argument("--profile", help="Profile name (defaults to rules)")

    args = parser.parse_args(argv)

    rules = get_rules(args.rules)
    logging.basicConfig(level=getattr(logging, rules.ops.log_level))
    validate_ops_rules(rules, Path.cwd())

    if args.command == "migrate":
        handle_migrate(rules)
        return

    ctx = get_context(rules)
    try:
        if args.command == "init-profile":
            handle_init_profile(ctx, args)
        elif args.command == "seed-market":
            handle_seed_market(ctx, args)
        elif args.command == "show-market":
            handle_show_market(ctx, args)
    finally:
        ctx.close()


if __name__ == "__main__":
    main()
