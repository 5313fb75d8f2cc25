"""Command-line interface for the DC Nexus registration service."""

from __future__ import annotations
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from dcnexus.config import Settings, load_settings, resolve_config_path
from dcnexus.store import JSONRecordStore, StorageUnavailable

logger = logging.getLogger("dcnexus.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="DC Nexus service utilities")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the YAML settings file (default: DCNEXUS_CONFIG or config/settings.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    subparsers.add_parser("init-db", help="Create the users file if it does not exist")
    subparsers.add_parser("users", help="List registered users")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP service")
    serve_parser.add_argument("--host", default=None, help="Bind address (default: 0.0.0.0)")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for the HTTP service (default: 3000)",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "init-db", "users"}

    # Global options may precede the subcommand; only inject "serve" when
    # no subcommand appears anywhere.
    if not any(arg in known_commands for arg in args_list):
        if any(flag in args_list for flag in ("-h", "--help")):
            return parser.parse_args(args_list)
        config_args: list[str] = []
        rest = list(args_list)
        if rest[:1] == ["--config"] and len(rest) >= 2:
            config_args, rest = rest[:2], rest[2:]
        elif rest and rest[0].startswith("--config="):
            config_args, rest = rest[:1], rest[1:]
        args_list = [*config_args, "serve", *rest]

    return parser.parse_args(args_list)


def _load_settings(config: str | None) -> Settings:
    config_path = resolve_config_path(config or os.getenv("DCNEXUS_CONFIG"))
    return load_settings(config_path).with_env_overrides()


def _initialise_store(settings: Settings) -> JSONRecordStore:
    store = JSONRecordStore(settings.users_path)
    store.initialize()
    logger.info("Users file ready at %s", settings.users_path)
    return store


def _serve(*, settings: Settings, store: JSONRecordStore, host: str | None, port: int | None) -> None:
    from dcnexus.application import create_application
    import uvicorn

    bind_host = host or settings.host
    bind_port = port or settings.port
    logger.info("Starting %s on http://%s:%s", settings.service_name, bind_host, bind_port)

    app = create_application(settings=settings, store=store)
    uvicorn.run(app, host=bind_host, port=bind_port, log_level="info")


def _list_users(store: JSONRecordStore) -> None:
    users = store.load()
    if not users:
        print("No users are currently registered.")
        return

    print(f"{len(users)} user(s) found:")
    print(f"{'ID':>14}  {'Name':<24}  {'Email':<32}  Created")
    print("-" * 96)
    for user in users:
        print(f"{user.id:>14}  {user.full_name:<24}  {user.email:<32}  {user.created_at}")


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)
    settings = _load_settings(args.config)

    try:
        store = _initialise_store(settings)
        if args.command == "serve":
            _serve(settings=settings, store=store, host=args.host, port=args.port)
        elif args.command == "users":
            _list_users(store)
        elif args.command == "init-db":
            print(f"Users file initialised at {Path(settings.users_path)}.")
    except StorageUnavailable as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
