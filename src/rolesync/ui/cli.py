from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from typing import TYPE_CHECKING

import uvicorn
from dotenv import load_dotenv

from rolesync.app import register_identity, run_single_tick, run_synchronizer
from rolesync.config import ConfigurationError, configure_logging, get_api_config
from rolesync.ui.api import create_app

if TYPE_CHECKING:
    from collections.abc import Sequence

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Keep tier roles in line with wallet holdings")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Run the reverification scheduler")
    sync.add_argument(
        "--once",
        action="store_true",
        help="Run a single reverification pass and exit",
    )

    stats = subparsers.add_parser("stats", help="Serve the read-only stats API")
    stats.add_argument("--host", type=str, help="Bind address (defaults to STATS_HOST)")
    stats.add_argument("--port", type=int, help="Bind port (defaults to STATS_PORT)")

    identity = subparsers.add_parser("identity", help="Identity management commands")
    identity_sub = identity.add_subparsers(dest="identity_command", required=True)
    identity_add = identity_sub.add_parser("add", help="Register an identity")
    identity_add.add_argument(
        "--user-id",
        type=str,
        required=True,
        help="Chat platform user id",
    )
    identity_add.add_argument(
        "--wallet",
        type=str,
        help="Wallet address holding the tier assets",
    )

    return parser.parse_args(list(argv))


async def _serve_synchronizer() -> None:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, stop_event.set)
        except NotImplementedError:  # pragma: no cover - Windows
            signal.signal(signum, lambda *_: loop.call_soon_threadsafe(stop_event.set))
    await run_synchronizer(stop_event)
    log.info("Closed by signal")


def _serve_stats(args: argparse.Namespace) -> None:
    config = get_api_config()
    uvicorn.run(
        create_app(),
        host=args.host or config.host,
        port=args.port or config.port,
        log_config=None,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "sync" and parsed_args.once:
            summary = asyncio.run(run_single_tick())
            log.info(
                "Reverification pass finished: selected=%s, verified=%s, skipped=%s, failed=%s",
                summary.selected,
                summary.verified,
                summary.skipped,
                summary.failed,
            )
        elif parsed_args.command == "sync":
            asyncio.run(_serve_synchronizer())
        elif parsed_args.command == "stats":
            _serve_stats(parsed_args)
        elif parsed_args.command == "identity" and parsed_args.identity_command == "add":
            identity = register_identity(
                user_id=parsed_args.user_id,
                wallet_address=parsed_args.wallet,
            )
            log.info("Created identity %s", identity.id)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except ConfigurationError:
        log.exception("Invalid configuration")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def run() -> None:
    load_dotenv()
    main()


if __name__ == "__main__":
    run()
