# main.py

"""Entry point for the pricewatch command-line tracker."""

import argparse
import asyncio
import getpass
import logging
import sys
from pathlib import Path

from pricewatch.config.logging_config import setup_logging
from pricewatch.config.settings import Settings

logger = logging.getLogger("pricewatch.main")

_COMMANDS: dict[str, str] = {
    "register": "create account to track products",
    "add NAME URL": "add product to track",
    "remove NAME": "remove product from tracking",
    "update": "manually update product prices",
    "list": "list tracked products",
    "history NAME": "view price history of the product",
}


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    epilog = "\n".join(f"  {cmd:<14} {desc}" for cmd, desc in _COMMANDS.items())

    parser = argparse.ArgumentParser(
        prog="pricewatch",
        description="Track web product prices and their history.",
        epilog=f"Commands:\n{epilog}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-u",
        "--user",
        default=None,
        help="Account identity (default: $PRICEWATCH_USER or login name).",
    )
    parser.add_argument(
        "--display-name",
        default=None,
        dest="display_name",
        help="Display name used by register (default: the identity).",
    )
    parser.add_argument(
        "--db",
        default=None,
        dest="db_path",
        help="SQLite database path (default: data/pricewatch.db).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds allowed per product scrape.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show INFO log records on stderr.",
    )

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("register", help=_COMMANDS["register"])

    add = sub.add_parser("add", help=_COMMANDS["add NAME URL"])
    add.add_argument("name", nargs="?", default=None)
    add.add_argument("url", nargs="?", default=None)

    remove = sub.add_parser("remove", help=_COMMANDS["remove NAME"])
    remove.add_argument("name", nargs="?", default=None)

    sub.add_parser("update", help=_COMMANDS["update"])
    sub.add_parser("list", help=_COMMANDS["list"])

    history = sub.add_parser("history", help=_COMMANDS["history NAME"])
    history.add_argument("name", nargs="?", default=None)
    return parser


def _resolve_identity(args: argparse.Namespace) -> str:
    """Pick the account identity for this invocation."""
    user: str | None = args.user or Settings.DEFAULT_USER
    return user or getpass.getuser()


async def _run(args: argparse.Namespace) -> int:
    """Open the tracker context, run one command and close it."""
    from pricewatch.cli.runner import run_command
    from pricewatch.services.context import TrackerContext

    identity = _resolve_identity(args)
    display_name: str = args.display_name or identity
    ctx = TrackerContext.open(
        db_path=Path(args.db_path) if args.db_path else None,
        scrape_timeout=args.timeout,
    )
    try:
        return await run_command(ctx, args, identity, display_name)
    finally:
        ctx.close()


def main() -> None:
    """Parse arguments, run the requested command and exit."""
    parser = _build_parser()
    args = parser.parse_args()

    log_file = setup_logging(console_level="INFO" if args.verbose else None)
    logger.info("pricewatch starting, log file: %s", log_file)

    try:
        exit_code = asyncio.run(_run(args))
    except Exception:
        logger.critical("Fatal error during %s", args.command, exc_info=True)
        raise
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
