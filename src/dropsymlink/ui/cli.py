from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from dropsymlink.app import (
    apply_description,
    build_store_session_factory,
    register_server,
    rollback_description,
    snapshot_store,
    unregister_server,
)
from dropsymlink.config import (
    STORE_BACKENDS,
    ConfigurationError,
    configure_logging,
    get_store_config,
)
from dropsymlink.domain.errors import S_OK, StoreError, format_status
from dropsymlink.domain.linking import create_links
from dropsymlink.domain.ports import RootKey

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Register the Drop for Symlink shell extension")
    parser.add_argument(
        "--backend",
        choices=STORE_BACKENDS,
        help="Store backend to use (defaults to DROPSYMLINK_STORE_BACKEND or the platform's)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("register", help="Write the extension's registration")
    subparsers.add_parser("unregister", help="Remove the extension's registration")

    apply = subparsers.add_parser("apply", help="Apply a JSON batch file")
    apply.add_argument("file", type=Path, help="Batch file to apply")

    rollback = subparsers.add_parser("rollback", help="Roll back a JSON batch file")
    rollback.add_argument("file", type=Path, help="Batch file to roll back")

    show = subparsers.add_parser("show", help="Print the store contents as JSON")
    show.add_argument(
        "--root",
        type=RootKey,
        choices=list(RootKey),
        default=RootKey.LOCAL_MACHINE,
        help="Root key to print (default: %(default)s)",
    )
    show.add_argument("--path", default="", help="Node below the root key to print")

    link = subparsers.add_parser("link", help="Create symlinks to SOURCES inside FOLDER")
    link.add_argument("folder", type=Path, help="Folder receiving the links")
    link.add_argument("sources", type=Path, nargs="+", help="Files or folders to link")
    link.add_argument(
        "--rename",
        action="store_true",
        help="Rename links whose name is taken instead of aborting",
    )

    return parser.parse_args(list(argv))


def _run(args: argparse.Namespace) -> int:
    if args.command == "link":
        result = create_links(
            args.sources,
            args.folder,
            confirm_rename=lambda _path: args.rename,
            notify=log.error,
        )
        log.info(
            "Links created=%s, skipped=%s, failed=%s",
            len(result.created),
            len(result.skipped),
            len(result.failed),
        )
        return result.status

    session_factory = build_store_session_factory(get_store_config(backend=args.backend))
    if args.command == "register":
        return register_server(session_factory)
    if args.command == "unregister":
        return unregister_server(session_factory)
    if args.command == "apply":
        return apply_description(session_factory, args.file)
    if args.command == "rollback":
        return rollback_description(session_factory, args.file)
    if args.command == "show":
        snapshot = snapshot_store(session_factory, args.root, args.path)
        print(json.dumps(snapshot, indent=2, ensure_ascii=False))  # noqa: T201
        return S_OK
    raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        status = _run(parsed_args)
    except (ConfigurationError, ValueError):
        log.exception("Invalid input")
        sys.exit(2)
    except StoreError as exc:
        log.exception("Store failure %s", format_status(exc.status))
        sys.exit(1)

    if status != S_OK:
        log.error("Command %s failed with %s", parsed_args.command, format_status(status))
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
