"""CLI entrypoint."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dir_access.config import load_settings
from dir_access.directory_access import DirectoryAccess
from dir_access.rights import parse_rights


def run_list(access: DirectoryAccess, args: argparse.Namespace) -> int:
    root = Path(args.directory).resolve()
    if args.all:
        directories = access.list_all_accessible(root)
    else:
        directories = access.iter_accessible_subtree(root, parse_rights(args.rights))
    for directory in directories:
        print(directory)
    return 0


def run_check(access: DirectoryAccess, args: argparse.Namespace) -> int:
    allowed = access.can_access(Path(args.directory).resolve(), rights=parse_rights(args.rights))
    print("allowed" if allowed else "denied")
    return 0 if allowed else 1


def run_locks(access: DirectoryAccess, args: argparse.Namespace) -> int:
    directory = Path(args.directory).resolve()
    processes = access.locking_processes(directory)
    if not processes:
        print(f"Directory {directory} is not locked")
        return 0
    print(f"Directory {directory} is locked by processes:")
    for process in processes:
        print(f"  {process}")
    if not args.wait:
        return 1

    # Async entrypoint
    import anyio

    if args.timeout is None:
        unlocked = anyio.run(access.wait_for_unlock, directory)
    else:
        unlocked = anyio.run(access.wait_for_unlock, directory, args.timeout)
    print("unlocked" if unlocked else "timeout")
    return 0 if unlocked else 1


def main() -> None:
    parser = argparse.ArgumentParser(prog="dir-access")
    parser.add_argument("--config", type=str, default=None, help="Path to a YAML settings file")
    parser.add_argument("--verbose", action="store_true")
    commands = parser.add_subparsers(dest="command", required=True)

    list_parser = commands.add_parser("list", help="List accessible subdirectories")
    list_parser.add_argument("directory")
    list_parser.add_argument("--rights", type=str, default="list_directory")
    list_parser.add_argument(
        "--all", action="store_true", help="Report listable directories below denied ones too (ignores --rights)"
    )
    list_parser.set_defaults(handler=run_list)

    check_parser = commands.add_parser("check", help="Check access to a directory")
    check_parser.add_argument("directory")
    check_parser.add_argument("--rights", type=str, default="modify")
    check_parser.set_defaults(handler=run_check)

    locks_parser = commands.add_parser("locks", help="Show processes locking files in a directory")
    locks_parser.add_argument("directory")
    locks_parser.add_argument("--wait", action="store_true", help="Wait until the directory is unlocked")
    locks_parser.add_argument("--timeout", type=float, default=None, help="Seconds to wait before giving up (defaults to the configured timeout)")
    locks_parser.set_defaults(handler=run_locks)

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    settings = load_settings(Path(args.config) if args.config else None)
    access = DirectoryAccess(settings)
    sys.exit(args.handler(access, args))
