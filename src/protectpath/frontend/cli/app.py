"""Command line front end.

    protectpath encrypt -i secret.txt -o secret.txt.enc -p "MyPassword123"
    protectpath decrypt -i secret.txt.enc -o secret.txt
    protectpath encrypt -i a.txt -i b.txt --workers 4 --remove-original
    protectpath info -i secret.txt.enc

Without -p the password comes from PROTECTPATH_PASSWORD or an interactive
prompt. Containers interoperate with the OpenSSL based reference script.
"""

from __future__ import annotations

import argparse
import getpass
import json
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from protectpath.core.batch import WorkItem, run_batch
from protectpath.core.config import Settings
from protectpath.core.exceptions import FileAccessError
from protectpath.core.models import OperationKind, OperationResult
from protectpath.core.storage import read_source
from protectpath.security.container import inspect
from protectpath.security.kdf import kdf_params_to_dict

from .logging_config import configure_logging, level_from_verbosity

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


class PasswordError(Exception):
    pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="protectpath",
        description="Encrypt or decrypt files with a password (salt + IV + AES-256-CBC).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    def common(p: argparse.ArgumentParser) -> None:
        p.add_argument("-i", "--input", dest="inputs", action="append", required=True,
                       help="input file; repeat for several files")
        p.add_argument("-v", "--verbose", action="count", default=0)

    for name in ("encrypt", "decrypt"):
        p = sub.add_parser(name, help=f"{name} files")
        common(p)
        p.add_argument("-o", "--output", default=None,
                       help="output file (single input only)")
        p.add_argument("-p", "--password", default=None)
        p.add_argument("--overwrite", action="store_true",
                       help="replace an existing output file")
        p.add_argument("--workers", type=int, default=None)
        p.add_argument("--fail-fast", action="store_true",
                       help="stop starting new files after the first failure")
        if name == "encrypt":
            p.add_argument("--remove-original", action="store_true",
                           help="delete each source after its container is written")

    p = sub.add_parser("info", help="show the non-secret layout of containers")
    common(p)
    return parser


def resolve_password(explicit: Optional[str], settings: Settings, confirm: bool) -> str:
    if explicit:
        return explicit
    if settings.password:
        return settings.password
    password = getpass.getpass("Enter password: ")
    if not password:
        raise PasswordError("Password cannot be empty")
    if confirm and getpass.getpass("Confirm password: ") != password:
        raise PasswordError("Passwords do not match")
    return password


def _format_result(result: OperationResult) -> str:
    if result.success:
        line = f"OK      {result.source} -> {result.destination} ({result.bytes_written} bytes)"
        if result.source_removed:
            line += ", original removed"
        return line
    kind = result.error_kind.value if result.error_kind else "error"
    return f"FAILED  {result.source}: {kind}: {result.error_message}"


def _run_info(inputs: Sequence[str]) -> int:
    code = EXIT_OK
    for raw in inputs:
        path = Path(raw)
        try:
            data = read_source(path)
        except FileAccessError as e:
            print(f"FAILED  {path}: io: {e}")
            code = EXIT_FAILED
            continue
        info = inspect(data)
        info["path"] = str(path)
        info["kdf"] = kdf_params_to_dict()
        print(json.dumps(info, indent=2))
        if not (info["valid_size"] and info["block_aligned"]):
            code = EXIT_FAILED
    return code


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = Settings.from_env()
    configure_logging(level_from_verbosity(args.verbose, settings.log_level))

    if args.command == "info":
        return _run_info(args.inputs)

    if args.output and len(args.inputs) > 1:
        parser.error("-o/--output can only be used with a single input")

    workers = args.workers if args.workers is not None else settings.workers
    if workers < 1:
        parser.error("--workers must be >= 1")

    kind = OperationKind(args.command)
    try:
        password = resolve_password(args.password, settings, confirm=kind is OperationKind.ENCRYPT)
    except PasswordError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    output = Path(args.output) if args.output else None
    items = [WorkItem(Path(raw), output) for raw in args.inputs]

    report = run_batch(
        kind,
        items,
        password,
        workers=workers,
        overwrite=args.overwrite,
        remove_original=getattr(args, "remove_original", False),
        fail_fast=args.fail_fast,
    )

    for result in report.results:
        print(_format_result(result))
    print(report.summary())
    return EXIT_OK if report.ok else EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
