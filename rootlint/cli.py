"""Command-line entry point for rootlint."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, TextIO

from . import __version__
from .config import ConfigError, LintConfig, load_config
from .engine import LIST_FORMATS, lint, list_rules
from .result import ChecksFailed, LintRuntimeError
from .rules import REGISTRY
from .severity import RootType
from .utils.rootfs import RootDir

DEFAULT_ROOTFS = "/"

EXIT_OK = 0
EXIT_CHECKS_FAILED = 1
EXIT_ERROR = 2

logger = logging.getLogger("rootlint.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rootlint",
        description="Check a bootable root filesystem for structural problems",
    )
    parser.add_argument(
        "--rootfs",
        default=DEFAULT_ROOTFS,
        help="Root filesystem to lint (defaults to the running root, /).",
    )
    parser.add_argument(
        "--fatal-warnings",
        action="store_true",
        help="Make warnings count as failures.",
    )
    parser.add_argument(
        "--skip",
        dest="skip",
        action="append",
        default=[],
        metavar="NAME",
        help="Skip the named rule (repeatable).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file with 'skip' and 'fatal-warnings' settings.",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List all registered rules and exit.",
    )
    parser.add_argument(
        "--format",
        choices=LIST_FORMATS,
        default="yaml",
        help="Output format for --list (defaults to yaml).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log passing rules and walk details to stderr.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def resolve_root_type(root: RootDir) -> RootType:
    if root.is_running_root:
        return RootType.RUNNING
    return RootType.ALTERNATIVE


def run_lint(rootfs: str, config: LintConfig, output: TextIO) -> int:
    unknown = sorted(name for name in config.skip if name not in REGISTRY)
    if unknown:
        sys.stderr.write(f"error: Unknown rule name(s) to skip: {', '.join(unknown)}\n")
        return EXIT_ERROR

    if not os.path.isdir(rootfs):
        sys.stderr.write(f"error: Not a directory: {rootfs}\n")
        return EXIT_ERROR
    root = RootDir(rootfs)
    root_type = resolve_root_type(root)
    logger.debug("Linting %s as %s root", rootfs, root_type.value)
    try:
        lint(root, config.warning_disposition, root_type, config.skip, output)
    except ChecksFailed as exc:
        sys.stderr.write(f"error: Linting: {exc}\n")
        return EXIT_CHECKS_FAILED
    except (LintRuntimeError, OSError) as exc:
        sys.stderr.write(f"error: Linting: {exc}\n")
        return EXIT_ERROR
    return EXIT_OK


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.list:
        list_rules(sys.stdout, args.format)
        return EXIT_OK

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return EXIT_ERROR
    config = config.merged(skip=args.skip, fatal_warnings=args.fatal_warnings)
    return run_lint(args.rootfs, config, sys.stdout)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
