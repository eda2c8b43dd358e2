from __future__ import annotations

import argparse
from pathlib import Path
import sys

from sfbackup.config import ConfigError, load_config
from sfbackup.log_setup import PROGRAM_NAME, configure_logging
from sfbackup.remap import parse_source_path, remap
from sfbackup.run_service import (
    EXIT_INVALID_CONFIG,
    EXIT_SUCCESS,
    run_backup_from_file,
)


def _default_parameter_file() -> Path:
    return Path.cwd() / f"{PROGRAM_NAME}.parms"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=PROGRAM_NAME, description="Incremental one-way directory mirror")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Mirror the configured source roots")
    run_parser.add_argument("--config", type=Path, default=None, help="Parameter file")
    run_parser.add_argument("--log-dir", type=Path, default=None, help="Directory for timestamped log files")
    run_parser.add_argument("--echo", action="store_true", help="Also write log records to stdout")
    run_parser.add_argument("--debug", action="store_true")
    run_parser.add_argument("--dry-run", action="store_true")

    validate_parser = subparsers.add_parser("validate-config", help="Validate the parameter file")
    validate_parser.add_argument("--config", type=Path, default=None)

    list_parser = subparsers.add_parser("list", help="List source roots and their target locations")
    list_parser.add_argument("--config", type=Path, default=None)

    return parser


def cmd_validate(config_path: Path) -> int:
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        print(f"Invalid config: {exc}", file=sys.stderr)
        return EXIT_INVALID_CONFIG

    print(f"Valid config: {config_path}")
    print(f"  sourceRoots={len(config.source_roots)} ({config.source_list_file})")
    for root in config.source_roots:
        print(f"    - {root}")
    print(f"  excludePrefixes={len(config.exclude_prefixes)} ({config.exclude_list_file})")
    for prefix in config.exclude_prefixes:
        print(f"    - {prefix}")
    print(f"  excludePatterns={len(config.exclude_patterns)}")
    print(f"  targetBase={config.target_base}")
    print(f"  followSymlinks={str(config.follow_symlinks).lower()}")
    return EXIT_SUCCESS


def cmd_list(config_path: Path) -> int:
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        print(f"Invalid config: {exc}", file=sys.stderr)
        return EXIT_INVALID_CONFIG

    for root in config.source_roots:
        parsed = parse_source_path(root)
        print(f"  - {root} [{parsed.designator}] -> {remap(root, config.target_base)}")
    return EXIT_SUCCESS


def cmd_run(config_path: Path, log_dir: Path | None, echo: bool, debug: bool, dry_run: bool) -> int:
    logger, log_file = configure_logging(log_dir=log_dir, echo=echo, debug=debug)
    if log_file is not None:
        print(f"Logging to {log_file}")
    exit_code, _ = run_backup_from_file(config_path, dry_run=dry_run, logger=logger)
    return exit_code


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    config_path = args.config or _default_parameter_file()

    if args.command == "validate-config":
        return cmd_validate(config_path)
    if args.command == "list":
        return cmd_list(config_path)
    if args.command == "run":
        return cmd_run(
            config_path=config_path,
            log_dir=args.log_dir,
            echo=args.echo,
            debug=args.debug,
            dry_run=args.dry_run,
        )

    parser.print_help()
    return EXIT_INVALID_CONFIG


if __name__ == "__main__":
    raise SystemExit(main())
