from __future__ import annotations

from pathlib import Path
import logging

from sfbackup.config import ConfigError, load_config
from sfbackup.metadata import MetadataProvider
from sfbackup.mirror_engine import MirrorRunOptions, run_backup
from sfbackup.models import RunContext


EXIT_SUCCESS = 0
EXIT_RUNTIME_OR_CONFIG_ERROR = 1
EXIT_PARTIAL_FAILURES = 2
EXIT_INVALID_CONFIG = 3


def run_backup_from_file(
    parameter_file: Path,
    dry_run: bool = False,
    provider: MetadataProvider | None = None,
    logger: logging.Logger | None = None,
) -> tuple[int, RunContext | None]:
    log = logger or logging.getLogger("sfbackup.run")

    log.info("Beginning program execution")
    log.info("Attempting to open %s", parameter_file)
    try:
        config = load_config(parameter_file)
    except ConfigError as exc:
        log.error("%s", exc)
        log.info("Terminating program execution")
        return EXIT_INVALID_CONFIG, None

    log.info("Source directory list is %s", config.source_list_file)
    log.info("Exclude directory list is %s", config.exclude_list_file)
    log.info("Target backup location is %s", config.target_base)
    log.info("%s validated as a directory structure", config.target_base)

    try:
        context = run_backup(config, MirrorRunOptions(dry_run=dry_run), provider=provider, logger=logger)
    except Exception as exc:
        log.error("Runtime error: %s", exc)
        log.info("Terminating program execution")
        return EXIT_RUNTIME_OR_CONFIG_ERROR, None

    log.info("Terminating program execution")
    exit_code = EXIT_PARTIAL_FAILURES if context.stats.partial_failures else EXIT_SUCCESS
    return exit_code, context
