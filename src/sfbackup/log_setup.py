from __future__ import annotations

from datetime import datetime
import logging
from pathlib import Path
import sys


PROGRAM_NAME = "sfbackup"
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def build_log_file_name(log_dir: Path, program_name: str = PROGRAM_NAME, now: datetime | None = None) -> Path:
    """Return ``<log_dir>/<program_name>/Log_<YYYYMMDD-HHMMSS>.txt``."""
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return log_dir / program_name / f"Log_{stamp}.txt"


def configure_logging(
    log_dir: Path | None = None,
    echo: bool = False,
    debug: bool = False,
    program_name: str = PROGRAM_NAME,
) -> tuple[logging.Logger, Path | None]:
    logger = logging.getLogger(program_name)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    log_file: Path | None = None

    if log_dir is not None:
        log_file = build_log_file_name(log_dir, program_name)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if echo:
        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setFormatter(formatter)
        logger.addHandler(stdout_handler)

    if log_dir is None and not echo:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(formatter)
        logger.addHandler(stderr_handler)

    return logger, log_file
