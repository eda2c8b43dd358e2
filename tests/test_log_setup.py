from datetime import datetime
import logging
from pathlib import Path

from sfbackup.log_setup import build_log_file_name, configure_logging


def test_build_log_file_name_uses_program_dir_and_timestamp(tmp_path: Path) -> None:
    name = build_log_file_name(tmp_path, "sfbackup", datetime(2021, 4, 27, 7, 7, 7))

    assert name == tmp_path / "sfbackup" / "Log_20210427-070707.txt"


def test_configure_logging_replaces_handlers(tmp_path: Path) -> None:
    logger, _ = configure_logging(log_dir=tmp_path, program_name="sfbackup-test")
    logger, log_file = configure_logging(log_dir=tmp_path, echo=True, program_name="sfbackup-test")

    assert log_file is not None
    assert log_file.parent == tmp_path / "sfbackup-test"
    assert len(logger.handlers) == 2
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def test_configure_logging_writes_formatted_records(tmp_path: Path) -> None:
    logger, log_file = configure_logging(log_dir=tmp_path, debug=True, program_name="sfbackup-fmt")

    logging.getLogger("sfbackup-fmt.engine").debug("hello %s", "world")
    for handler in logger.handlers:
        handler.flush()

    assert log_file is not None
    line = log_file.read_text(encoding="utf-8").strip()
    assert line.endswith("sfbackup-fmt.engine DEBUG hello world")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
