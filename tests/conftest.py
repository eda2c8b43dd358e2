import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_sfbackup_logger():
    yield
    logger = logging.getLogger("sfbackup")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
