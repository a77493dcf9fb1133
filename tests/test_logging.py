import sys

import pytest
from loguru import logger

from mongotree.core.logging import setup_logging


@pytest.fixture
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_setup_logging_writes_log_file(tmp_path, restore_logger):
    log_dir = tmp_path / "logs"
    setup_logging(debug_mode=True, log_dir=str(log_dir))

    logger.debug("debug line reaches the file sink")
    logger.remove()

    files = list(log_dir.glob("mongotree_*.log"))
    assert len(files) == 1
    assert "debug line reaches the file sink" in files[0].read_text()


def test_setup_logging_console_only(tmp_path, restore_logger):
    setup_logging()
    assert not any(tmp_path.iterdir())
