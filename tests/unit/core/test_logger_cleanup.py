"""Tests for logger cleanup cascade via BaseCloseable."""

import pytest

from baladocs.core.config import Config
from baladocs.core.log import ConsoleSink, FileSink, Logger, LogfireSink


def make_logger(tmp_path, name="test.log"):
    return Logger(
        console=ConsoleSink(enabled=False),
        file=FileSink(enabled=True, path=str(tmp_path / name)),
        logfire=LogfireSink(enabled=False),
    )


def test_logger_closes_file_via_context_manager(tmp_path):
    logger = make_logger(tmp_path)
    logger.setup(log_root=tmp_path)

    assert logger.file._file is not None
    assert not logger.file._file.closed

    with logger:
        logger.info("test message")

    assert logger.file._file.closed


def test_logger_closes_on_exception(tmp_path):
    logger = make_logger(tmp_path)
    logger.setup(log_root=tmp_path)

    with pytest.raises(ValueError), logger:
        logger.info("before exception")
        raise ValueError("test exception")

    assert logger.file._file.closed


def test_config_cascade_closes_logger(tmp_path):
    """Config.close() reaches the sinks through Logger."""
    config = Config(logger=make_logger(tmp_path, "cascade.log"))
    config.logger.setup(log_root=tmp_path)

    assert not config.logger.file._file.closed

    config.close()

    assert config.logger.file._file.closed


def test_file_written_and_flushed_on_close(tmp_path):
    log_file = tmp_path / "written.log"
    logger = make_logger(tmp_path, "written.log")
    logger.setup(log_root=tmp_path)

    with logger:
        logger.info("bala fetched", url="https://example.com/x.bala")

    content = log_file.read_text()
    assert "bala fetched" in content
    assert "url='https://example.com/x.bala'" in content


def test_file_sink_level_filter(tmp_path):
    log_file = tmp_path / "filtered.log"
    logger = Logger(
        level="warn",
        console=ConsoleSink(enabled=False),
        file=FileSink(enabled=True, path=str(log_file)),
        logfire=LogfireSink(enabled=False),
    )
    logger.setup(log_root=tmp_path)

    with logger:
        logger.info("quiet detail")
        logger.warn("cleanup problem")

    content = log_file.read_text()
    assert "cleanup problem" in content
    assert "quiet detail" not in content


def test_file_path_template(tmp_path):
    logger = Logger(
        console=ConsoleSink(enabled=False),
        file=FileSink(enabled=True),
        logfire=LogfireSink(enabled=False),
    )
    logger.setup(log_root=tmp_path / "logs")

    with logger:
        logger.info("hello")

    assert (tmp_path / "logs" / "baladocs.log").exists()
