import logging

from rich.logging import RichHandler

from lingo_tutor.logging_config import setup_logging


def test_setup_logging_writes_log_file(tmp_path):
    logger = setup_logging(log_level="info", log_dir=tmp_path)
    assert logger.level == logging.INFO
    assert any(isinstance(h, RichHandler) for h in logger.handlers)
    logging.getLogger("lingo_tutor.catalog").info("catalog loaded")
    for handler in logger.handlers:
        handler.flush()
    assert "catalog loaded" in (tmp_path / "tutor.log").read_text(encoding="utf-8")


def test_setup_logging_without_file(tmp_path):
    logger = setup_logging(log_dir=None)
    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING


def test_setup_logging_is_repeatable(tmp_path):
    setup_logging(log_dir=tmp_path)
    logger = setup_logging(log_dir=tmp_path)
    assert len(logger.handlers) == 2
