import logging
import logging.handlers

from lingodrill.core.logging_config import setup_logging


def test_console_only_by_default():
    logger = setup_logging("debug")
    assert logger.level == logging.DEBUG
    assert [type(h) for h in logger.handlers] == [logging.StreamHandler]


def test_rotating_file_handler_when_dir_given(tmp_path):
    logger = setup_logging("INFO", str(tmp_path / "logs"))
    logger.info("hello")

    file_handlers = [h for h in logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
    assert len(file_handlers) == 1
    file_handlers[0].flush()
    assert "hello" in (tmp_path / "logs" / "lingodrill.log").read_text()

    # leave the shared logger as the app configured it
    for handler in file_handlers:
        handler.close()
    setup_logging()
