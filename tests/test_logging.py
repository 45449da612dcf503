import logging

from basketball_fusion.utils import setup_logging


def test_repeated_setup_closes_replaced_file_handler(tmp_path):
    logger = setup_logging("DEBUG", log_file=str(tmp_path / "first.log"))
    [old_file_handler] = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]

    logger = setup_logging("INFO", log_file=str(tmp_path / "second.log"))
    try:
        assert old_file_handler not in logger.handlers
        assert old_file_handler.stream is None
        assert len(logger.handlers) == 2
        assert logger.level == logging.INFO
    finally:
        setup_logging("WARNING")
