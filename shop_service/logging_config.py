# shop_service/logging_config.py
import logging
import sys

from pythonjsonlogger.json import JsonFormatter


def setup_logging(level: str = "INFO"):
    """JSON logging to stdout. Safe to call more than once."""
    logger = logging.getLogger()
    logger.setLevel(level)

    for handler in logger.handlers:
        if getattr(handler, "_shop_json", False):
            return logger

    log_handler = logging.StreamHandler(sys.stdout)
    formatter = JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s')
    log_handler.setFormatter(formatter)
    log_handler._shop_json = True
    logger.addHandler(log_handler)
    return logger
