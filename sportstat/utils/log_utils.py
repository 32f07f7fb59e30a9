"""logging setup for the sportstat package"""
import sys
import logging

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logging(level=logging.INFO):
    """attach a stdout handler to the package logger, idempotent"""
    logger = logging.getLogger('sportstat')
    if not any(getattr(handler, '_sportstat', False) for handler in logger.handlers):
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        stream_handler._sportstat = True
        logger.addHandler(stream_handler)
    logger.setLevel(level)
    return logger
