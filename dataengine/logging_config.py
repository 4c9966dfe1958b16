"""
Logging setup for the data engine.

Debug output goes to a dedicated file (LOG_DIR/debug.log) only when
debug mode is enabled; otherwise the package logger stays silent.
"""

import logging
from pathlib import Path

from dataengine.config import Config

LOGGER_NAME = 'dataengine'
LOG_FILE_NAME = 'debug.log'


def setup_logging(config=Config) -> logging.Logger:
    """
    Configure the `dataengine` logger.

    Args:
        config: Config class or instance (DEBUG_MODE, LOG_LEVEL, LOG_DIR)

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)

    # Idempotent: drop handlers installed by a previous call
    for handler in list(logger.handlers):
        if getattr(handler, '_dataengine_handler', False):
            logger.removeHandler(handler)
            handler.close()

    if not config.DEBUG_MODE:
        handler = logging.NullHandler()
        handler._dataengine_handler = True
        logger.addHandler(handler)
        return logger

    log_dir = Path(config.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        fmt="[%(asctime)s] [%(levelname)s]: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = logging.FileHandler(log_dir / LOG_FILE_NAME, encoding="utf-8")
    file_handler.setFormatter(formatter)
    file_handler._dataengine_handler = True
    logger.addHandler(file_handler)
    logger.setLevel(getattr(logging, str(config.LOG_LEVEL).upper(), logging.DEBUG))

    return logger
