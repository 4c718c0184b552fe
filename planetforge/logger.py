import logging
import os
import sys
from datetime import datetime


def setup_logger(level=logging.INFO, log_dir=None, log_name="planetforge"):
    """
    Configure the root logger for command-line runs.

    Writes to:
    1. The console (standard error), message only.
    2. A timestamped file in ``log_dir``, when one is given.

    The library modules only create loggers; handlers are attached here.
    """
    logger = logging.getLogger()
    logger.setLevel(level)

    # Clear existing handlers to prevent duplicate lines on repeated setup
    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logger.addHandler(console_handler)

    if log_dir is not None:
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = os.path.join(log_dir, f"{log_name}_{timestamp}.log")

        file_handler = logging.FileHandler(filename, mode='w')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        logger.addHandler(file_handler)
        logger.debug(f"Logging to: {filename}")

    return logger
