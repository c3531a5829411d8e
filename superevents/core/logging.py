import sys
from typing import Optional
from loguru import logger
import os

def setup_logging(debug_mode: bool = True, log_dir: Optional[str] = None,
                  rotation: str = "10 MB", retention: str = "1 week"):
    """
    Configures Loguru logger.

    The library only logs through ``loguru.logger``; applications call this
    once at startup to choose sinks.
    """
    # Remove default handler
    logger.remove()

    # Console Handler
    level = "DEBUG" if debug_mode else "INFO"
    logger.add(sys.stderr, level=level, format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>")

    # File Handler
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        logger.add(os.path.join(log_dir, "superevents_{time}.log"), rotation=rotation, retention=retention, level="DEBUG")

    logger.info("Logging initialized.")
