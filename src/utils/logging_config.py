import sys
from pathlib import Path
from loguru import logger

from src.utils.logging_utils import add_optional_sinks, env_log_level


def configure_logger(debug: bool = False, log_file: str = "listing_extractor.log"):
    """
    Configure loguru for the whole service.

    The debug flag forces DEBUG on both sinks; otherwise LOG_LEVEL (default INFO) applies.
    """
    level = "DEBUG" if debug else env_log_level("INFO")

    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)

    # Remove default handler to avoid duplicate logs
    logger.remove()

    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | {extra} - <level>{message}</level>",
        level=level
    )

    logger.add(
        log_dir / log_file,
        rotation="10 MB",
        retention="10 days",
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {extra} - {message}",
        backtrace=True,
        diagnose=debug
    )

    add_optional_sinks()


_configured = False


def setup_default_logging(debug: bool = False):
    global _configured
    if not _configured:
        configure_logger(debug=debug)
        _configured = True
