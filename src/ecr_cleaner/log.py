import sys

from loguru import logger


def configure_logging(level: str) -> None:
    """Replace loguru's default sink with a stderr sink at ``level``."""
    logger.remove()
    logger.add(sys.stderr, level=level)
