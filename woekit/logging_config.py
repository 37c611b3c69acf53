"""
Logging configuration for woekit.

Library modules log through loguru's ``logger``. Call ``setup_logger`` once in
a script or test session to route the output through a RichHandler.
"""

from loguru import logger
from rich.logging import RichHandler


def setup_logger(level: str = "INFO") -> None:
    """
    Configure logger with RichHandler for formatted console output.

    Parameters
    ----------
    level : str, default="INFO"
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Examples:
    --------
    >>> from woekit.logging_config import setup_logger, logger
    >>> setup_logger(level="DEBUG")
    >>> logger.debug("Fitting WOE tables...")
    """
    # Remove default handler
    logger.remove()

    logger.add(
        RichHandler(markup=True, rich_tracebacks=True),
        format="{message}",
        level=level,
    )


__all__ = ["logger", "setup_logger"]
