"""
Logging setup.

Library modules only create module loggers; handlers are installed here,
once, by the CLI or an embedding application.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(
    level: str = "WARNING",
    verbose: bool = False,
    console: Optional[Console] = None
) -> None:
    """
    Route package logs through a rich handler.

    Args:
        level: Log level name for the package logger
        verbose: Force DEBUG regardless of level
        console: Optional console to render into (defaults to stderr)
    """
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    logger = logging.getLogger("contract_analysis")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else level.upper())
    logger.propagate = False
