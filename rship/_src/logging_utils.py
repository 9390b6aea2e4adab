import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: int | str = logging.WARNING) -> None:
    """Send rship's log records to stderr through rich.

    Calling this again only changes the level.
    """
    logger = logging.getLogger("rship")
    if isinstance(level, str):
        level = level.upper()
    logger.setLevel(level)

    if getattr(logger, "_rship_configured", False):
        return

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    setattr(logger, "_rship_configured", True)
