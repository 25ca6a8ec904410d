"""Logging setup."""

import logging

from rich.logging import RichHandler

from ricknad.config import settings

_configured = False


def setup_logging(level: str | None = None) -> None:
    """Attach a rich handler to the root logger once."""
    global _configured
    level = level or settings.log_level

    if _configured:
        logging.getLogger().setLevel(level)
        return

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
    _configured = True
