"""Logging configuration for the phrasecore command line."""
import logging
from typing import Union

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: Union[int, str] = logging.WARNING) -> None:
    """
    Configure the root logger to emit through rich on stderr.

    Safe to call more than once: the handler installed by a previous call is
    replaced rather than duplicated.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in list(root_logger.handlers):
        if isinstance(handler, RichHandler):
            root_logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root_logger.addHandler(handler)

    # Keep third-party libraries quiet
    logging.getLogger("duckdb").setLevel(logging.WARNING)
