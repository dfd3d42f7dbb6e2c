"""Logging setup for the recette CLI.

Log records go to stderr through a Rich handler so that stdout stays
clean for --json output and for `recette sql`.
"""

import logging
from enum import IntEnum

from rich.console import Console
from rich.logging import RichHandler

# PDF backend libraries that log layout details at INFO.
NOISY_LOGGERS = ("weasyprint", "fontTools")


class LogLevel(IntEnum):
    """Levels selected by the CLI flags."""

    QUIET = logging.WARNING
    NORMAL = logging.INFO
    VERBOSE = logging.DEBUG


def _level_for(verbosity: int, quiet: bool, debug: bool) -> LogLevel:
    if quiet:
        return LogLevel.QUIET
    if debug or verbosity >= 1:
        return LogLevel.VERBOSE
    return LogLevel.NORMAL


def configure_logging(
    verbosity: int = 0,
    quiet: bool = False,
    no_color: bool = False,
    debug: bool = False,
) -> Console:
    """Install the Rich log handler for one CLI invocation.

    Args:
        verbosity: Count of -v flags; -vv also shows times and source paths
        quiet: Only warnings and errors, whatever the other flags say
        no_color: Disable colored log output
        debug: Same as -vv

    Returns:
        The stderr console the handler writes to
    """
    level = _level_for(verbosity, quiet, debug)
    detailed = debug or verbosity >= 2

    console = Console(stderr=True, force_terminal=not no_color, no_color=no_color)
    handler = RichHandler(console=console, show_time=detailed, show_path=detailed)
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)

    backend_level = logging.DEBUG if detailed else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(backend_level)

    return console
