"""Console and logging helpers shared by the CLI and the generator."""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

__all__ = ("FAIL", "INFO", "TICK", "WARN", "configure_logging", "console", "fmt_path")

TICK = "[bold green]✓[/]"
INFO = "[cyan]•[/]"
WARN = "[yellow]![/]"
FAIL = "[red]x[/]"

console = Console()


def fmt_path(path: Path) -> str:
    """Return a path relative to CWD when possible to keep logs short.

    Returns:
        The relative path string when possible, otherwise the absolute path string.
    """
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


def configure_logging(level: int) -> None:
    """Route the ``rustack`` logger through rich at the given level."""
    logger = logging.getLogger("rustack")
    logger.setLevel(level)
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(RichHandler(console=console, show_path=False, show_time=False, markup=True))
