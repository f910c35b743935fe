"""Logging setup: a single Rich handler on the root logger"""

import logging

from rich.console import Console
from rich.logging import RichHandler


console = Console(stderr=True)


class _ManagedHandler(RichHandler):
    """Marks the handler postpub installed so repeat calls reuse it."""


def configure_logging(level: str = "WARNING") -> None:
    """Install the Rich handler once and set the root level."""
    root = logging.getLogger()
    if not any(isinstance(h, _ManagedHandler) for h in root.handlers):
        handler = _ManagedHandler(console=console, show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))
