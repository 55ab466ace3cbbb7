"""Console logging with Rich.

Created: 2026-10-12
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def setup_logging(level: str = "INFO") -> None:
    """Install a single RichHandler on the root logger.

    uvicorn's own handlers are removed so its records go through the same
    handler and formatting as the application's.
    """
    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level.upper())

    for name in _UVICORN_LOGGERS:
        uv_logger = logging.getLogger(name)
        uv_logger.handlers.clear()
        uv_logger.propagate = True

    # Noisy at DEBUG
    logging.getLogger("asyncio").setLevel(logging.WARNING)
