from __future__ import annotations
import logging
from rich.logging import RichHandler

_DEF_LEVEL = logging.WARNING
_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def setup_logging(verbosity: int = 0) -> RichHandler:
    """Route all logging through one RichHandler: -v for INFO (progress), -vv for DEBUG."""
    level = _LEVELS.get(verbosity, logging.DEBUG if verbosity > 1 else _DEF_LEVEL)
    root = logging.getLogger()
    root.setLevel(level)
    # re-init safe (pytest, repeated CLI invocations)
    for h in list(root.handlers):
        root.removeHandler(h)
    # sample ids and paths may contain [brackets]
    handler = RichHandler(rich_tracebacks=True, show_time=verbosity > 1, show_path=False, markup=False)
    root.addHandler(handler)
    logging.captureWarnings(True)
    return handler
