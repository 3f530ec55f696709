"""Logging setup for served apps.

Library code only ever calls ``logging.getLogger("wren.*")``; handlers
are attached here by ``App.run``.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "info", *, trace: bool = False) -> logging.Logger:
    """Send ``wren.*`` records to stdout at *level*.

    Trace lines are logged at INFO on ``wren.trace``; when *trace* is on
    that logger is opened up even if *level* is stricter.
    """
    root = logging.getLogger("wren")
    root.setLevel(level.upper())

    existing = [h for h in root.handlers if getattr(h, "_wren", False)]
    if existing:
        # sys.stdout may have been swapped since the last call
        for handler in existing:
            handler.setStream(sys.stdout)  # type: ignore[attr-defined]
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        handler._wren = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    trace_logger = logging.getLogger("wren.trace")
    trace_logger.setLevel(logging.INFO if trace else logging.NOTSET)
    return root
