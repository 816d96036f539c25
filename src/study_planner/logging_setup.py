from __future__ import annotations

import logging
import sys


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the service log readable:
    - allow every study_planner log
    - let uvicorn access/error logs through
    - suppress other third-party noise (urllib3, httpx, ...) unless WARNING+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith("study_planner") or name.startswith("uvicorn"):
            return True
        return record.levelno >= logging.WARNING


_configured = False


def setup_logging(level: int = logging.INFO) -> None:
    """
    Configure a single stderr handler on the root logger.

    Safe to call more than once; later calls only change the level.
    """
    global _configured
    root = logging.getLogger()
    root.setLevel(level)
    if _configured:
        return

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(fmt)
    handler.addFilter(_ConsoleNoiseFilter())
    root.addHandler(handler)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)
    _configured = True
