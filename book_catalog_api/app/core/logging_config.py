"""
Logging setup for the catalog service.

Records go to stderr and, when a log file is configured, to a
size-rotated file as well.  The root logger is configured only if
nothing else (uvicorn, the test runner) has attached handlers first.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(threadName)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5


def resolve_level(level: Union[str, int]) -> int:
    """Map a level name such as ``"debug"`` to its number.

    Unknown names resolve to ``logging.INFO``.
    """
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def build_handlers(
    logfile: Optional[str] = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        path = Path(logfile).expanduser().resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            )
        )
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(
    level: Union[str, int] = "INFO",
    logfile: Optional[str] = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
) -> bool:
    """Configure the root logger once.

    Returns ``True`` when handlers were attached and ``False`` when the
    root logger already had handlers and was left untouched.
    """
    root = logging.getLogger()
    if root.handlers:
        return False
    root.setLevel(resolve_level(level))
    for handler in build_handlers(logfile, max_bytes, backup_count):
        root.addHandler(handler)
    return True
