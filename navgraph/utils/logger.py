"""Utilities for logging.

Edge computation can run inside Dask workers, so every record carries the identity of the process that
emitted it.
"""

import logging
import socket
import sys
from datetime import datetime, timezone
from logging import LoggerAdapter

from dask import distributed

LOGGER_NAME = "navgraph"

# Set once per process, on the first log call.
_WORKER_ID_CACHE: str | None = None

# Maps (hostname, port) -> sequential worker number.
_WORKER_REGISTRY: dict[tuple[str, str], int] = {}
_NEXT_WORKER_NUM: int = 1


def _detect_worker_id_once() -> str:
    """Detect the identity of the current process.

    Returns:
        "hostname(N)" inside the N-th Dask worker seen by this process, "hostname-main" otherwise.
    """
    global _NEXT_WORKER_NUM

    hostname = socket.gethostname()
    try:
        worker = distributed.get_worker()
    except (ImportError, ValueError, AttributeError):
        return f"{hostname}-main"

    # Worker address has the format "tcp://130.207.121.32:40665".
    port = worker.address.split(":")[-1]
    key = (hostname, port)
    if key not in _WORKER_REGISTRY:
        _WORKER_REGISTRY[key] = _NEXT_WORKER_NUM
        _NEXT_WORKER_NUM += 1
    return f"{hostname}({_WORKER_REGISTRY[key]})"


def get_worker_id() -> str:
    """Get the cached worker id of the current process, e.g. "hornet(1)" or "eagle-main"."""
    global _WORKER_ID_CACHE

    if _WORKER_ID_CACHE is None:
        _WORKER_ID_CACHE = _detect_worker_id_once()
    return _WORKER_ID_CACHE


class WorkerAwareAdapter(LoggerAdapter):
    """LoggerAdapter that injects the worker id into every LogRecord.

    Detection is lazy: the Dask worker context is not available at import time, when module-level loggers
    are created.
    """

    def __init__(self, logger: logging.Logger) -> None:
        super().__init__(logger, {})

    def process(self, msg, kwargs):
        kwargs.setdefault("extra", {})["worker_id"] = get_worker_id()
        return msg, kwargs


class UTCFormatter(logging.Formatter):
    """Formatter with UTC timestamps."""

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return dt.strftime(datefmt or "%Y-%m-%d %H:%M:%S")


def get_logger() -> LoggerAdapter:
    """Get the package logger.

    Log format:
        "2025-10-28 00:00:45 [hornet(1)] [edge_calculator.py] INFO: message"

    Returns:
        Logger adapter which tags records with the worker id.
    """
    logger = logging.getLogger(LOGGER_NAME)

    if not logger.handlers:
        logger.setLevel(logging.INFO)
        handler = logging.StreamHandler(sys.stdout)
        fmt = "%(asctime)s [%(worker_id)s] [%(filename)s] %(levelname)s: %(message)s"
        handler.setFormatter(UTCFormatter(fmt, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)

    return WorkerAwareAdapter(logger)
