"""Console logging with an optional mirrored log file."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

LOG_LEVELS: dict[str, int] = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class MirrorFileHandler(logging.FileHandler):
    """File handler that disables itself after the first write failure.

    The failure is reported once as a warning through the remaining handlers
    instead of a traceback on stderr.
    """

    def __init__(self, filename: Path) -> None:
        super().__init__(filename, mode="a", encoding="utf-8")
        self.failed = False

    def emit(self, record: logging.LogRecord) -> None:
        if self.failed:
            return
        super().emit(record)

    def handleError(self, record: logging.LogRecord) -> None:  # noqa: N802
        self.failed = True
        logger.warning("[MirrorFileHandler] log file write failed; file:%s", self.baseFilename)


def configure_logging(level_name: str = "info", log_file: Path | None = None) -> None:
    """Configure root logging for a command-line run.

    Args:
        level_name: Logging level (debug, info, warning, error).
        log_file: Optional path that receives a copy of every log line.

    Raises:
        ValueError: If ``level_name`` is not a known level.
    """
    level = LOG_LEVELS.get(level_name.lower())
    if level is None:
        valid = ", ".join(sorted(LOG_LEVELS))
        raise ValueError(f"Invalid log level '{level_name}'. Choose from: {valid}")

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    for name in ("msal", "azure", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)

    if log_file is None:
        return
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = MirrorFileHandler(log_file)
    except OSError as exc:
        logger.warning("[configure_logging] cannot open log file; file:%s;error:%s", log_file, exc)
        return
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)