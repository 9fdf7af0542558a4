import logging
import sys
from pathlib import Path

from .config import LogConfig

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

# Third-party loggers held at LogConfig.library_level; paramiko logs every
# SSH negotiation step at INFO
LIBRARY_LOGGERS = ("paramiko",)


def _level(name: str, default: int) -> int:
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else default


def _attach(root_logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)


def setup_logging(config: LogConfig) -> None:
    """
    Configure the root logger for the locator and its hosts.

    Args:
        config: LogConfig object containing settings.

    Note:
        - Existing root handlers are replaced, so calling this twice is safe.
        - Library loggers never log below config.library_level, nor below
          the root level.
    """
    level = _level(config.level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if config.file:
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        _attach(root_logger, logging.FileHandler(log_path, mode="a", encoding="utf-8"), level)

    if config.console:
        _attach(root_logger, logging.StreamHandler(sys.stderr), level)

    library_level = max(level, _level(config.library_level, logging.WARNING))
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
