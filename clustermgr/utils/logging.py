"""
Logging setup for clustermgr.

Every component logs below the ``clustermgr`` logger; configuring that one
logger (console plus optional rotating file) covers connectors, managers and
observers alike.
"""
import inspect
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

DEFAULT_LOGGER_NAME = "clustermgr"

LOG_FORMAT = "{version} - %(cls)s - %(func)s - %(asctime)s - %(name)s - %(levelname)s - %(message)s"

LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


class ColoredFormatter(logging.Formatter):
    """Console formatter painting the level name by severity"""

    COLORS = {
        logging.DEBUG: '\033[2;36m',
        logging.INFO: '\033[0;32m',
        logging.WARNING: '\033[0;33m',
        logging.ERROR: '\033[0;31m',
        logging.CRITICAL: '\033[1;31m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        # other handlers share the record, so paint a copy
        painted = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelno, self.RESET)
        painted.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(painted)


class ContextFilter(logging.Filter):
    """Sets ``cls`` and ``func`` on each record from the frame that logged it"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.cls = None
        record.func = record.funcName

        frame = inspect.currentframe()
        try:
            while frame is not None:
                if frame.f_code.co_filename == record.pathname and frame.f_lineno == record.lineno:
                    owner = frame.f_locals.get('self')
                    if owner is not None:
                        record.cls = type(owner).__name__
                    break
                frame = frame.f_back
        finally:
            del frame
        return True


def setup_logger(
        version: str,
        name: str = DEFAULT_LOGGER_NAME,
        log_file: Optional[str] = None,
        level: int = logging.INFO,
) -> logging.Logger:
    """Attach console (and file) handlers to ``name`` once; later calls return it unchanged"""
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(level)
    fmt = LOG_FORMAT.format(version=version)
    # per handler, so records from child loggers get the context too
    context = ContextFilter()

    console = logging.StreamHandler()
    console.setFormatter(ColoredFormatter(fmt))
    console.addFilter(context)
    logger.addHandler(console)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(
            log_file,
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUPS,
            encoding='utf-8',
        )
        rotating.setFormatter(logging.Formatter(fmt))
        rotating.addFilter(context)
        logger.addHandler(rotating)

    return logger


def resolve_level(level: Union[int, str, None], enable_debug: bool = False) -> int:
    """Numeric level from a name such as ``"warning"``; debug mode wins, unknown names mean INFO"""
    if enable_debug:
        return logging.DEBUG
    if isinstance(level, str):
        return LEVEL_MAP.get(level.upper(), logging.INFO)
    return logging.INFO if level is None else level


def get_logger(
    version: str = "1.0.0",
    name: str = DEFAULT_LOGGER_NAME,
    log_file: Optional[str] = None,
    level: Union[int, str, None] = None,
    enable_debug: bool = False,
) -> logging.Logger:
    """
    Get the configured clustermgr logger.

    Args:
        version: Package version shown in every line
        name: Logger name (default: "clustermgr")
        log_file: Rotating log file; console only when omitted
        level: Level number or name (default: INFO)
        enable_debug: Force DEBUG regardless of ``level``
    """
    return setup_logger(version, name, log_file, level=resolve_level(level, enable_debug))


def get_logger_from_config(config) -> logging.Logger:
    """Logger configured from Settings (its ``log`` view) or LoggingSettings"""
    log_settings = getattr(config, 'log', config)

    from clustermgr import __version__

    return get_logger(
        version=__version__,
        log_file=log_settings.file,
        level=log_settings.level,
        enable_debug=log_settings.enable_debug,
    )
