"""
Logging Configuration for the ARIMA Inflation Forecasting Engine

Provides one place to set up console/file logging and module-level loggers.
Library modules only create loggers; handlers are installed by the CLI
through configure_logging().
"""

import logging
import traceback
from datetime import datetime, timezone
from pathlib import Path


_VALID_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

_logger_instances = {}


class UTCFormatter(logging.Formatter):
    """
    Formats records as ``[TIMESTAMP] [LEVEL] [MODULE] - MESSAGE``.

    Example:
        [2026-01-15T18:48:45.262Z] [INFO] [arima_engine] - Selected ARIMA(1, 1, 0)
    """

    _COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    _RESET = '\033[0m'

    def __init__(self, use_color=False):
        super().__init__()
        self.use_color = use_color

    def format(self, record):
        timestamp = datetime.fromtimestamp(
            record.created,
            tz=timezone.utc
        ).isoformat(timespec='milliseconds').replace('+00:00', 'Z')

        # "arima_forecast.estimation" -> "estimation"
        module_name = record.name.rsplit('.', 1)[-1] or "root"

        level = f"[{record.levelname}]"
        if self.use_color:
            level = f"{self._COLORS.get(record.levelname, '')}{level}{self._RESET}"

        message = f"[{timestamp}] {level} [{module_name}] - {record.getMessage()}"
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


def configure_logging(log_level='INFO', log_file=None, color=True):
    """
    Setup centralized logging configuration.

    Installs a console handler (colored level names) and, when log_file is
    given, a plain-text file handler. Existing root handlers are replaced so
    repeated calls do not duplicate output.

    Args:
        log_level (str): DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_file (str, optional): Path to an additional log file
        color (bool): Colorize level names on the console

    Returns:
        logging.Logger: Configured root logger

    Raises:
        ValueError: If log_level is invalid
    """
    if not isinstance(log_level, str) or log_level.upper() not in _VALID_LEVELS:
        raise ValueError(
            f"Invalid log_level '{log_level}'. Must be one of: {', '.join(_VALID_LEVELS)}"
        )
    level = getattr(logging, log_level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(UTCFormatter(use_color=color))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, mode='a', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(UTCFormatter(use_color=False))
        root_logger.addHandler(file_handler)

        root_logger.info(f"Logging configured: level={log_level}, file={log_file}")
    else:
        root_logger.info(f"Logging configured: level={log_level}, console only")

    return root_logger


def get_logger(module_name):
    """
    Get a cached module-specific logger.

    Usage at module level:
        logger = get_logger(__name__)
    """
    if module_name in _logger_instances:
        return _logger_instances[module_name]

    logger = logging.getLogger(module_name)
    logger.propagate = True

    _logger_instances[module_name] = logger
    return logger


def log_exception(logger, exception):
    """
    Log exception type, message and the current traceback at ERROR level.

    Meant to be called from inside an ``except`` block:
        >>> try:
        ...     data = load_data(path)
        ... except Exception as e:
        ...     log_exception(logger, e)
        ...     raise
    """
    tb_str = traceback.format_exc()

    logger.error(
        f"Exception occurred: {type(exception).__name__}\n"
        f"Message: {str(exception)}\n"
        f"Traceback:\n{tb_str}"
    )
