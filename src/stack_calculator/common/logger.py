"""Loggers used across the calculator service."""
from contextvars import ContextVar
import logging
from pathlib import Path
import sys
from typing import Dict, Optional


LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s | request #%(request_num)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Levels that can be set at runtime through the /logs/level endpoint
SETTABLE_LEVELS = ("ERROR", "INFO", "DEBUG")

# Number of the request currently being served (0 outside of a request)
request_number: ContextVar[int] = ContextVar("request_number", default=0)


class RequestNumberFilter(logging.Filter):
    """Stamp every record with the number of the request being served."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_num"):
            record.request_num = request_number.get()
        return True


def _build_logger(
    name: str,
    level: int,
    filename: Optional[str] = None,
    log_dir: Optional[Path] = None,
    to_stdout: bool = False,
) -> logging.Logger:
    """
    Create (or reset) a named logger writing to ``log_dir/filename`` and/or stdout.

    Handlers are replaced on every call so reconfiguring never duplicates lines.

    :param str name: Logger name
    :param int level: Initial level
    :param str filename: File name inside ``log_dir``
    :param Path log_dir: Directory for the log file, no file handler if None
    :param bool to_stdout: Also write to stdout

    :return: Configured logger
    :rtype: logging.Logger
    """
    named = logging.getLogger(name)
    for handler in list(named.handlers):
        named.removeHandler(handler)
        handler.close()
    named.setLevel(level)
    named.propagate = False

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    request_filter = RequestNumberFilter()

    if log_dir is not None and filename is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / filename, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler.addFilter(request_filter)
        named.addHandler(file_handler)

    if to_stdout or log_dir is None:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(formatter)
        console.addFilter(request_filter)
        named.addHandler(console)

    return named


logger = logging.getLogger("stack_calculator")
request_logger = logging.getLogger("request-logger")
stack_logger = logging.getLogger("stack-logger")
independent_logger = logging.getLogger("independent-logger")

LOGGERS: Dict[str, logging.Logger] = {
    "request-logger": request_logger,
    "stack-logger": stack_logger,
    "independent-logger": independent_logger,
}


def configure_logging(log_dir: Optional[Path] = None) -> None:
    """
    Attach handlers to the service loggers.

    :param Path log_dir: Directory for ``requests.log``, ``stack.log`` and
        ``independent.log``; console only when None
    """
    _build_logger("stack_calculator", logging.INFO, "calculator.log", log_dir, to_stdout=True)
    _build_logger("request-logger", logging.INFO, "requests.log", log_dir, to_stdout=True)
    _build_logger("stack-logger", logging.INFO, "stack.log", log_dir)
    _build_logger("independent-logger", logging.DEBUG, "independent.log", log_dir)


def get_level(logger_name: str) -> Optional[str]:
    """Return the level name of a service logger, None if there is no such logger."""
    named = LOGGERS.get(logger_name)
    if named is None:
        return None
    return logging.getLevelName(named.level)


def set_level(logger_name: str, level_name: str) -> None:
    """
    Change the level of a service logger at runtime.

    :param str logger_name: One of :data:`LOGGERS`
    :param str level_name: One of :data:`SETTABLE_LEVELS`
    :raises KeyError: If the logger does not exist
    :raises ValueError: If the level is not settable
    """
    named = LOGGERS[logger_name]
    if level_name not in SETTABLE_LEVELS:
        raise ValueError(f"Invalid logger level: {level_name}")
    named.setLevel(getattr(logging, level_name))
