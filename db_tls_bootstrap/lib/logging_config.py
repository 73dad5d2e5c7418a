"""JSON logging for TLS bootstrap.

Each record carries timestamp, level, logger name, message and source
location. Key material and service tokens are never passed to the logger.
"""

import logging

from pythonjsonlogger import jsonlogger

LOGGER_NAME = "db_tls_bootstrap"

LOG_FIELDS = frozenset({"timestamp", "level", "logger", "message", "funcName", "lineno", "exc_info"})


class BootstrapJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter emitting only LOG_FIELDS."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["funcName"] = record.funcName
        log_record["lineno"] = record.lineno

        for key in set(log_record) - LOG_FIELDS:
            del log_record[key]


def set_verbose(verbose: bool) -> None:
    """Log at DEBUG when verbose, INFO otherwise."""
    LOGGER.setLevel(logging.DEBUG if verbose else logging.INFO)


def _build_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(BootstrapJsonFormatter("%(message)s", timestamp=True))
        logger.addHandler(handler)

    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


LOGGER = _build_logger()
