"""Configurazione dei log strutturati (structlog sopra il logging standard)."""

import logging
import sys

import structlog

ROOT_LOGGER = "fiscalcode"


def get_logger(name: str):
    """
    Logger del pacchetto. Gli eventi passano per `logging.getLogger(name)`:
    finché l'applicazione non configura un handler non viene scritto nulla.
    """
    return structlog.wrap_logger(logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger)


def setup_logging(level: str = "WARNING") -> None:
    """Configura structlog: log leggibili su stderr, filtrati per livello."""
    numeric_level = logging.getLevelName(str(level).upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.WARNING
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        cache_logger_on_first_use=False,
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers[:] = [handler]
    logger.setLevel(numeric_level)
    logger.propagate = False
