"""structlog setup shared by the engine, the HTTP handler and scripts."""

import logging

import structlog


def setup_logging(log_level: str = "INFO") -> structlog.stdlib.BoundLogger:
    """Configure structlog to render JSON lines through stdlib logging."""
    logging.basicConfig(level=log_level.upper(), format="%(message)s")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(log_level.upper())
        ),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
