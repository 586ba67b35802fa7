"""causalbn observability: structured logging.

    setup_logging(cfg)           attach the causalbn handler to the root logger
    shutdown_logging()           detach it again
    get_logger(name)             structlog logger with key=value context
    register_formatter(n, cls)   add a LogFormatter by name
    register_destination(n, cls) add a LogDestination by name
"""

from causalbn.observability.config import LoggingConfig
from causalbn.observability.logging import (
    LogDestination,
    LogFormatter,
    get_logger,
    register_destination,
    register_formatter,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "setup_logging",
    "shutdown_logging",
    "get_logger",
    "LogFormatter",
    "LogDestination",
    "register_formatter",
    "register_destination",
]
