"""
Logging Setup

structlog events rendered as JSON and routed through the standard library
so every line reads "{timestamp} - {LEVEL}: {message}" on the console and
in the local log file.
"""

import logging
import os
import sys

import structlog

from mailer.config import Settings, get_settings

LOG_FORMAT = "%(asctime)s - %(levelname)s: %(message)s"

# Marks handlers installed here so reconfiguration can replace them
_HANDLER_ATTR = "_mailer_handler"


def _build_handlers(settings: Settings) -> tuple[list[logging.Handler], str | None]:
    """Return the handlers to install and the file sink error, if any."""
    formatter = logging.Formatter(LOG_FORMAT)

    handlers: list[logging.Handler] = []
    # The Lambda runtime already attaches a root handler that writes to CloudWatch
    if not os.environ.get("AWS_LAMBDA_FUNCTION_NAME"):
        handlers.append(logging.StreamHandler(sys.stdout))

    file_error = None
    if settings.log_file_path:
        # Opened eagerly: FileHandler only guards writes, not a deferred open
        try:
            handlers.append(logging.FileHandler(settings.log_file_path))
        except OSError as e:
            file_error = str(e)

    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_ATTR, True)
    return handlers, file_error


def configure_logging(settings: Settings | None = None) -> None:
    """
    Configure structlog and the root logger.

    Safe to call more than once; handlers from a previous call are removed
    before the new ones are attached. Inside Lambda the runtime's own root
    handler is the console sink, so no stdout handler is added. A log file
    that cannot be opened is skipped with a warning. Write errors inside a
    handler go to Handler.handleError and never propagate to the caller.
    """
    settings = settings or get_settings()

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_ATTR, False):
            root.removeHandler(handler)
            handler.close()

    handlers, file_error = _build_handlers(settings)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(settings.log_level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if file_error:
        structlog.get_logger(__name__).warning(
            "log_file_unavailable",
            path=settings.log_file_path,
            error=file_error,
        )
