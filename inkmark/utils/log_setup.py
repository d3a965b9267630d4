"""
structlog configuration for applications embedding the annotator.
"""
import logging
import sys

import structlog


def configure_logging(level: int = logging.INFO, json: bool = False) -> None:
    """
    Route structlog through the standard library logging module.

    Should be called once at application start-up.

    Args:
        level: Minimum level to emit
        json: Render JSON lines instead of the console format
    """
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
