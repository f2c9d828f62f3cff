"""
Structured logging setup.

structlog renders through the stdlib logging tree so a file handler can keep
a timestamped error log next to the record store.
"""

import logging
import sys

import structlog

from heartpi.config import LoggingConfig

_FILE_HANDLER_NAME = "heartpi-error-log"


def configure_logging(config: LoggingConfig | None = None) -> None:
    """Configure structlog and the stdlib root logger from LoggingConfig."""
    config = config or LoggingConfig()

    renderer: structlog.types.Processor
    if config.format == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # No-op when the root logger already has handlers
    logging.basicConfig(format="%(message)s", stream=sys.stderr)
    root = logging.getLogger()
    root.setLevel(config.level)

    # Reconfiguring replaces the previous error log handler
    for handler in [h for h in root.handlers if h.get_name() == _FILE_HANDLER_NAME]:
        root.removeHandler(handler)
        handler.close()

    if config.enable_file_logging:
        file_handler = logging.FileHandler(config.log_file_path, encoding="utf-8", delay=True)
        file_handler.set_name(_FILE_HANDLER_NAME)
        file_handler.setLevel(logging.ERROR)
        file_handler.setFormatter(logging.Formatter("[ERROR!] %(asctime)s: %(message)s"))
        root.addHandler(file_handler)
