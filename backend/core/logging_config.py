"""
Loguru logging configuration.

- Colored console output in development, JSON lines elsewhere
- Rotating file sink under ``LOG_DIR``
- Correlation ID on every record
- Standard-library loggers (uvicorn, sqlalchemy) routed into loguru
"""

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from core.correlation import get_correlation_id

if TYPE_CHECKING:
    from loguru import Record

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[correlation_id]}</cyan> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def correlation_filter(record: "Record") -> bool:
    """Stamp the current correlation ID onto the record. Never drops it."""
    record["extra"]["correlation_id"] = get_correlation_id() or "-"
    return True


class InterceptHandler(logging.Handler):
    """Forward standard ``logging`` records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def configure_logging(
    environment: str = "development",
    log_dir: str = "logs",
    file_logging: bool = True,
) -> None:
    """
    Configure loguru sinks for the application.

    Args:
        environment: "development" for console output, anything else for JSON.
        log_dir: Directory for the rotating log file.
        file_logging: Disable to keep tests from writing log files.
    """
    logger.remove()
    is_dev = environment == "development"

    if is_dev:
        logger.add(
            sys.stderr,
            format=CONSOLE_FORMAT,
            level="DEBUG",
            filter=correlation_filter,
            colorize=True,
        )
    else:
        logger.add(
            sys.stderr,
            format="{message}",
            level="INFO",
            filter=correlation_filter,
            serialize=True,
        )

    if file_logging:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        logger.add(
            str(Path(log_dir) / "civicsync.log"),
            format=CONSOLE_FORMAT if is_dev else "{message}",
            level="INFO",
            filter=correlation_filter,
            rotation="10 MB",
            retention="7 days",
            serialize=not is_dev,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=logging.INFO, force=True)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False
