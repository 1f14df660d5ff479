import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from ledger.config import settings


def setup_logger() -> logging.Logger:
    """
    Set up a rotating file logger for API requests.

    Written by RequestLoggingMiddleware only; the ledger core never logs.

    Returns:
        logging.Logger: Configured logger instance
    """
    logs_dir = Path(settings.LOG_DIR)
    logs_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("api_requests")
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))

    # Prevent duplicate handlers if logger already exists
    if logger.handlers:
        return logger

    file_handler = RotatingFileHandler(
        filename=logs_dir / "api_requests.log",
        maxBytes=settings.LOG_MAX_SIZE_MB * 1024 * 1024,
        backupCount=settings.LOG_MAX_FILES,
        encoding="utf-8",
    )
    file_handler.setFormatter(
        logging.Formatter(
            fmt="[%(asctime)s.%(msecs)03d] %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )
    )
    logger.addHandler(file_handler)

    return logger


def setup_app_logger() -> logging.Logger:
    """
    Set up a logger for application events and errors that outputs to stdout.

    Used for startup/shutdown and for backing-store failures surfaced to
    clients as 5xx responses.

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger("app_errors")
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))

    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        logging.Formatter(
            fmt="[%(asctime)s] [%(levelname)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(console_handler)

    return logger


# Create global logger instances
api_logger = setup_logger()
app_logger = setup_app_logger()
