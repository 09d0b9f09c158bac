from __future__ import annotations

import logging
import logging.handlers
import os

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_FILENAME = "reviewdesk.log"

# Every module logs under this name via logging.getLogger(__name__)
PACKAGE_LOGGER = "reviewdesk"
_HANDLER_NAMES = ("reviewdesk.console", "reviewdesk.file")


def configure_logging(
    *,
    log_dir: str,
    level: str = "INFO",
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> logging.Logger:
    """Send ``reviewdesk.*`` records to the console and ``<log_dir>/reviewdesk.log``.

    Handlers installed by an earlier call are replaced, so the app factory
    and tests can reconfigure freely. Records do not propagate to the root
    logger, which uvicorn and pytest set up on their own.
    """
    os.makedirs(log_dir, exist_ok=True)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    package_logger.propagate = False

    for handler in list(package_logger.handlers):
        if handler.name in _HANDLER_NAMES:
            package_logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console = logging.StreamHandler()
    console.set_name("reviewdesk.console")
    console.setFormatter(formatter)

    file_handler = logging.handlers.RotatingFileHandler(
        filename=os.path.join(log_dir, LOG_FILENAME),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.set_name("reviewdesk.file")
    file_handler.setFormatter(formatter)

    package_logger.addHandler(console)
    package_logger.addHandler(file_handler)

    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    return package_logger
