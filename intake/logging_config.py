"""Logging configuration for the intake service."""
import logging
import logging.handlers
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are chatty at INFO (HTTP calls to the scoring
# service, SQL echo, PDF parser warnings, scheduler ticks)
QUIET_LOGGERS = ("httpx", "httpcore", "openai", "sqlalchemy", "pypdf", "apscheduler")


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    force: bool = False,
) -> None:
    """Configure logging for the poller and operator scripts.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path for a rotating log file
        force: Replace handlers installed by an earlier call
    """
    root = logging.getLogger()

    if root.handlers and not force:
        return
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                path,
                maxBytes=10 * 1024 * 1024,  # 10 MB
                backupCount=5,
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
