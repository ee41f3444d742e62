"""CLI logging setup: plain console output plus a per-run transcript file."""

import logging
import os
import sys
from datetime import datetime

from hostdock.redact import SecretRedactingFilter

LOG_FILE_PREFIX = "deploy_"


def setup_cli_logging(level=logging.INFO):
    """Configure root logger with plain message format for CLI commands.

    Produces output identical to print(), so dry-run lines start with
    ``[dry-run]``.
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.addFilter(SecretRedactingFilter())
    root.addHandler(handler)


def log_file_name(now: datetime | None = None) -> str:
    """Transcript file name, timestamped to the second."""
    now = now or datetime.now()
    return f"{LOG_FILE_PREFIX}{now.strftime('%Y%m%d_%H%M%S')}.log"


def add_log_file(log_dir: str = ".") -> str:
    """Attach a file handler capturing the whole run.

    Returns:
        Path to the log file.
    """
    log_dir = os.path.expanduser(log_dir)
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, log_file_name())

    file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    file_handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    file_handler.addFilter(SecretRedactingFilter())
    logging.getLogger().addHandler(file_handler)

    return log_file
