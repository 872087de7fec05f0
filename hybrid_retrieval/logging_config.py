"""Logging setup: brief console output plus a detailed per-session rotating file"""
import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, Union

CONSOLE_FORMAT = "%(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"

# Chatty libraries: WARNING and above only
NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "asyncpg", "google_genai")


def _prune_sessions(log_dir: Path, stem: str, keep: int):
    """Delete older session logs so that `keep` remain after the new one is created"""
    sessions = sorted(log_dir.glob(f"{stem}_*.log"), reverse=True)  # Newest first
    for old_log in sessions[max(keep - 1, 0):]:
        try:
            old_log.unlink()
        except OSError:
            pass


def setup_logging(
    log_file: str = "logs/hybrid-retrieval.log",
    console_level: Union[int, str] = logging.INFO,
    file_level: Union[int, str] = logging.DEBUG,
    keep_sessions: int = 5,
    quiet_loggers: Iterable[str] = NOISY_LOGGERS,
) -> Path:
    """
    Configure root logging for the API server.

    Each process start writes to its own timestamped file next to `log_file`
    (e.g. logs/hybrid-retrieval_20250101_120000.log), rotated at 10MB.

    Args:
        log_file: Base log path; the session timestamp is appended to its stem
        console_level: Console logging level (name or number)
        file_level: File logging level (name or number)
        keep_sessions: Number of session files retained, including this one
        quiet_loggers: Loggers raised to WARNING

    Returns:
        Path of this session's log file
    """
    base = Path(log_file)
    base.parent.mkdir(parents=True, exist_ok=True)
    _prune_sessions(base.parent, base.stem, keep_sessions)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    session_log = base.parent / f"{base.stem}_{timestamp}.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Filter in handlers
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root_logger.addHandler(console_handler)

    file_handler = RotatingFileHandler(
        session_log,
        mode="a",
        maxBytes=10 * 1024 * 1024,
        backupCount=10,
        encoding="utf-8",
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root_logger.addHandler(file_handler)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.info(
        f"Logging configured: console={logging.getLevelName(console_handler.level)}, "
        f"file={session_log} ({logging.getLevelName(file_handler.level)})"
    )
    return session_log
