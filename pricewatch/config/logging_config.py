# pricewatch/config/logging_config.py

"""Per-command logging for pricewatch.

Every CLI invocation writes a DEBUG log to ``logs/run_<timestamp>.log``
and shows records at or above ``Settings.CONSOLE_LOG_LEVEL`` on stderr
through rich.  Only the newest ``Settings.LOG_RETENTION`` run logs are
kept.
"""

import logging
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from pricewatch.config.settings import Settings

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(threadName)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_RUN_LOG_GLOB = "run_*.log"


def _prune_run_logs(directory: Path, keep: int) -> list[Path]:
    """Delete the oldest run logs so at most *keep* remain.

    Run log names embed their timestamp, so name order is age order.
    Returns the paths that were removed.
    """
    run_logs = sorted(directory.glob(_RUN_LOG_GLOB))
    stale = run_logs[:-keep] if keep > 0 else run_logs
    removed: list[Path] = []
    for path in stale:
        try:
            path.unlink()
        except OSError:
            continue
        removed.append(path)
    return removed


def _console_level(level: str | int | None) -> int:
    if isinstance(level, int):
        return level
    name = (level or Settings.CONSOLE_LOG_LEVEL).upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.WARNING


def setup_logging(
    logs_dir: Path | None = None,
    console_level: str | int | None = None,
) -> Path:
    """Attach the run-file and stderr handlers to the ``pricewatch`` logger.

    Safe to call more than once: later calls return a fresh path but
    leave the existing handlers in place.
    """
    directory: Path = logs_dir or Settings.LOGS_DIR
    directory.mkdir(parents=True, exist_ok=True)
    log_file = directory / f"run_{datetime.now():%Y%m%d_%H%M%S}.log"

    project_logger = logging.getLogger("pricewatch")
    project_logger.setLevel(logging.DEBUG)
    if project_logger.handlers:
        return log_file

    # Leave room for the file this run is about to create
    removed = _prune_run_logs(directory, max(Settings.LOG_RETENTION - 1, 0))

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = RichHandler(
        console=Console(stderr=True),
        level=_console_level(console_level),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )

    project_logger.addHandler(file_handler)
    project_logger.addHandler(console_handler)

    project_logger.info("Run log: %s", log_file)
    if removed:
        project_logger.debug("Pruned %d old run logs", len(removed))
    return log_file
