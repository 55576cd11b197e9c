"""
Logging for tilecollapse runs.

Every solve leaves a trace in <log_dir>/debug.log, one pipe-delimited line
per event:

    STEP 00012 | COLLAPSE | (3, 4) -> road_rl | remaining=36
    STEP 00013 | CONTRADICTION | (4, 4)
    ATTEMPT 2/10 | FAILED | contradiction at (4, 4) after 13 steps

Collapses are DEBUG and only reach the file. Contradictions and failed
attempts are WARNING and also show on stderr, so a CLI user sees restarts
without the per-step noise (pass --debug to the CLI to see everything).

Usage:
    from tilecollapse.logging_config import setup_logging
    setup_logging(log_dir)  # Once, before the first solve
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from datetime import datetime

from tilecollapse.core.types import Position


ROOT_LOGGER_NAME = "tilecollapse"
LOG_FILE_NAME = "debug.log"
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB per file
BACKUP_COUNT = 5

# Width the logger name is padded to; fits "tilecollapse.generation.wfc.solver"
NAME_WIDTH = 36

_logging_initialized = False


def _file_handler(log_file: Path, level: int) -> logging.Handler:
    """Rotating handler for the full step-by-step trace."""
    handler = RotatingFileHandler(
        log_file,
        maxBytes=MAX_LOG_SIZE,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        fmt=f"%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)-{NAME_WIDTH}s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    return handler


def _console_handler(level: int) -> logging.Handler:
    """stderr handler; stdout is reserved for the rendered grid."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt="%(levelname)-8s | %(message)s"))
    return handler


def setup_logging(
    log_dir: Path | str,
    log_level: int = logging.DEBUG,
    console_level: int = logging.WARNING,
) -> Path:
    """
    Route all tilecollapse.* loggers to debug.log and stderr.

    Safe to call again (tests, repeated CLI runs in one process): the old
    handlers are closed and replaced rather than stacked.

    Args:
        log_dir: Directory for debug.log (created if missing)
        log_level: Level for the file (default: DEBUG, every collapse)
        console_level: Level for stderr (default: WARNING, contradictions and restarts)

    Returns:
        Path to the log file
    """
    global _logging_initialized

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / LOG_FILE_NAME

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG)

    for handler in list(root_logger.handlers):
        handler.close()
    root_logger.handlers.clear()

    root_logger.addHandler(_file_handler(log_file, log_level))
    root_logger.addHandler(_console_handler(console_level))

    if not _logging_initialized:
        root_logger.info("=" * 80)
        root_logger.info(f"tilecollapse logging initialized at {datetime.now().isoformat()}")
        root_logger.info(f"Log file: {log_file.absolute()}")
        root_logger.info("=" * 80)
        _logging_initialized = True

    return log_file


def get_logger(name: str) -> logging.Logger:
    """Logger under the tilecollapse namespace ("demo" -> "tilecollapse.demo")."""
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


# =============================================================================
# Structured Logging Helpers
# =============================================================================


def log_step(
    logger: logging.Logger,
    step: int,
    position: Position,
    tile_id: str,
    remaining: int | None = None,
) -> None:
    """Log a single collapse."""
    remaining_str = f" | remaining={remaining}" if remaining is not None else ""
    logger.debug(f"STEP {step:05d} | COLLAPSE | ({position.x}, {position.y}) -> {tile_id}{remaining_str}")


def log_contradiction(
    logger: logging.Logger,
    step: int,
    position: Position,
) -> None:
    """Log a cell pruned to zero candidates."""
    logger.warning(f"STEP {step:05d} | CONTRADICTION | ({position.x}, {position.y})")


def log_attempt(
    logger: logging.Logger,
    attempt: int,
    max_attempts: int,
    status: str,
    details: str | None = None,
) -> None:
    """Log a generation attempt starting, succeeding or failing."""
    details_str = f" | {details}" if details else ""
    level = logging.WARNING if status == "FAILED" else logging.INFO
    logger.log(level, f"ATTEMPT {attempt}/{max_attempts} | {status}{details_str}")
