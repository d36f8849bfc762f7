"""Logging configuration for p4rt-replication.

Provides configurable logging with:
- File-based logging with rotation
- Console output
- Timing decorators for table loads and reconciliation runs

Environment Variables:
    P4RT_REPLICATION_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    P4RT_REPLICATION_LOG_FILE: Path to log file (default: ~/.p4rt-replication/p4rt-replication.log)
    P4RT_REPLICATION_LOG_MAX_SIZE: Max log file size in MB (default: 10)
    P4RT_REPLICATION_LOG_BACKUPS: Number of backup files to keep (default: 5)

Usage:
    from p4rt_replication.utils.logging_config import setup_logging, timed

    setup_logging()  # Call once at startup

    @timed("load_table")
    def load_all(self):
        ...
"""
import functools
import logging
import os
import time
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Callable, Any

# Performance logger - separate from main logger for easy filtering
perf_logger = logging.getLogger("p4rt_replication.perf")
main_logger = logging.getLogger("p4rt_replication")


def get_log_level() -> int:
    """Get log level from environment."""
    level_str = os.environ.get("P4RT_REPLICATION_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_str, logging.INFO)


def get_log_file() -> Path:
    """Get log file path from environment."""
    default_path = Path.home() / ".p4rt-replication" / "p4rt-replication.log"
    path_str = os.environ.get("P4RT_REPLICATION_LOG_FILE", str(default_path))
    return Path(path_str)


def setup_logging(log_file: Optional[Path] = None) -> None:
    """Configure logging for the application.

    Sets up:
    - Console handler (respects P4RT_REPLICATION_LOG_LEVEL)
    - File handler with rotation (DEBUG level - captures everything)
    """
    log_level = get_log_level()
    log_file = log_file or get_log_file()
    max_size_mb = int(os.environ.get("P4RT_REPLICATION_LOG_MAX_SIZE", "10"))
    backup_count = int(os.environ.get("P4RT_REPLICATION_LOG_BACKUPS", "5"))

    log_file.parent.mkdir(parents=True, exist_ok=True)

    main_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | %(name)-35s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(main_format)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(main_format)

    # perf_logger is a child, so it reaches both handlers through propagation
    main_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
    main_logger.addHandler(console_handler)
    main_logger.addHandler(file_handler)

    main_logger.info(
        f"Logging initialized: level={logging.getLevelName(log_level)}, file={log_file}"
    )


def _log_timing(operation: str, elapsed: float, error: Optional[Exception] = None) -> None:
    global_stats.record(operation, elapsed)
    if error is None:
        perf_logger.info(f"{operation:20s} | {elapsed:8.2f}ms | OK")
    else:
        perf_logger.warning(f"{operation:20s} | {elapsed:8.2f}ms | FAIL: {error}")


def timed(operation: str):
    """Decorator to log execution time of a function.

    Usage:
        @timed("compare")
        def compare(self, entries_a, entries_b):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _log_timing(operation, (time.perf_counter() - start) * 1000, e)
                raise
            _log_timing(operation, (time.perf_counter() - start) * 1000)
            return result

        return wrapper

    return decorator


@contextmanager
def timed_section(operation: str, **extra):
    """Context manager for timing code sections.

    Usage:
        with timed_section("apply_batch", records=12):
            ...
    """
    start = time.perf_counter()
    extra_str = " | ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""

    try:
        yield
    except Exception as e:
        elapsed = (time.perf_counter() - start) * 1000
        global_stats.record(operation, elapsed)
        msg = f"{operation:20s} | {elapsed:8.2f}ms | FAIL: {e}"
        if extra_str:
            msg += f" | {extra_str}"
        perf_logger.warning(msg)
        raise

    elapsed = (time.perf_counter() - start) * 1000
    global_stats.record(operation, elapsed)
    msg = f"{operation:20s} | {elapsed:8.2f}ms | OK"
    if extra_str:
        msg += f" | {extra_str}"
    perf_logger.info(msg)


class PerfStats:
    """Collect and report timing statistics.

    Usage:
        stats = PerfStats()
        stats.record("load_table", 150.5)
        print(stats.summary())
    """

    def __init__(self):
        self._data: dict[str, list[float]] = {}

    def record(self, operation: str, duration_ms: float) -> None:
        """Record a timing measurement."""
        self._data.setdefault(operation, []).append(duration_ms)

    def count(self, operation: str) -> int:
        """Number of measurements recorded for an operation."""
        return len(self._data.get(operation, []))

    def summary(self) -> str:
        """Generate summary statistics."""
        lines = ["Performance Summary", "=" * 60]

        for op, times in sorted(self._data.items()):
            if not times:
                continue
            count = len(times)
            avg = sum(times) / count

            lines.append(
                f"{op:20s} | count={count:4d} | "
                f"avg={avg:8.2f}ms | min={min(times):8.2f}ms | max={max(times):8.2f}ms"
            )

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all recorded data."""
        self._data.clear()


# Global stats instance for convenience
global_stats = PerfStats()
