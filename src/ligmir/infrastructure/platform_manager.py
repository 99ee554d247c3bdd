import logging
import os
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any


def create_logger(
    log_level: str = "INFO",
    logger_name: str = "ligmir",
    logs_dir: str | Path | None = None,
) -> logging.Logger:
    """
    Create a logger that outputs to console and optionally to a file.

    Args:
        log_level (str): Logging level (e.g., "INFO", "DEBUG").
        logger_name (str): Name for the logger instance and its log file.
        logs_dir (str | Path | None): Directory for log files. Falls back to the
            LIGMIR_LOGS_DIR environment variable; if neither is set, only the console
            handler is added.

    Returns:
        logging.Logger: Configured logger instance.
    """
    logs_dir = logs_dir or os.getenv("LIGMIR_LOGS_DIR")

    logger = logging.getLogger(logger_name)
    logger.setLevel(getattr(logging, log_level.upper(), logging.DEBUG))
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")

    if not logger.handlers:  # Prevent handler duplication
        # Console handler (stdio) - always add this
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if logs_dir:
            try:
                logs_path = Path(logs_dir)
                logs_path.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(logs_path / f"{logger_name}.log")
                file_handler.setFormatter(formatter)
                logger.addHandler(file_handler)
            except OSError as e:
                # If file logging fails, just continue with console logging
                logger.warning(f"File logging disabled: {e}")

    return logger


def set_log_level(log_level: str, logger_prefix: str = "ligmir") -> None:
    """Apply `log_level` to every logger whose name starts with `logger_prefix`."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    for name in list(logging.root.manager.loggerDict):
        if name.startswith(logger_prefix):
            logging.getLogger(name).setLevel(level)


def get_parameters(
    param_names: list[str] | str,
    base_path: str = "",
) -> dict[str, str | None]:
    """
    Retrieve configuration parameters from environment variables.

    Args:
        param_names (list[str] | str): Parameter names, e.g. "browser_url".
        base_path (str): Prefix prepended to each name, e.g. "ligmir_".

    Returns:
        dict[str, str | None]: Values keyed by the lowercase parameter name (without
            the prefix). Missing variables map to None.
    """
    if isinstance(param_names, str):
        param_names = [param_names]

    result = {}
    for param_name in param_names:
        # Parameters are stored in the environment variables in uppercase
        # But we want to store them in lowercase in the result dictionary
        env_name = f"{base_path}{param_name}".upper()
        result[param_name.lower()] = os.getenv(env_name)
    return result


""" Bounded background dispatch (using a thread pool) """


class WorkerPool:
    """
    Run webhook work on a fixed set of threads with a bounded backlog.

    At most ``max_workers + max_queue`` tasks are accepted at once (running plus
    waiting). When every slot is taken, ``submit`` rejects the task immediately
    instead of blocking the caller; the caller decides how to report it.

    Args:
        max_workers (int): Number of worker threads.
        max_queue (int): Number of tasks allowed to wait for a free thread.
        logger_name (str): Logger used for dispatch and task failures.
    """

    def __init__(self, max_workers: int = 4, max_queue: int = 32, logger_name: str = "ligmir"):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if max_queue < 0:
            raise ValueError("max_queue must not be negative")
        self.capacity = max_workers + max_queue
        self._slots = threading.BoundedSemaphore(self.capacity)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="ligmir-worker"
        )
        self._logger = logging.getLogger(logger_name)

    def submit(self, fn: Callable[..., Any], *args: Any) -> bool:
        """
        Schedule ``fn(*args)`` on a worker thread.

        Returns:
            bool: True if the task was accepted, False if the pool is saturated.
        """
        if not self._slots.acquire(blocking=False):
            self._logger.warning(f"Worker pool saturated ({self.capacity} tasks); rejecting")
            return False
        try:
            self._executor.submit(self._run, fn, *args)
        except RuntimeError:
            # Executor already shut down
            self._slots.release()
            raise
        return True

    def _run(self, fn: Callable[..., Any], *args: Any) -> None:
        name = getattr(fn, "__name__", repr(fn))
        try:
            self._logger.debug(f"Task {name} starting on {threading.current_thread().name}")
            fn(*args)
            self._logger.debug(f"Task {name} completed")
        except Exception as e:
            self._logger.exception(f"Task {name} failed: {e}")
        finally:
            self._slots.release()

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
