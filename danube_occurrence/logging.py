import logging
import time
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def log_action(action: str, func: Callable[[], T]) -> T:
    logger.info(f"Running {action}")
    start_time = time.time()
    result = func()
    elapsed = time.time() - start_time
    logger.info(f"{action} completed in {elapsed:.4f}s")
    return result


def report(log: logging.Logger, verbose: bool, message: str) -> None:
    """Log a summary line at INFO when verbose, at DEBUG otherwise."""
    log.log(logging.INFO if verbose else logging.DEBUG, message)
