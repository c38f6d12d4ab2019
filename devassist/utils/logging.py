import time
from contextlib import contextmanager
from functools import wraps

from loguru import logger


@contextmanager
def log_duration(label: str):
    """Log how long the wrapped block took, at DEBUG."""
    start = time.perf_counter()
    try:
        yield
    finally:
        logger.debug(f"{label} took {time.perf_counter() - start:.3f}s")


def timeit(func):
    """Decorator form of log_duration, labelled with the function name."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        with log_duration(func.__qualname__):
            return func(*args, **kwargs)

    return wrapper
