import functools
import logging
import time
from datetime import datetime, timezone

TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'


def utcnow():
    """Current UTC time as a naive datetime (the storage convention)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(timestamp):
    """Convert an aware datetime to naive UTC; naive values are assumed UTC"""
    if timestamp.tzinfo is None:
        return timestamp
    return timestamp.astimezone(timezone.utc).replace(tzinfo=None)


def format_timestamp(timestamp):
    """Format a timestamp the way notifications show it"""
    return timestamp.strftime(TIMESTAMP_FORMAT)


def format_duration(seconds):
    """Format a duration in seconds as e.g. '1d 2h 3m 4s', dropping zero units"""
    seconds = max(0, int(seconds))
    days, remainder = divmod(seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, secs = divmod(remainder, 60)

    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


def normalize_mac(mac):
    """Trim and upper-case a MAC address; returns '' for missing values"""
    if mac is None:
        return ''
    return str(mac).strip().upper()


def timed(label=None):
    """Log how long the wrapped call took"""
    def decorator(func):
        name = label or func.__qualname__
        logger = logging.getLogger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                elapsed_ms = (time.perf_counter() - started) * 1000
                logger.info("%s took %.1f ms", name, elapsed_ms)
        return wrapper
    return decorator
