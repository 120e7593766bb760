"""
Common utilities.
"""

import threading
import time
import uuid

__all__ = [
    "timestamp",
    "generate_id",
]

_last_timestamp = 0
_timestamp_lock = threading.Lock()


def timestamp() -> int:
    """
    Current time in epoch milliseconds. Never returns a value less than or
    equal to a previously returned one, so back-to-back updates are always
    ordered.
    """
    global _last_timestamp

    with _timestamp_lock:
        now = max(time.time_ns() // 1_000_000, _last_timestamp + 1)
        _last_timestamp = now

    return now


def generate_id() -> str:
    """
    Globally unique note id.
    """
    return str(uuid.uuid4())
