"""Time-ordered identifiers."""

import os
import threading
import time

from ulid import ULID

_RANDOM_BITS = 80
_RANDOM_MAX = (1 << _RANDOM_BITS) - 1

_lock = threading.Lock()
_last_ms = 0
_last_random = 0


def new_id() -> str:
    """
    Return a new ULID string.

    Within the same millisecond the random component is incremented instead
    of redrawn, so ids sort lexicographically in creation order.
    """
    global _last_ms, _last_random

    with _lock:
        now_ms = time.time_ns() // 1_000_000
        if now_ms <= _last_ms:
            now_ms = _last_ms
            _last_random += 1
            if _last_random > _RANDOM_MAX:
                now_ms += 1
                _last_random = int.from_bytes(os.urandom(10), "big") >> 1
        else:
            # Top bit cleared to leave room for increments
            _last_random = int.from_bytes(os.urandom(10), "big") >> 1
        _last_ms = now_ms
        value = (now_ms << _RANDOM_BITS) | _last_random

    return str(ULID.from_int(value))
