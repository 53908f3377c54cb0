# engine/guard.py
import threading
from contextlib import contextmanager
from functools import wraps

from bankroll.exceptions import Reentrancy

_state = threading.local()


def is_locked() -> bool:
    return getattr(_state, "locked", False)


@contextmanager
def non_reentrant():
    """
    Held for the whole of a balance-mutating call. A nested entry from the
    same call stack (e.g. a transfer hook calling back in) is rejected.
    """
    if is_locked():
        raise Reentrancy()

    _state.locked = True
    try:
        yield
    finally:
        _state.locked = False


def nonreentrant(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        with non_reentrant():
            return func(*args, **kwargs)
    return wrapper
