import secrets
import string
import time

_ID_ALPHABET = string.digits + string.ascii_lowercase
ID_LENGTH = 9


def new_id() -> str:
    """Short random base-36 id, the same shape the portal has always stored."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(ID_LENGTH))


def now_ms() -> int:
    return int(time.time() * 1000)


def next_timestamp(previous: int | None) -> int:
    """Current time in ms, bumped past `previous` so successive updates strictly increase."""
    now = now_ms()
    if previous is not None and now <= previous:
        return previous + 1
    return now
