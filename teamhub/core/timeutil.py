from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def now_millis() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def to_millis(value: Any) -> int | None:
    """Coerce a stored timestamp to epoch milliseconds.

    Accepts ints, floats, numeric strings and datetimes (naive values are
    read as UTC). Empty values map to ``None``.
    """

    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise TypeError("boolean is not a timestamp")
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp() * 1000)
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value))
        except ValueError:
            return to_millis(datetime.fromisoformat(value))
    raise TypeError(f"unsupported timestamp value: {value!r}")
