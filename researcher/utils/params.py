from typing import Any


def parse_int(value: Any, default: int) -> int:
    """Lenient integer parameter: absent or malformed means default"""
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
