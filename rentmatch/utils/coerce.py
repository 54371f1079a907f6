import math
from datetime import datetime
from typing import List, Optional


def to_int(v) -> Optional[int]:
    f = to_float(v)
    if f is None:
        return None
    return int(f)


def to_float(v) -> Optional[float]:
    try:
        if v is None or v == "" or str(v).lower() in {"null", "nan", "none"}:
            return None
        result = float(v)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def to_str(v) -> str:
    if v is None:
        return ""
    if isinstance(v, float) and math.isnan(v):
        return ""
    return str(v).strip()


def to_list(v, sep: str = "|") -> List[str]:
    if isinstance(v, (list, tuple, set)):
        return [to_str(item) for item in v if to_str(item)]
    text = to_str(v)
    if not text:
        return []
    return [part.strip() for part in text.split(sep) if part.strip()]


def to_datetime(v) -> Optional[datetime]:
    if isinstance(v, datetime):
        return v
    text = to_str(v)
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None


def to_whole(v) -> Optional[int]:
    """Integer for integral numbers such as ``2`` or ``2.0``; None otherwise."""

    if isinstance(v, bool):
        return None
    f = to_float(v)
    if f is None or not f.is_integer():
        return None
    return int(f)
