import math
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId

from .errors import BadRequest


def normalize_email(value: Optional[str]) -> str:
    return str(value or "").strip().lower()


def safe_float(value, default=None):
    if isinstance(value, bool):
        return default
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return default
    if math.isfinite(numeric):
        return numeric
    return default


def safe_int(value, default=None):
    if isinstance(value, bool):
        return default
    numeric = safe_float(value)
    if numeric is None or not numeric.is_integer():
        return default
    return int(numeric)


def to_object_id(value, label: str) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value or ""))
    except (InvalidId, TypeError):
        raise BadRequest(f"Invalid {label} identifier.")
