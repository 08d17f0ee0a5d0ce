from __future__ import annotations

import math
import uuid
from typing import Any, Optional

from ..core.exceptions import BadRequestError


def require_uuid(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise BadRequestError(f"{field_name} is required")
    try:
        return str(uuid.UUID(value.strip()))
    except ValueError:
        raise BadRequestError(f"Invalid {field_name}") from None


def optional_uuid(value: Any, field_name: str) -> Optional[str]:
    if value is None or value == "":
        return None
    return require_uuid(value, field_name)


def require_number(value: Any, field_name: str, *, minimum: float | None = None, maximum: float | None = None) -> float:
    # bool is an int subclass; a JSON true is not a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise BadRequestError(f"{field_name} must be a number")
    try:
        number = float(value)
    except OverflowError:
        raise BadRequestError(f"{field_name} must be a number") from None
    if not math.isfinite(number):
        raise BadRequestError(f"{field_name} must be a number")
    if minimum is not None and number < minimum:
        raise BadRequestError(f"{field_name} must be at least {minimum:g}")
    if maximum is not None and number > maximum:
        raise BadRequestError(f"{field_name} must be at most {maximum:g}")
    return number


def optional_number(value: Any, field_name: str, *, minimum: float | None = None, maximum: float | None = None) -> Optional[float]:
    if value is None:
        return None
    return require_number(value, field_name, minimum=minimum, maximum=maximum)


def optional_text(value: Any, field_name: str, *, max_length: int) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise BadRequestError(f"{field_name} must be a string")
    if len(value) > max_length:
        raise BadRequestError(f"{field_name} must be less than {max_length} characters")
    return value


def parse_positive_int(value: Optional[str], field_name: str, *, default: int, maximum: int | None = None) -> int:
    if value is None or value == "":
        return default
    if not (value.isascii() and value.isdecimal()) or int(value) < 1:
        raise BadRequestError(f"{field_name} must be a positive integer")
    number = int(value)
    if maximum is not None:
        number = min(number, maximum)
    return number
