from __future__ import annotations

import math
import re
from typing import Any, Optional

from ..core.exceptions import ValidationError

_WHITESPACE = re.compile(r"\s+")


def normalize_site_name(value: Any) -> str:
    """Trim, lowercase and collapse inner whitespace. Used as the site lookup key."""
    if not isinstance(value, str):
        return ""
    return _WHITESPACE.sub(" ", value.strip().lower())


def require_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be 0 or a positive number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be 0 or a positive number")
    if not math.isfinite(number) or number < 0 or number != int(number):
        raise ValidationError(f"{field_name} must be 0 or a positive number")
    return int(number)


def optional_float(value: Any, field_name: str) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
