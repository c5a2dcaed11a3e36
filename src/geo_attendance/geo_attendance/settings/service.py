from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional

from ..common.validators import require_non_negative_int
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ConfigError, StorageError, ValidationError
from .model import BUFFER_FIELDS, BufferConfig
from .repository import SettingsRepository

logger = logging.getLogger(__name__)

_DEFAULTS = BufferConfig()


def _coerce_minutes(raw: Any, field: str) -> int:
    if isinstance(raw, bool) or raw is None:
        raise ConfigError(f"{field} is missing")
    try:
        number = float(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"{field} is not numeric: {raw!r}")
    if not math.isfinite(number) or number < 0:
        raise ConfigError(f"{field} is out of range: {raw!r}")
    if number != int(number):
        raise ConfigError(f"{field} is not a whole number of minutes: {raw!r}")
    return int(number)


def buffers_from_mapping(raw: Optional[Mapping[str, Any]]) -> BufferConfig:
    """Build a BufferConfig, falling back per field to the defaults."""
    raw = raw or {}
    values: dict[str, int] = {}
    for field in BUFFER_FIELDS:
        default = getattr(_DEFAULTS, field)
        if field not in raw:
            values[field] = default
            continue
        try:
            values[field] = _coerce_minutes(raw[field], field)
        except ConfigError as e:
            logger.warning("Buffer setting malformed, using default %s=%s: %s", field, default, e)
            values[field] = default
    return BufferConfig(**values)


class BufferConfigProvider:
    def __init__(self, settings: SettingsRepository):
        self._settings = settings

    def snapshot(self) -> BufferConfig:
        """Read the current buffers once. Callers pass the result into the aggregator."""
        return buffers_from_mapping(self._settings.load_buffers())

    def update(self, *, current_role: Role, values: Mapping[str, Any]) -> BufferConfig:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin access required.")

        unknown = set(values) - set(BUFFER_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown buffer settings: {', '.join(sorted(unknown))}")

        current = self.snapshot().as_dict()
        for field in BUFFER_FIELDS:
            if field in values:
                current[field] = require_non_negative_int(values[field], field)

        try:
            self._settings.save_buffers(current)
        except StorageError:
            logger.exception("Unable to save buffer settings")
            raise
        return BufferConfig(**current)
