from __future__ import annotations

from dataclasses import asdict, dataclass

from ..core.constants import (
    DEFAULT_EARLY_CHECKOUT_BUFFER_MINUTES,
    DEFAULT_LATE_BUFFER_MINUTES,
    DEFAULT_OT_EARLY_BUFFER_MINUTES,
    DEFAULT_OT_LATE_BUFFER_MINUTES,
)


@dataclass(frozen=True)
class BufferConfig:
    """Tolerance windows (minutes) that shift the fixed workday thresholds."""

    late_buffer_minutes: int = DEFAULT_LATE_BUFFER_MINUTES
    early_checkout_buffer_minutes: int = DEFAULT_EARLY_CHECKOUT_BUFFER_MINUTES
    ot_early_buffer_minutes: int = DEFAULT_OT_EARLY_BUFFER_MINUTES
    ot_late_buffer_minutes: int = DEFAULT_OT_LATE_BUFFER_MINUTES

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


BUFFER_FIELDS = tuple(BufferConfig.__dataclass_fields__)
