"""Time-of-day windows shifted by the configured buffers (minutes since midnight)."""
from __future__ import annotations

from typing import Optional

from ..core.constants import EARLY_CHECKOUT_ANCHOR_MINUTES, NIGHT_OT_MINUTES, WORKDAY_START_MINUTES
from ..settings.model import BufferConfig


def late_threshold(buffers: BufferConfig) -> int:
    return WORKDAY_START_MINUTES + buffers.late_buffer_minutes


def early_checkout_padding_hours(checkout_minutes: Optional[int], buffers: BufferConfig) -> float:
    """Hours credited for a checkout in [17:00 - buffer, 17:00]; 0 otherwise."""
    if checkout_minutes is None:
        return 0.0
    window_start = EARLY_CHECKOUT_ANCHOR_MINUTES - buffers.early_checkout_buffer_minutes
    if window_start <= checkout_minutes <= EARLY_CHECKOUT_ANCHOR_MINUTES:
        return max(EARLY_CHECKOUT_ANCHOR_MINUTES - checkout_minutes, 0) / 60
    return 0.0


def ot_window(buffers: BufferConfig) -> tuple[int, int]:
    return (
        NIGHT_OT_MINUTES - buffers.ot_early_buffer_minutes,
        NIGHT_OT_MINUTES + buffers.ot_late_buffer_minutes,
    )


def effective_ot_checkout(checkout_minutes: Optional[int], buffers: BufferConfig) -> Optional[int]:
    """Checkouts inside the OT window snap to exactly 22:00."""
    if checkout_minutes is None:
        return None
    start, end = ot_window(buffers)
    if start <= checkout_minutes <= end:
        return NIGHT_OT_MINUTES
    return checkout_minutes


def is_after_ot_window(checkout_minutes: Optional[int], buffers: BufferConfig) -> bool:
    if checkout_minutes is None:
        return False
    return checkout_minutes > ot_window(buffers)[1]
