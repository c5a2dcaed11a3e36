from __future__ import annotations

from typing import Optional

from ...common.datetime_utils import format_minutes
from ...core.constants import WORKDAY_START_MINUTES
from ...settings.model import BufferConfig
from .base import LatenessDecision, OvertimeDecision, SessionStrategy


class LateStrategy(SessionStrategy):
    """Late check-in."""

    def decide_checkin(self, *, check_in_minutes: Optional[int], buffers: BufferConfig) -> LatenessDecision:
        return LatenessDecision(
            is_late=True,
            reason=f"Check-in after {format_minutes(WORKDAY_START_MINUTES)} + {buffers.late_buffer_minutes} min",
        )

    def decide_checkout(self, *, effective_checkout_minutes: Optional[int], total_hours: Optional[float]) -> OvertimeDecision:
        return OvertimeDecision(ot_hours=0.0)
