from __future__ import annotations

from typing import Optional

from ...core.constants import EVENING_OT_HOURS, NIGHT_OT_HOURS
from ...settings.model import BufferConfig
from .base import LatenessDecision, OvertimeDecision, SessionStrategy


class EveningOvertimeStrategy(SessionStrategy):
    """Full day with effective checkout from 19:00 up to 22:00."""

    def decide_checkin(self, *, check_in_minutes: Optional[int], buffers: BufferConfig) -> LatenessDecision:
        return LatenessDecision(is_late=False)

    def decide_checkout(self, *, effective_checkout_minutes: Optional[int], total_hours: Optional[float]) -> OvertimeDecision:
        return OvertimeDecision(ot_hours=EVENING_OT_HOURS)


class NightOvertimeStrategy(SessionStrategy):
    """Full day with effective checkout at or after 22:00."""

    def decide_checkin(self, *, check_in_minutes: Optional[int], buffers: BufferConfig) -> LatenessDecision:
        return LatenessDecision(is_late=False)

    def decide_checkout(self, *, effective_checkout_minutes: Optional[int], total_hours: Optional[float]) -> OvertimeDecision:
        return OvertimeDecision(ot_hours=NIGHT_OT_HOURS)
