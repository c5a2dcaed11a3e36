from __future__ import annotations

from typing import Optional

from ...settings.model import BufferConfig
from .base import LatenessDecision, OvertimeDecision, SessionStrategy


class NormalStrategy(SessionStrategy):
    """On-time check-in, no overtime."""

    def decide_checkin(self, *, check_in_minutes: Optional[int], buffers: BufferConfig) -> LatenessDecision:
        return LatenessDecision(is_late=False)

    def decide_checkout(self, *, effective_checkout_minutes: Optional[int], total_hours: Optional[float]) -> OvertimeDecision:
        return OvertimeDecision(ot_hours=0.0)
