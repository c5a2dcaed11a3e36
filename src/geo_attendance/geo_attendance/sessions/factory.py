from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import EVENING_OT_MINUTES, FULL_DAY_HOURS, NIGHT_OT_MINUTES
from ..settings.model import BufferConfig
from .strategies.base import SessionStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy
from .strategies.overtime_strategy import EveningOvertimeStrategy, NightOvertimeStrategy
from .windows import late_threshold


@dataclass
class SessionStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(self, *, check_in_minutes: Optional[int], buffers: BufferConfig) -> SessionStrategy:
        if check_in_minutes is None:
            return NormalStrategy()
        if check_in_minutes > late_threshold(buffers):
            return LateStrategy()
        return NormalStrategy()

    def for_checkout(self, *, effective_checkout_minutes: Optional[int], total_hours: Optional[float]) -> SessionStrategy:
        if total_hours is None or effective_checkout_minutes is None or total_hours < FULL_DAY_HOURS:
            return NormalStrategy()
        if effective_checkout_minutes >= NIGHT_OT_MINUTES:
            return NightOvertimeStrategy()
        if effective_checkout_minutes >= EVENING_OT_MINUTES:
            return EveningOvertimeStrategy()
        return NormalStrategy()
