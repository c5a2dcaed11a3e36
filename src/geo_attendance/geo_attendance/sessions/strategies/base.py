from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...settings.model import BufferConfig


@dataclass(frozen=True)
class LatenessDecision:
    is_late: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class OvertimeDecision:
    ot_hours: float = 0.0


class SessionStrategy(ABC):
    """Strategy Pattern: encapsulate how a day's lateness and overtime band are decided."""

    @abstractmethod
    def decide_checkin(self, *, check_in_minutes: Optional[int], buffers: BufferConfig) -> LatenessDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_checkout(self, *, effective_checkout_minutes: Optional[int], total_hours: Optional[float]) -> OvertimeDecision:
        raise NotImplementedError
