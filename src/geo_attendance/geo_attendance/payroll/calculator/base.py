from __future__ import annotations

from abc import ABC, abstractmethod

from ...sessions.model import PayRates


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def amount(self, *, normal_hours: float, ot_hours: float, rates: PayRates) -> float:
        raise NotImplementedError
