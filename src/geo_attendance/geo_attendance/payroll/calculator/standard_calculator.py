from __future__ import annotations

from .base import PayrollCalculator
from ...common.datetime_utils import round2
from ...sessions.model import PayRates


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: normal hours x normal rate + OT hours x OT rate, to the cent."""

    def amount(self, *, normal_hours: float, ot_hours: float, rates: PayRates) -> float:
        return round2(normal_hours * rates.normal_rate + ot_hours * rates.ot_rate)
