"""Reduce one day's scan events for one user into a Session.

Used both after each successful scan and by the admin range recompute, so the
two paths can never disagree on the numbers.
"""
from __future__ import annotations

from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import business_timezone, hours_between, minutes_since_midnight, round2
from ..core.constants import FULL_DAY_HOURS
from ..core.enums import AbnormalReason, ScanKind, SessionStatus
from ..payroll.calculator.base import PayrollCalculator
from ..payroll.calculator.standard_calculator import StandardPayrollCalculator
from ..scans.model import ScanEvent
from ..settings.model import BufferConfig
from ..users.model import Employee
from .factory import SessionStrategyFactory
from .model import PayRates, ReviewNotes, Session
from .windows import early_checkout_padding_hours, effective_ot_checkout, is_after_ot_window


def _eligible(events: Iterable[ScanEvent]) -> list[ScanEvent]:
    return [e for e in events if e.is_success and not e.is_deleted]


def aggregate_day(
    events: Iterable[ScanEvent],
    *,
    user: Employee,
    date_key: str,
    buffers: BufferConfig,
    rates: Optional[PayRates] = None,
    notes: ReviewNotes = ReviewNotes(),
    tz: Optional[ZoneInfo] = None,
    strategy_factory: Optional[SessionStrategyFactory] = None,
    calculator: Optional[PayrollCalculator] = None,
) -> Session:
    tz = tz or business_timezone()
    rates = rates or PayRates(normal_rate=user.normal_rate, ot_rate=user.ot_rate)
    strategy_factory = strategy_factory or SessionStrategyFactory()
    calculator = calculator or StandardPayrollCalculator()

    eligible = _eligible(events)
    check_ins = [e for e in eligible if e.scan_kind == ScanKind.CHECK_IN]
    check_outs = [e for e in eligible if e.scan_kind == ScanKind.CHECK_OUT]

    first_in = min(check_ins, key=lambda e: e.scan_time) if check_ins else None
    last_out = max(check_outs, key=lambda e: e.scan_time) if check_outs else None

    in_minutes = minutes_since_midnight(first_in.scan_time, tz) if first_in else None
    out_minutes = minutes_since_midnight(last_out.scan_time, tz) if last_out else None

    total_hours: Optional[float] = None
    if first_in and last_out:
        raw = max(0.0, hours_between(first_in.scan_time, last_out.scan_time))
        total_hours = round2(raw + early_checkout_padding_hours(out_minutes, buffers))

    lateness = strategy_factory.for_checkin(check_in_minutes=in_minutes, buffers=buffers).decide_checkin(
        check_in_minutes=in_minutes, buffers=buffers
    )

    reasons: list[AbnormalReason] = []
    if first_in is None:
        reasons.append(AbnormalReason.MISSING_CHECK_IN)
    if last_out is None:
        reasons.append(AbnormalReason.MISSING_CHECK_OUT)
    if total_hours is not None and total_hours < FULL_DAY_HOURS:
        reasons.append(AbnormalReason.SHORT_DAY)
    if is_after_ot_window(out_minutes, buffers):
        reasons.append(AbnormalReason.LATE_CHECKOUT)

    effective_out = effective_ot_checkout(out_minutes, buffers)
    overtime = strategy_factory.for_checkout(
        effective_checkout_minutes=effective_out, total_hours=total_hours
    ).decide_checkout(effective_checkout_minutes=effective_out, total_hours=total_hours)

    normal_hours = ot_hours = amount = None
    if not reasons:
        # No abnormal reason implies both endpoints and total_hours >= 9.
        normal_hours = round2(min(total_hours, FULL_DAY_HOURS))
        ot_hours = overtime.ot_hours
        amount = calculator.amount(normal_hours=normal_hours, ot_hours=ot_hours, rates=rates)

    return Session(
        user_id=user.user_id,
        user_email=user.email,
        user_name=user.name,
        date_key=date_key,
        site_in_id=first_in.site_id if first_in else None,
        site_in_name=first_in.site_name if first_in else None,
        site_out_id=last_out.site_id if last_out else None,
        site_out_name=last_out.site_name if last_out else None,
        check_in_time=first_in.scan_time if first_in else None,
        check_out_time=last_out.scan_time if last_out else None,
        total_hours=total_hours,
        normal_hours=normal_hours,
        ot_hours=ot_hours,
        normal_rate=rates.normal_rate,
        ot_rate=rates.ot_rate,
        amount=amount,
        status=SessionStatus.COMPLETE if first_in and last_out else SessionStatus.INCOMPLETE,
        is_late=lateness.is_late,
        late_reason=lateness.reason,
        is_abnormal=bool(reasons),
        abnormal_reasons=tuple(reasons),
        late_note=notes.late_note,
        abnormal_note=notes.abnormal_note,
    )
