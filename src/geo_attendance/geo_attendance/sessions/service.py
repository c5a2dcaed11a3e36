from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import replace
from typing import Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import business_timezone, validate_date_key
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, StorageError, ValidationError
from ..payroll.calculator.base import PayrollCalculator
from ..payroll.calculator.standard_calculator import StandardPayrollCalculator
from ..scans.model import ScanEvent
from ..scans.repository import ScanLogRepository
from ..settings.model import BufferConfig
from ..settings.service import BufferConfigProvider
from ..users.model import Employee
from ..users.repository import EmployeeRepository
from .aggregator import aggregate_day
from .factory import SessionStrategyFactory
from .model import PayRates, RangeRebuildReport, ReviewNotes, Session, SessionKey
from .repository import SessionRepository

logger = logging.getLogger(__name__)


class SessionAggregatorService:
    """Persists the output of ``aggregate_day`` for a single key or a date range."""

    def __init__(
        self,
        logs: ScanLogRepository,
        sessions: SessionRepository,
        employees: EmployeeRepository,
        buffers: BufferConfigProvider,
        *,
        tz: Optional[ZoneInfo] = None,
        strategy_factory: SessionStrategyFactory | None = None,
        calculator: PayrollCalculator | None = None,
    ):
        self._logs = logs
        self._sessions = sessions
        self._employees = employees
        self._buffers = buffers
        self._tz = tz or business_timezone()
        self._factory = strategy_factory or SessionStrategyFactory()
        self._calculator = calculator or StandardPayrollCalculator()

    def rebuild_day(self, user_id: int, date_key: str, *, buffers: BufferConfig | None = None) -> Optional[Session]:
        """Recompute the session for (user, day). Returns None when the day has no successes left."""
        events = self._logs.list_successes(user_id=user_id, date_key=date_key)
        return self._rebuild(user_id, date_key, events, buffers or self._buffers.snapshot())

    def rebuild_range(self, *, current_role: Role, start: str, end: str) -> RangeRebuildReport:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin access required.")
        try:
            start = validate_date_key(start)
            end = validate_date_key(end)
        except (AttributeError, ValueError):
            raise ValidationError("Dates must be YYYY-MM-DD")
        if start > end:
            raise ValidationError("Start date must not be after end date")

        buffers = self._buffers.snapshot()
        grouped: dict[SessionKey, list[ScanEvent]] = defaultdict(list)
        for event in self._logs.list_successes_between(start_key=start, end_key=end):
            if event.is_deleted or not event.is_success:
                continue
            grouped[SessionKey(event.user_id, event.date_key)].append(event)

        # Sessions left behind by logs that were deleted or failed since.
        stale = [s.key for s in self._sessions.list_range(start_key=start, end_key=end) if s.key not in grouped]

        rebuilt: list[SessionKey] = []
        cleared: list[SessionKey] = []
        keys = sorted(set(grouped) | set(stale), key=lambda k: (k.date_key, k.user_id))
        for key in keys:
            try:
                if self._rebuild(key.user_id, key.date_key, grouped.get(key, []), buffers) is None:
                    cleared.append(key)
                else:
                    rebuilt.append(key)
            except StorageError as e:
                logger.error("Range rebuild stopped at %s: %s", key, e)
                return RangeRebuildReport(
                    start=start,
                    end=end,
                    rebuilt=tuple(rebuilt),
                    cleared=tuple(cleared),
                    failed=key,
                    error=str(e),
                )

        logger.info("Range rebuild %s..%s rebuilt=%d cleared=%d", start, end, len(rebuilt), len(cleared))
        return RangeRebuildReport(start=start, end=end, rebuilt=tuple(rebuilt), cleared=tuple(cleared))

    def annotate_late(self, *, current_role: Role, user_id: int, date_key: str, note: Optional[str]) -> Session:
        session = self._require_session(current_role, user_id, date_key)
        return self._save_notes(session, ReviewNotes(late_note=_clean(note), abnormal_note=session.abnormal_note))

    def annotate_abnormal(self, *, current_role: Role, user_id: int, date_key: str, note: Optional[str]) -> Session:
        session = self._require_session(current_role, user_id, date_key)
        return self._save_notes(session, ReviewNotes(late_note=session.late_note, abnormal_note=_clean(note)))

    def clear_notes(self, *, current_role: Role, user_id: int, date_key: str) -> Session:
        session = self._require_session(current_role, user_id, date_key)
        return self._save_notes(session, ReviewNotes())

    def _require_session(self, current_role: Role, user_id: int, date_key: str) -> Session:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin access required.")
        session = self._sessions.get(user_id, date_key)
        if session is None:
            raise ValidationError("Session not found.")
        return session

    def _save_notes(self, session: Session, notes: ReviewNotes) -> Session:
        self._sessions.set_notes(session.user_id, session.date_key, notes)
        return replace(session, late_note=notes.late_note, abnormal_note=notes.abnormal_note)

    def _rebuild(self, user_id: int, date_key: str, events, buffers: BufferConfig) -> Optional[Session]:
        events = [e for e in events if e.is_success and not e.is_deleted]
        existing = self._sessions.get(user_id, date_key)
        if not events:
            if existing is not None:
                self._sessions.delete(user_id, date_key)
                logger.info("Cleared session %s|%s: no successful scans left", user_id, date_key)
            return None

        user = self._employee_for(user_id, events)
        session = aggregate_day(
            events,
            user=user,
            date_key=date_key,
            buffers=buffers,
            rates=PayRates(normal_rate=user.normal_rate, ot_rate=user.ot_rate),
            notes=existing.notes if existing else ReviewNotes(),
            tz=self._tz,
            strategy_factory=self._factory,
            calculator=self._calculator,
        )
        return self._sessions.replace(session)

    def _employee_for(self, user_id: int, events) -> Employee:
        user = self._employees.get_by_id(user_id)
        if user is not None:
            return user
        # Profile gone: keep the identity captured on the logs, with zero rates.
        first = events[0]
        logger.warning("Employee %s not found, aggregating with zero pay rates", user_id)
        return Employee(user_id=user_id, email=first.user_email, name=first.user_name)


def _clean(note: Optional[str]) -> Optional[str]:
    if note is None:
        return None
    note = note.strip()
    return note or None
