from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import business_timezone, date_key_for, now_utc, to_utc
from ..core.enums import AuditAction, Provenance, Role, ScanKind, ScanStatus
from ..core.exceptions import AuthorizationError, ValidationError
from ..sites.repository import SiteRepository
from ..users.model import Employee
from ..users.repository import EmployeeRepository
from .model import AuditEntry, LogChange, LogSnapshot, ScanEvent
from .repository import ScanLogRepository

logger = logging.getLogger(__name__)

MANUAL_ENTRY_REASON = "Manual entry"


class ScanLogAdminService:
    """Manual corrections to the scan log. Every mutation is paired with an audit entry.

    Sessions are not touched here; callers recompute the returned ``date_keys``.
    """

    def __init__(
        self,
        logs: ScanLogRepository,
        employees: EmployeeRepository,
        sites: SiteRepository,
        *,
        tz: Optional[ZoneInfo] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._logs = logs
        self._employees = employees
        self._sites = sites
        self._tz = tz or business_timezone()
        self._clock = clock

    def create_entry(
        self,
        *,
        admin: Employee,
        user_id: int,
        site_id: int,
        scan_time: datetime,
        status: ScanStatus,
        scan_kind: Optional[ScanKind] = None,
        admin_note: Optional[str] = None,
        user_lat: Optional[float] = None,
        user_lng: Optional[float] = None,
        distance_meters: Optional[float] = None,
    ) -> LogChange:
        self._require_admin(admin)

        user = self._employees.get_by_id(user_id)
        site = self._sites.get_by_id(site_id)
        if user is None or site is None:
            raise ValidationError("Select a valid user and site.")

        scan_time = to_utc(scan_time, self._tz)
        event = ScanEvent(
            user_id=user.user_id,
            user_email=user.email,
            user_name=user.name,
            site_id=site.site_id,
            site_name=site.name,
            scan_time=scan_time,
            date_key=date_key_for(scan_time, self._tz),
            status=status,
            scan_kind=scan_kind or ScanKind.CHECK_IN,
            distance_meters=round(distance_meters, 1) if distance_meters is not None else None,
            allowed_radius_meters=site.allowed_radius_meters,
            user_lat=user_lat,
            user_lng=user_lng,
            fail_reason=None if status == ScanStatus.SUCCESS else MANUAL_ENTRY_REASON,
            created_by=Provenance.ADMIN,
            admin_note=_clean(admin_note),
        )
        stored = self._logs.append_audited(event, self._audit(AuditAction.CREATE, admin, None, event))
        logger.info("Admin %s created log %s for user=%s day=%s", admin.user_id, stored.log_id, user.user_id, stored.date_key)
        return LogChange(event=stored, date_keys=(stored.date_key,))

    def edit_entry(
        self,
        *,
        admin: Employee,
        log_id: int,
        site_id: Optional[int] = None,
        scan_time: Optional[datetime] = None,
        status: Optional[ScanStatus] = None,
        scan_kind: Optional[ScanKind] = None,
        admin_note: Optional[str] = None,
    ) -> LogChange:
        self._require_admin(admin)
        before = self._require_log(log_id)

        changes: dict = {}
        if site_id is not None and site_id != before.site_id:
            site = self._sites.get_by_id(site_id)
            if site is None:
                raise ValidationError("Select a valid user and site.")
            changes.update(site_id=site.site_id, site_name=site.name, allowed_radius_meters=site.allowed_radius_meters)

        if scan_time is not None:
            scan_time = to_utc(scan_time, self._tz)
            if scan_time != before.scan_time:
                if before.created_by == Provenance.SCANNER:
                    raise ValidationError("Scan time of a scanner log cannot be changed.")
                changes.update(scan_time=scan_time, date_key=date_key_for(scan_time, self._tz))

        if status is not None:
            changes["status"] = status
            changes["fail_reason"] = (
                None if status == ScanStatus.SUCCESS else before.fail_reason or MANUAL_ENTRY_REASON
            )
        if scan_kind is not None:
            changes["scan_kind"] = scan_kind
        if admin_note is not None:
            changes["admin_note"] = _clean(admin_note)

        after = replace(before, **changes)
        if not self._logs.update_audited(after, self._audit(AuditAction.UPDATE, admin, before, after)):
            raise ValidationError("Log not found.")

        logger.info("Admin %s updated log %s", admin.user_id, log_id)
        return LogChange(event=after, date_keys=tuple(sorted({before.date_key, after.date_key})))

    def delete_entry(self, *, admin: Employee, log_id: int, hard: bool = False) -> LogChange:
        """Soft delete hides the log from aggregation; hard delete removes the row. Both are audited."""
        self._require_admin(admin)
        before = self._require_log(log_id)

        if hard:
            if not self._logs.delete_audited(log_id, self._audit(AuditAction.DELETE, admin, before, None)):
                raise ValidationError("Log not found.")
            logger.info("Admin %s hard-deleted log %s", admin.user_id, log_id)
            return LogChange(event=None, date_keys=(before.date_key,))

        after = replace(before, is_deleted=True)
        if not self._logs.update_audited(after, self._audit(AuditAction.DELETE, admin, before, after)):
            raise ValidationError("Log not found.")
        logger.info("Admin %s soft-deleted log %s", admin.user_id, log_id)
        return LogChange(event=after, date_keys=(before.date_key,))

    def history(self, *, admin: Employee, log_id: int):
        self._require_admin(admin)
        return self._logs.list_audit(log_id)

    def _require_admin(self, admin: Employee) -> None:
        if admin.role != Role.ADMIN:
            raise AuthorizationError("Admin access required.")

    def _require_log(self, log_id: int) -> ScanEvent:
        event = self._logs.get(log_id)
        if event is None:
            raise ValidationError("Log not found.")
        return event

    def _audit(
        self,
        action: AuditAction,
        admin: Employee,
        before: Optional[ScanEvent],
        after: Optional[ScanEvent],
    ) -> AuditEntry:
        return AuditEntry(
            action=action,
            admin_id=admin.user_id,
            admin_email=admin.email,
            created_at=self._clock(),
            before=LogSnapshot.of(before),
            after=LogSnapshot.of(after),
            log_id=(before or after).log_id,
        )


def _clean(note: Optional[str]) -> Optional[str]:
    if note is None:
        return None
    return note.strip() or None
