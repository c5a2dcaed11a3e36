from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from ..core.enums import AuditAction, Provenance, ScanKind, ScanStatus

if TYPE_CHECKING:
    from ..sessions.model import Session


@dataclass(frozen=True)
class ScanEvent:
    """Domain entity: one scan attempt, successful or not.

    ``scan_time`` is timezone-aware UTC. ``date_key`` is the business-timezone day.
    """

    user_id: int
    user_email: str
    user_name: str
    site_id: Optional[int]
    site_name: str
    scan_time: datetime
    date_key: str
    status: ScanStatus
    scan_kind: Optional[ScanKind] = None
    distance_meters: Optional[float] = None
    allowed_radius_meters: Optional[float] = None
    user_lat: Optional[float] = None
    user_lng: Optional[float] = None
    fail_reason: Optional[str] = None
    is_deleted: bool = False
    created_by: Provenance = Provenance.SCANNER
    admin_note: Optional[str] = None
    log_id: Optional[int] = None

    @property
    def is_success(self) -> bool:
        return self.status == ScanStatus.SUCCESS

    @property
    def effective_kind(self) -> ScanKind:
        """Toggle view of the kind: a success stored without one counts as a check-in."""
        return self.scan_kind or ScanKind.CHECK_IN


@dataclass(frozen=True)
class LogSnapshot:
    """Before/after image of a log kept in the audit trail."""

    user_id: int
    user_email: str
    site_id: Optional[int]
    site_name: str
    scan_time: datetime
    status: ScanStatus
    scan_kind: Optional[ScanKind]
    admin_note: Optional[str]
    fail_reason: Optional[str]
    is_deleted: bool
    date_key: str

    @classmethod
    def of(cls, event: Optional[ScanEvent]) -> Optional["LogSnapshot"]:
        if event is None:
            return None
        return cls(
            user_id=event.user_id,
            user_email=event.user_email,
            site_id=event.site_id,
            site_name=event.site_name,
            scan_time=event.scan_time,
            status=event.status,
            scan_kind=event.scan_kind,
            admin_note=event.admin_note,
            fail_reason=event.fail_reason,
            is_deleted=event.is_deleted,
            date_key=event.date_key,
        )

    def as_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "user_email": self.user_email,
            "site_id": self.site_id,
            "site_name": self.site_name,
            "scan_time": self.scan_time.isoformat(),
            "status": self.status.value,
            "scan_kind": self.scan_kind.value if self.scan_kind else None,
            "admin_note": self.admin_note,
            "fail_reason": self.fail_reason,
            "is_deleted": self.is_deleted,
            "date_key": self.date_key,
        }


@dataclass(frozen=True)
class AuditEntry:
    action: AuditAction
    admin_id: int
    admin_email: str
    created_at: datetime
    before: Optional[LogSnapshot] = None
    after: Optional[LogSnapshot] = None
    log_id: Optional[int] = None


@dataclass(frozen=True)
class ScanOutcome:
    """What the scanning user gets back."""

    event: ScanEvent
    message: str
    session: Optional["Session"] = None


@dataclass(frozen=True)
class LogChange:
    """Result of an admin log mutation: the log as stored and the days whose sessions are now stale."""

    event: Optional[ScanEvent]
    date_keys: tuple[str, ...]
