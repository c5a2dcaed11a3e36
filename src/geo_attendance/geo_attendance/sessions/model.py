from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import AbnormalReason, SessionStatus


@dataclass(frozen=True)
class SessionKey:
    user_id: int
    date_key: str

    def __str__(self) -> str:
        return f"{self.user_id}|{self.date_key}"


@dataclass(frozen=True)
class PayRates:
    """Rates snapshot used for one aggregation run."""

    normal_rate: float = 0.0
    ot_rate: float = 0.0


@dataclass(frozen=True)
class ReviewNotes:
    """Operator annotations on a session; carried across recomputes."""

    late_note: Optional[str] = None
    abnormal_note: Optional[str] = None


@dataclass(frozen=True)
class Session:
    """Derived daily work record for one (user, day). Replaced wholesale on every rebuild."""

    user_id: int
    user_email: str
    user_name: str
    date_key: str
    site_in_id: Optional[int]
    site_in_name: Optional[str]
    site_out_id: Optional[int]
    site_out_name: Optional[str]
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    total_hours: Optional[float]
    normal_hours: Optional[float]
    ot_hours: Optional[float]
    normal_rate: float
    ot_rate: float
    amount: Optional[float]
    status: SessionStatus
    is_late: bool
    late_reason: Optional[str]
    is_abnormal: bool
    abnormal_reasons: tuple[AbnormalReason, ...] = field(default_factory=tuple)
    late_note: Optional[str] = None
    abnormal_note: Optional[str] = None

    @property
    def key(self) -> SessionKey:
        return SessionKey(self.user_id, self.date_key)

    @property
    def notes(self) -> ReviewNotes:
        return ReviewNotes(late_note=self.late_note, abnormal_note=self.abnormal_note)

    @property
    def abnormal_labels(self) -> list[str]:
        return [r.label for r in self.abnormal_reasons]

    def as_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "user_email": self.user_email,
            "user_name": self.user_name,
            "date_key": self.date_key,
            "site_in_id": self.site_in_id,
            "site_in_name": self.site_in_name,
            "site_out_id": self.site_out_id,
            "site_out_name": self.site_out_name,
            "check_in_time": self.check_in_time.isoformat() if self.check_in_time else None,
            "check_out_time": self.check_out_time.isoformat() if self.check_out_time else None,
            "total_hours": self.total_hours,
            "normal_hours": self.normal_hours,
            "ot_hours": self.ot_hours,
            "normal_rate": self.normal_rate,
            "ot_rate": self.ot_rate,
            "amount": self.amount,
            "status": self.status.value,
            "is_late": self.is_late,
            "late_reason": self.late_reason,
            "late_note": self.late_note,
            "is_abnormal": self.is_abnormal,
            "abnormal_reasons": self.abnormal_labels,
            "abnormal_note": self.abnormal_note,
        }


@dataclass(frozen=True)
class RangeRebuildReport:
    """Outcome of an admin recompute. Keys before ``failed`` were rebuilt; later ones untouched."""

    start: str
    end: str
    rebuilt: tuple[SessionKey, ...] = ()
    cleared: tuple[SessionKey, ...] = ()
    failed: Optional[SessionKey] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failed is None

    def as_dict(self) -> dict:
        return {
            "start": self.start,
            "end": self.end,
            "ok": self.ok,
            "rebuilt": [str(k) for k in self.rebuilt],
            "cleared": [str(k) for k in self.cleared],
            "failed": str(self.failed) if self.failed else None,
            "error": self.error,
        }
