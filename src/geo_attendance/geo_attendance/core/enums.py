from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role of the acting user, used for admin-only operations."""

    ADMIN = "admin"
    STAFF = "staff"


class ScanStatus(str, Enum):
    SUCCESS = "success"
    FAIL = "fail"


class ScanKind(str, Enum):
    CHECK_IN = "check-in"
    CHECK_OUT = "check-out"


class Provenance(str, Enum):
    """Who wrote a scan log entry."""

    SCANNER = "scanner"
    ADMIN = "admin"


class SessionStatus(str, Enum):
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"


class AbnormalReason(str, Enum):
    """Why a session is withheld from payroll pending review."""

    MISSING_CHECK_IN = "MISSING_CHECK_IN"
    MISSING_CHECK_OUT = "MISSING_CHECK_OUT"
    SHORT_DAY = "SHORT_DAY"
    LATE_CHECKOUT = "LATE_CHECKOUT"

    @property
    def label(self) -> str:
        return _ABNORMAL_LABELS[self]


_ABNORMAL_LABELS = {
    AbnormalReason.MISSING_CHECK_IN: "Missing check-in",
    AbnormalReason.MISSING_CHECK_OUT: "Missing check-out",
    AbnormalReason.SHORT_DAY: "Total hours < 9",
    AbnormalReason.LATE_CHECKOUT: "Checkout after 10pm",
}


class LocationErrorKind(str, Enum):
    """Classified geolocation failure (browser codes 1/2/3)."""

    PERMISSION_DENIED = "PERMISSION_DENIED"
    POSITION_UNAVAILABLE = "POSITION_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"

    @classmethod
    def from_code(cls, code) -> "LocationErrorKind":
        mapping = {1: cls.PERMISSION_DENIED, 2: cls.POSITION_UNAVAILABLE, 3: cls.TIMEOUT}
        try:
            return mapping.get(int(code), cls.POSITION_UNAVAILABLE)
        except (TypeError, ValueError):
            pass
        try:
            return cls(str(code).strip().upper())
        except ValueError:
            return cls.POSITION_UNAVAILABLE


class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
