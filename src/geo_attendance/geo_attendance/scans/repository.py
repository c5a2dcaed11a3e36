from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AuditEntry, ScanEvent


class ScanLogRepository(Protocol):
    """Append-mostly store of scan attempts."""

    def append(self, event: ScanEvent) -> ScanEvent:
        """Insert and return the event with its ``log_id`` set."""

        raise NotImplementedError

    def get(self, log_id: int) -> Optional[ScanEvent]:
        raise NotImplementedError

    def latest_success(self, *, user_id: int, site_id: int, date_key: str) -> Optional[ScanEvent]:
        """Most recent non-deleted success for (user, site, day), by scan time."""

        raise NotImplementedError

    def list_successes(self, *, user_id: int, date_key: str) -> Sequence[ScanEvent]:
        """Non-deleted successes for (user, day) ordered by scan time."""

        raise NotImplementedError

    def list_successes_between(self, *, start_key: str, end_key: str) -> Sequence[ScanEvent]:
        """Non-deleted successes whose date_key lies in [start_key, end_key]."""

        raise NotImplementedError

    def append_audited(self, event: ScanEvent, audit: AuditEntry) -> ScanEvent:
        """Admin insert and its audit entry, written together."""

        raise NotImplementedError

    def update_audited(self, event: ScanEvent, audit: AuditEntry) -> bool:
        raise NotImplementedError

    def delete_audited(self, log_id: int, audit: AuditEntry) -> bool:
        """Hard delete; the audit entry survives the log."""

        raise NotImplementedError

    def list_audit(self, log_id: int) -> Sequence[AuditEntry]:
        raise NotImplementedError
