from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import AuditAction, Provenance, ScanKind, ScanStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    from_db_datetime,
    from_db_json,
    optional_float,
    to_db_datetime,
    to_db_json,
)
from .model import AuditEntry, LogSnapshot, ScanEvent
from .repository import ScanLogRepository

_COLUMNS = """
    log_id, user_id, user_email, user_name, site_id, site_name, scan_time, date_key,
    status, scan_kind, distance_meters, allowed_radius_meters, user_lat, user_lng,
    fail_reason, is_deleted, created_by, admin_note
"""

_INSERT = """
    INSERT INTO scan_logs(
        user_id, user_email, user_name, site_id, site_name, scan_time, date_key,
        status, scan_kind, distance_meters, allowed_radius_meters, user_lat, user_lng,
        fail_reason, is_deleted, created_by, admin_note
    )
    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
"""


def _to_event(r: dict) -> ScanEvent:
    return ScanEvent(
        log_id=int(r["log_id"]),
        user_id=int(r["user_id"]),
        user_email=r.get("user_email") or "",
        user_name=r.get("user_name") or "User",
        site_id=int(r["site_id"]) if r.get("site_id") is not None else None,
        site_name=r.get("site_name") or "Unknown",
        scan_time=from_db_datetime(r["scan_time"]),
        date_key=r["date_key"],
        status=ScanStatus(r["status"]),
        scan_kind=ScanKind(r["scan_kind"]) if r.get("scan_kind") else None,
        distance_meters=optional_float(r.get("distance_meters")),
        allowed_radius_meters=optional_float(r.get("allowed_radius_meters")),
        user_lat=optional_float(r.get("user_lat")),
        user_lng=optional_float(r.get("user_lng")),
        fail_reason=r.get("fail_reason"),
        is_deleted=bool(r.get("is_deleted")),
        created_by=Provenance(r.get("created_by") or Provenance.SCANNER.value),
        admin_note=r.get("admin_note"),
    )


def _event_params(e: ScanEvent) -> tuple:
    return (
        e.user_id,
        e.user_email,
        e.user_name,
        e.site_id,
        e.site_name,
        to_db_datetime(e.scan_time),
        e.date_key,
        e.status.value,
        e.scan_kind.value if e.scan_kind else None,
        e.distance_meters,
        e.allowed_radius_meters,
        e.user_lat,
        e.user_lng,
        e.fail_reason,
        int(e.is_deleted),
        e.created_by.value,
        e.admin_note,
    )


def _to_snapshot(raw) -> Optional[LogSnapshot]:
    data = from_db_json(raw)
    if not data:
        return None
    return LogSnapshot(
        user_id=int(data["user_id"]),
        user_email=data.get("user_email") or "",
        site_id=data.get("site_id"),
        site_name=data.get("site_name") or "Unknown",
        scan_time=datetime.fromisoformat(data["scan_time"]),
        status=ScanStatus(data["status"]),
        scan_kind=ScanKind(data["scan_kind"]) if data.get("scan_kind") else None,
        admin_note=data.get("admin_note"),
        fail_reason=data.get("fail_reason"),
        is_deleted=bool(data.get("is_deleted")),
        date_key=data["date_key"],
    )


def _insert_audit(cur, log_id: int, audit: AuditEntry) -> None:
    cur.execute(
        """
        INSERT INTO scan_log_audit(log_id, action, admin_id, admin_email, created_at, before_json, after_json)
        VALUES(%s,%s,%s,%s,%s,%s,%s)
        """,
        (
            log_id,
            audit.action.value,
            audit.admin_id,
            audit.admin_email,
            to_db_datetime(audit.created_at),
            to_db_json(audit.before.as_dict()) if audit.before else None,
            to_db_json(audit.after.as_dict()) if audit.after else None,
        ),
    )


class MySQLScanLogRepository(ScanLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(self, event: ScanEvent) -> ScanEvent:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_INSERT, _event_params(event))
            log_id = int(cur.lastrowid)
        return _with_id(event, log_id)

    def get(self, log_id: int) -> Optional[ScanEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM scan_logs WHERE log_id=%s", (int(log_id),))
            r = fetchone(cur)
            return _to_event(r) if r else None

    def latest_success(self, *, user_id: int, site_id: int, date_key: str) -> Optional[ScanEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM scan_logs
                WHERE user_id=%s AND site_id=%s AND date_key=%s
                  AND status='success' AND is_deleted=0
                ORDER BY scan_time DESC, log_id DESC
                LIMIT 1
                """,
                (int(user_id), int(site_id), date_key),
            )
            r = fetchone(cur)
            return _to_event(r) if r else None

    def list_successes(self, *, user_id: int, date_key: str) -> Sequence[ScanEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM scan_logs
                WHERE user_id=%s AND date_key=%s AND status='success' AND is_deleted=0
                ORDER BY scan_time, log_id
                """,
                (int(user_id), date_key),
            )
            return [_to_event(r) for r in fetchall(cur)]

    def list_successes_between(self, *, start_key: str, end_key: str) -> Sequence[ScanEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM scan_logs
                WHERE date_key BETWEEN %s AND %s AND status='success' AND is_deleted=0
                ORDER BY date_key, user_id, scan_time, log_id
                """,
                (start_key, end_key),
            )
            return [_to_event(r) for r in fetchall(cur)]

    def append_audited(self, event: ScanEvent, audit: AuditEntry) -> ScanEvent:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_INSERT, _event_params(event))
            log_id = int(cur.lastrowid)
            _insert_audit(cur, log_id, audit)
        return _with_id(event, log_id)

    def update_audited(self, event: ScanEvent, audit: AuditEntry) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE scan_logs
                SET site_id=%s, site_name=%s, scan_time=%s, date_key=%s, status=%s, scan_kind=%s,
                    fail_reason=%s, is_deleted=%s, admin_note=%s
                WHERE log_id=%s
                """,
                (
                    event.site_id,
                    event.site_name,
                    to_db_datetime(event.scan_time),
                    event.date_key,
                    event.status.value,
                    event.scan_kind.value if event.scan_kind else None,
                    event.fail_reason,
                    int(event.is_deleted),
                    event.admin_note,
                    int(event.log_id),
                ),
            )
            # rowcount is 0 when nothing changed, so check existence separately.
            cur.execute("SELECT 1 AS found FROM scan_logs WHERE log_id=%s", (int(event.log_id),))
            if not fetchone(cur):
                return False
            _insert_audit(cur, int(event.log_id), audit)
            return True

    def delete_audited(self, log_id: int, audit: AuditEntry) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM scan_logs WHERE log_id=%s", (int(log_id),))
            if cur.rowcount <= 0:
                return False
            _insert_audit(cur, int(log_id), audit)
            return True

    def list_audit(self, log_id: int) -> Sequence[AuditEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT log_id, action, admin_id, admin_email, created_at, before_json, after_json
                FROM scan_log_audit
                WHERE log_id=%s
                ORDER BY created_at, audit_id
                """,
                (int(log_id),),
            )
            return [
                AuditEntry(
                    log_id=int(r["log_id"]),
                    action=AuditAction(r["action"]),
                    admin_id=int(r["admin_id"]),
                    admin_email=r.get("admin_email") or "",
                    created_at=from_db_datetime(r["created_at"]),
                    before=_to_snapshot(r.get("before_json")),
                    after=_to_snapshot(r.get("after_json")),
                )
                for r in fetchall(cur)
            ]


def _with_id(event: ScanEvent, log_id: int) -> ScanEvent:
    return replace(event, log_id=log_id)
