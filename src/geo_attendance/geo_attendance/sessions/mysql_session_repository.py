from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import AbnormalReason, SessionStatus
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
from .model import ReviewNotes, Session
from .repository import SessionRepository

_COLUMNS = """
    user_id, user_email, user_name, date_key,
    site_in_id, site_in_name, site_out_id, site_out_name,
    check_in_time, check_out_time, total_hours, normal_hours, ot_hours,
    normal_rate, ot_rate, amount, status, is_late, late_reason, late_note,
    is_abnormal, abnormal_reasons, abnormal_note
"""


def _to_session(r: dict) -> Session:
    return Session(
        user_id=int(r["user_id"]),
        user_email=r["user_email"],
        user_name=r["user_name"],
        date_key=r["date_key"],
        site_in_id=int(r["site_in_id"]) if r.get("site_in_id") is not None else None,
        site_in_name=r.get("site_in_name"),
        site_out_id=int(r["site_out_id"]) if r.get("site_out_id") is not None else None,
        site_out_name=r.get("site_out_name"),
        check_in_time=from_db_datetime(r.get("check_in_time")),
        check_out_time=from_db_datetime(r.get("check_out_time")),
        total_hours=optional_float(r.get("total_hours")),
        normal_hours=optional_float(r.get("normal_hours")),
        ot_hours=optional_float(r.get("ot_hours")),
        normal_rate=float(r.get("normal_rate") or 0),
        ot_rate=float(r.get("ot_rate") or 0),
        amount=optional_float(r.get("amount")),
        status=SessionStatus(r["status"]),
        is_late=bool(r.get("is_late")),
        late_reason=r.get("late_reason"),
        late_note=r.get("late_note"),
        is_abnormal=bool(r.get("is_abnormal")),
        abnormal_reasons=tuple(AbnormalReason(v) for v in (from_db_json(r.get("abnormal_reasons")) or [])),
        abnormal_note=r.get("abnormal_note"),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, user_id: int, date_key: str) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_sessions WHERE user_id=%s AND date_key=%s",
                (int(user_id), date_key),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def replace(self, session: Session) -> Session:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM attendance_sessions WHERE user_id=%s AND date_key=%s",
                (session.user_id, session.date_key),
            )
            cur.execute(
                f"""
                INSERT INTO attendance_sessions({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    session.user_id,
                    session.user_email,
                    session.user_name,
                    session.date_key,
                    session.site_in_id,
                    session.site_in_name,
                    session.site_out_id,
                    session.site_out_name,
                    to_db_datetime(session.check_in_time),
                    to_db_datetime(session.check_out_time),
                    session.total_hours,
                    session.normal_hours,
                    session.ot_hours,
                    session.normal_rate,
                    session.ot_rate,
                    session.amount,
                    session.status.value,
                    int(session.is_late),
                    session.late_reason,
                    session.late_note,
                    int(session.is_abnormal),
                    to_db_json([r.value for r in session.abnormal_reasons]),
                    session.abnormal_note,
                ),
            )
        return session

    def delete(self, user_id: int, date_key: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM attendance_sessions WHERE user_id=%s AND date_key=%s",
                (int(user_id), date_key),
            )
            return cur.rowcount > 0

    def set_notes(self, user_id: int, date_key: str, notes: ReviewNotes) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_sessions
                SET late_note=%s, abnormal_note=%s
                WHERE user_id=%s AND date_key=%s
                """,
                (notes.late_note, notes.abnormal_note, int(user_id), date_key),
            )
            return cur.rowcount > 0

    def list_range(self, *, start_key: str, end_key: str) -> Sequence[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_sessions
                WHERE date_key BETWEEN %s AND %s
                ORDER BY date_key, user_id
                """,
                (start_key, end_key),
            )
            return [_to_session(r) for r in fetchall(cur)]
