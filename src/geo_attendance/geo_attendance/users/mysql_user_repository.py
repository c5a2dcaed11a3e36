from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = "user_id, email, name, employee_id, normal_rate, ot_rate, is_admin, is_deleted"


def _to_employee(row: dict) -> Employee:
    return Employee(
        user_id=int(row["user_id"]),
        email=row["email"],
        name=row.get("name") or "User",
        employee_id=row.get("employee_id"),
        normal_rate=float(row.get("normal_rate") or 0),
        ot_rate=float(row.get("ot_rate") or 0),
        is_admin=bool(row.get("is_admin", False)),
        is_deleted=bool(row.get("is_deleted", False)),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

