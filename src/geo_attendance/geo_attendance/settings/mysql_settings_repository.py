from __future__ import annotations

from typing import Any, Mapping, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, from_db_json, to_db_json
from .repository import SettingsRepository

BUFFERS_KEY = "buffers"


class MySQLSettingsRepository(SettingsRepository):
    """Settings stored as JSON documents in ``app_settings``, one row per key."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def load_buffers(self) -> Optional[Mapping[str, Any]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT setting_value FROM app_settings WHERE setting_key=%s", (BUFFERS_KEY,))
            r = fetchone(cur)
            if not r:
                return None
            value = from_db_json(r["setting_value"])
            return value if isinstance(value, dict) else None

    def save_buffers(self, values: Mapping[str, int]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO app_settings(setting_key, setting_value)
                VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE setting_value=VALUES(setting_value)
                """,
                (BUFFERS_KEY, to_db_json(dict(values))),
            )
