from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Site
from .repository import SiteRepository

_COLUMNS = "site_id, name, name_normalized, lat, lng, allowed_radius_meters"


def _to_site(r: dict) -> Site:
    return Site(
        site_id=int(r["site_id"]),
        name=r["name"],
        name_normalized=r["name_normalized"],
        lat=float(r["lat"]),
        lng=float(r["lng"]),
        allowed_radius_meters=float(r["allowed_radius_meters"]),
    )


class MySQLSiteRepository(SiteRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_normalized_name(self, name_normalized: str) -> Optional[Site]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM sites WHERE name_normalized=%s LIMIT 1",
                (name_normalized,),
            )
            r = fetchone(cur)
            return _to_site(r) if r else None

    def get_by_id(self, site_id: int) -> Optional[Site]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sites WHERE site_id=%s", (int(site_id),))
            r = fetchone(cur)
            return _to_site(r) if r else None

    def list_all(self) -> Sequence[Site]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sites ORDER BY name")
            return [_to_site(r) for r in fetchall(cur)]
