from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from geo_attendance.core.enums import Provenance, ScanKind, ScanStatus
from geo_attendance.core.exceptions import StorageError
from geo_attendance.scans.model import ScanEvent
from geo_attendance.sessions.model import ReviewNotes, Session
from geo_attendance.sites.model import Site
from geo_attendance.users.model import Employee

KL = ZoneInfo("Asia/Kuala_Lumpur")


class InMemoryScanLogs:
    def __init__(self, events=()):
        self._events: dict[int, ScanEvent] = {}
        self._next_id = 1
        self.audit: list = []
        for e in events:
            self.append(e)

    @property
    def events(self) -> list[ScanEvent]:
        return list(self._events.values())

    def append(self, event: ScanEvent) -> ScanEvent:
        stored = replace(event, log_id=self._next_id)
        self._events[self._next_id] = stored
        self._next_id += 1
        return stored

    def get(self, log_id: int) -> Optional[ScanEvent]:
        return self._events.get(int(log_id))

    def _successes(self):
        return [e for e in self._events.values() if e.is_success and not e.is_deleted]

    def latest_success(self, *, user_id, site_id, date_key):
        items = [e for e in self._successes() if (e.user_id, e.site_id, e.date_key) == (user_id, site_id, date_key)]
        return max(items, key=lambda e: (e.scan_time, e.log_id)) if items else None

    def list_successes(self, *, user_id, date_key):
        items = [e for e in self._successes() if (e.user_id, e.date_key) == (user_id, date_key)]
        return sorted(items, key=lambda e: (e.scan_time, e.log_id))

    def list_successes_between(self, *, start_key, end_key):
        items = [e for e in self._successes() if start_key <= e.date_key <= end_key]
        return sorted(items, key=lambda e: (e.date_key, e.user_id, e.scan_time))

    def append_audited(self, event, audit):
        stored = self.append(event)
        self.audit.append(replace(audit, log_id=stored.log_id))
        return stored

    def update_audited(self, event, audit):
        if event.log_id not in self._events:
            return False
        self._events[event.log_id] = event
        self.audit.append(audit)
        return True

    def delete_audited(self, log_id, audit):
        if self._events.pop(int(log_id), None) is None:
            return False
        self.audit.append(audit)
        return True

    def list_audit(self, log_id):
        return [a for a in self.audit if a.log_id == log_id]


class InMemorySessions:
    def __init__(self):
        self.rows: dict[tuple[int, str], Session] = {}
        self.replace_calls = 0
        self.fail_on: set[tuple[int, str]] = set()

    def get(self, user_id, date_key):
        return self.rows.get((user_id, date_key))

    def replace(self, session):
        key = (session.user_id, session.date_key)
        if key in self.fail_on:
            raise StorageError(f"write failed for {key}")
        self.replace_calls += 1
        self.rows[key] = session
        return session

    def delete(self, user_id, date_key):
        return self.rows.pop((user_id, date_key), None) is not None

    def set_notes(self, user_id, date_key, notes: ReviewNotes):
        row = self.rows.get((user_id, date_key))
        if row is None:
            return False
        self.rows[(user_id, date_key)] = replace(row, late_note=notes.late_note, abnormal_note=notes.abnormal_note)
        return True

    def list_range(self, *, start_key, end_key):
        return [s for (_, d), s in sorted(self.rows.items()) if start_key <= d <= end_key]


class InMemoryEmployees:
    def __init__(self, *employees: Employee):
        self._by_id = {e.user_id: e for e in employees}

    def get_by_id(self, user_id):
        return self._by_id.get(int(user_id))


class InMemorySites:
    def __init__(self, *sites: Site):
        self._by_id = {s.site_id: s for s in sites}

    def get_by_normalized_name(self, name_normalized):
        return next((s for s in self._by_id.values() if s.name_normalized == name_normalized), None)

    def get_by_id(self, site_id):
        return self._by_id.get(int(site_id))

    def list_all(self):
        return list(self._by_id.values())


class InMemorySettings:
    def __init__(self, values=None):
        self.values = values
        self.fail_save = False

    def load_buffers(self):
        return self.values

    def save_buffers(self, values):
        if self.fail_save:
            raise StorageError("settings write failed")
        self.values = dict(values)


def make_event(
    local_time: datetime,
    kind: Optional[ScanKind] = ScanKind.CHECK_IN,
    *,
    user_id: int = 1,
    site_id: int = 10,
    site_name: str = "HQ",
    status: ScanStatus = ScanStatus.SUCCESS,
    is_deleted: bool = False,
    created_by: Provenance = Provenance.SCANNER,
) -> ScanEvent:
    """Event at a wall-clock time in Kuala Lumpur."""
    aware = local_time.replace(tzinfo=KL)
    return ScanEvent(
        user_id=user_id,
        user_email=f"user{user_id}@example.com",
        user_name=f"User {user_id}",
        site_id=site_id,
        site_name=site_name,
        scan_time=aware.astimezone(timezone.utc),
        date_key=aware.strftime("%Y-%m-%d"),
        status=status,
        scan_kind=kind,
        is_deleted=is_deleted,
        created_by=created_by,
    )


@pytest.fixture
def kl():
    return KL


@pytest.fixture
def worker():
    return Employee(user_id=1, email="user1@example.com", name="User 1", normal_rate=10.0, ot_rate=15.0)


@pytest.fixture
def admin():
    return Employee(user_id=99, email="admin@example.com", name="Admin", is_admin=True)


@pytest.fixture
def hq_site():
    return Site(site_id=10, name="HQ", name_normalized="hq", lat=3.1390, lng=101.6869, allowed_radius_meters=100.0)


@pytest.fixture
def logs():
    return InMemoryScanLogs()


@pytest.fixture
def sessions():
    return InMemorySessions()


@pytest.fixture
def settings_store():
    return InMemorySettings()
