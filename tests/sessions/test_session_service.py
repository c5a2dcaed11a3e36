from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import pytest

from conftest import InMemoryEmployees, InMemoryScanLogs, make_event
from geo_attendance.core.enums import AbnormalReason, Role, ScanKind
from geo_attendance.core.exceptions import AuthorizationError, ValidationError
from geo_attendance.sessions.model import SessionKey
from geo_attendance.sessions.service import SessionAggregatorService
from geo_attendance.settings.service import BufferConfigProvider

IN = ScanKind.CHECK_IN
OUT = ScanKind.CHECK_OUT


def build(logs, sessions, settings_store, worker, kl):
    return SessionAggregatorService(
        logs,
        sessions,
        InMemoryEmployees(worker),
        BufferConfigProvider(settings_store),
        tz=kl,
    )


def test_rebuild_day_writes_exactly_one_session(sessions, settings_store, worker, kl):
    logs = InMemoryScanLogs([make_event(datetime(2025, 3, 3, 8, 0), IN), make_event(datetime(2025, 3, 3, 17, 0), OUT)])
    service = build(logs, sessions, settings_store, worker, kl)

    first = service.rebuild_day(1, "2025-03-03")
    second = service.rebuild_day(1, "2025-03-03")

    assert first == second
    assert list(sessions.rows) == [(1, "2025-03-03")]
    assert sessions.rows[(1, "2025-03-03")].amount == 90.0


def test_rebuild_day_uses_employee_rates(sessions, settings_store, worker, kl):
    logs = InMemoryScanLogs([make_event(datetime(2025, 3, 3, 8, 0), IN), make_event(datetime(2025, 3, 3, 19, 30), OUT)])

    session = build(logs, sessions, settings_store, worker, kl).rebuild_day(1, "2025-03-03")

    assert (session.normal_rate, session.ot_rate) == (10.0, 15.0)
    assert session.amount == 120.0


def test_rebuild_day_reads_buffers_from_settings(sessions, settings_store, worker, kl):
    settings_store.values = {"late_buffer_minutes": 15}
    logs = InMemoryScanLogs([make_event(datetime(2025, 3, 3, 8, 10), IN), make_event(datetime(2025, 3, 3, 18, 0), OUT)])

    session = build(logs, sessions, settings_store, worker, kl).rebuild_day(1, "2025-03-03")

    assert session.is_late is False


def test_rebuild_day_without_events_removes_session(sessions, settings_store, worker, kl):
    logs = InMemoryScanLogs([make_event(datetime(2025, 3, 3, 8, 0), IN)])
    service = build(logs, sessions, settings_store, worker, kl)
    service.rebuild_day(1, "2025-03-03")

    logs.update_audited(replace(logs.get(1), is_deleted=True), None)

    assert service.rebuild_day(1, "2025-03-03") is None
    assert sessions.rows == {}


def test_reviewer_notes_survive_recompute(sessions, settings_store, worker, kl):
    logs = InMemoryScanLogs([make_event(datetime(2025, 3, 3, 8, 30), IN)])
    service = build(logs, sessions, settings_store, worker, kl)
    service.rebuild_day(1, "2025-03-03")

    service.annotate_late(current_role=Role.ADMIN, user_id=1, date_key="2025-03-03", note="  flat tyre ")
    service.annotate_abnormal(current_role=Role.ADMIN, user_id=1, date_key="2025-03-03", note="forgot to scan out")
    logs.append(make_event(datetime(2025, 3, 3, 18, 0), OUT))
    session = service.rebuild_day(1, "2025-03-03")

    assert session.late_note == "flat tyre"
    assert session.abnormal_note == "forgot to scan out"
    assert session.is_abnormal is False


def test_clear_notes(sessions, settings_store, worker, kl):
    logs = InMemoryScanLogs([make_event(datetime(2025, 3, 3, 8, 30), IN)])
    service = build(logs, sessions, settings_store, worker, kl)
    service.rebuild_day(1, "2025-03-03")
    service.annotate_late(current_role=Role.ADMIN, user_id=1, date_key="2025-03-03", note="flat tyre")

    cleared = service.clear_notes(current_role=Role.ADMIN, user_id=1, date_key="2025-03-03")

    assert cleared.late_note is None
    assert service.rebuild_day(1, "2025-03-03").late_note is None


def test_annotate_requires_admin_and_existing_session(sessions, settings_store, worker, kl):
    service = build(InMemoryScanLogs(), sessions, settings_store, worker, kl)

    with pytest.raises(AuthorizationError):
        service.annotate_late(current_role=Role.STAFF, user_id=1, date_key="2025-03-03", note="x")
    with pytest.raises(ValidationError):
        service.annotate_late(current_role=Role.ADMIN, user_id=1, date_key="2025-03-03", note="x")


def test_rebuild_range_groups_by_user_and_day(sessions, settings_store, worker, kl):
    logs = InMemoryScanLogs(
        [
            make_event(datetime(2025, 3, 4, 8, 0), IN),
            make_event(datetime(2025, 3, 4, 17, 0), OUT),
            make_event(datetime(2025, 3, 3, 8, 0), IN, user_id=2),
            make_event(datetime(2025, 3, 3, 8, 0), IN),
            make_event(datetime(2025, 3, 6, 8, 0), IN),
        ]
    )
    service = build(logs, sessions, settings_store, worker, kl)

    report = service.rebuild_range(current_role=Role.ADMIN, start="2025-03-03", end="2025-03-05")

    assert report.ok
    assert report.rebuilt == (
        SessionKey(1, "2025-03-03"),
        SessionKey(2, "2025-03-03"),
        SessionKey(1, "2025-03-04"),
    )
    assert (1, "2025-03-06") not in sessions.rows
    # unknown employee: identity taken from the logs, zero rates
    assert sessions.rows[(2, "2025-03-03")].user_email == "user2@example.com"
    assert sessions.rows[(2, "2025-03-03")].normal_rate == 0.0


def test_rebuild_range_clears_sessions_without_remaining_events(sessions, settings_store, worker, kl):
    logs = InMemoryScanLogs([make_event(datetime(2025, 3, 3, 8, 0), IN)])
    service = build(logs, sessions, settings_store, worker, kl)
    service.rebuild_day(1, "2025-03-03")
    logs.delete_audited(1, None)

    report = service.rebuild_range(current_role=Role.ADMIN, start="2025-03-01", end="2025-03-31")

    assert report.cleared == (SessionKey(1, "2025-03-03"),)
    assert report.rebuilt == ()
    assert sessions.rows == {}


def test_rebuild_range_stops_at_first_storage_error(sessions, settings_store, worker, kl):
    logs = InMemoryScanLogs(
        [
            make_event(datetime(2025, 3, 3, 8, 0), IN),
            make_event(datetime(2025, 3, 4, 8, 0), IN),
            make_event(datetime(2025, 3, 5, 8, 0), IN),
        ]
    )
    sessions.fail_on.add((1, "2025-03-04"))
    service = build(logs, sessions, settings_store, worker, kl)

    report = service.rebuild_range(current_role=Role.ADMIN, start="2025-03-03", end="2025-03-05")

    assert not report.ok
    assert report.rebuilt == (SessionKey(1, "2025-03-03"),)
    assert report.failed == SessionKey(1, "2025-03-04")
    assert "write failed" in report.error
    assert (1, "2025-03-05") not in sessions.rows
    assert report.as_dict()["failed"] == "1|2025-03-04"


def test_rebuild_range_missing_reason_after_recompute(sessions, settings_store, worker, kl):
    logs = InMemoryScanLogs([make_event(datetime(2025, 3, 3, 17, 0), OUT)])
    service = build(logs, sessions, settings_store, worker, kl)

    service.rebuild_range(current_role=Role.ADMIN, start="2025-03-03", end="2025-03-03")

    assert sessions.rows[(1, "2025-03-03")].abnormal_reasons == (AbnormalReason.MISSING_CHECK_IN,)


@pytest.mark.parametrize("start, end", [("2025-03-05", "2025-03-01"), ("03/01/2025", "2025-03-05"), (None, "2025-03-05")])
def test_rebuild_range_rejects_bad_dates(sessions, settings_store, worker, kl, start, end):
    service = build(InMemoryScanLogs(), sessions, settings_store, worker, kl)

    with pytest.raises(ValidationError):
        service.rebuild_range(current_role=Role.ADMIN, start=start, end=end)


def test_rebuild_range_requires_admin(sessions, settings_store, worker, kl):
    service = build(InMemoryScanLogs(), sessions, settings_store, worker, kl)

    with pytest.raises(AuthorizationError):
        service.rebuild_range(current_role=Role.STAFF, start="2025-03-01", end="2025-03-02")
