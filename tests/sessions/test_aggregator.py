from datetime import datetime

import pytest

from conftest import make_event
from geo_attendance.core.enums import AbnormalReason, ScanKind, ScanStatus, SessionStatus
from geo_attendance.sessions.aggregator import aggregate_day
from geo_attendance.sessions.model import PayRates, ReviewNotes
from geo_attendance.settings.model import BufferConfig

DAY = "2025-03-03"
IN = ScanKind.CHECK_IN
OUT = ScanKind.CHECK_OUT


def at(hour, minute):
    return datetime(2025, 3, 3, hour, minute)


def run(events, worker, kl, **kwargs):
    kwargs.setdefault("buffers", BufferConfig())
    return aggregate_day(events, user=worker, date_key=DAY, tz=kl, **kwargs)


def test_normal_day(worker, kl):
    s = run([make_event(at(7, 55), IN), make_event(at(17, 3), OUT)], worker, kl)

    assert s.is_late is False
    assert s.total_hours == 9.13
    assert s.is_abnormal is False
    assert s.abnormal_reasons == ()
    assert s.normal_hours == 9.0
    assert s.ot_hours == 0.0
    assert s.amount == 90.0
    assert s.status == SessionStatus.COMPLETE


def test_early_checkout_padding_credits_up_to_five_pm(worker, kl):
    s = run([make_event(at(8, 0), IN), make_event(at(16, 58), OUT)], worker, kl)

    # 8h58m worked plus 2 minutes of padding
    assert s.total_hours == 9.0
    assert s.is_abnormal is False
    assert s.normal_hours == 9.0


def test_checkout_before_padding_window_is_short_day(worker, kl):
    s = run([make_event(at(8, 0), IN), make_event(at(16, 54), OUT)], worker, kl)

    assert s.total_hours == 8.9
    assert s.abnormal_reasons == (AbnormalReason.SHORT_DAY,)
    assert s.normal_hours is None and s.ot_hours is None and s.amount is None


def test_missing_check_in(worker, kl):
    s = run([make_event(at(17, 0), OUT)], worker, kl)

    assert AbnormalReason.MISSING_CHECK_IN in s.abnormal_reasons
    assert s.abnormal_labels == ["Missing check-in"]
    assert s.total_hours is None
    assert s.normal_hours is None
    assert s.ot_hours is None
    assert s.amount is None
    assert s.status == SessionStatus.INCOMPLETE
    assert s.check_in_time is None
    assert s.site_out_name == "HQ"


def test_missing_check_out(worker, kl):
    s = run([make_event(at(8, 0), IN)], worker, kl)

    assert s.abnormal_reasons == (AbnormalReason.MISSING_CHECK_OUT,)
    assert s.status == SessionStatus.INCOMPLETE
    assert s.site_in_name == "HQ"
    assert s.site_out_id is None


@pytest.mark.parametrize(
    "check_in, expected_late",
    [((8, 5), False), ((8, 6), True), ((7, 30), False)],
)
def test_lateness_threshold_uses_late_buffer(worker, kl, check_in, expected_late):
    s = run([make_event(at(*check_in), IN), make_event(at(18, 0), OUT)], worker, kl)

    assert s.is_late is expected_late
    if expected_late:
        assert s.late_reason == "Check-in after 8:00 + 5 min"
    else:
        assert s.late_reason is None


def test_late_reason_records_configured_buffer(worker, kl):
    s = run(
        [make_event(at(8, 11), IN), make_event(at(18, 0), OUT)],
        worker,
        kl,
        buffers=BufferConfig(late_buffer_minutes=10),
    )

    assert s.is_late is True
    assert s.late_reason == "Check-in after 8:00 + 10 min"


def test_evening_overtime(worker, kl):
    s = run([make_event(at(8, 0), IN), make_event(at(19, 30), OUT)], worker, kl)

    assert s.total_hours == 11.5
    assert s.normal_hours == 9.0
    assert s.ot_hours == 2.0
    assert s.amount == 120.0


def test_checkout_in_ot_window_snaps_to_ten_pm(worker, kl):
    s = run([make_event(at(8, 0), IN), make_event(at(21, 50), OUT)], worker, kl)

    assert s.ot_hours == 4.0
    assert s.amount == 150.0
    assert s.is_abnormal is False


def test_checkout_at_end_of_ot_window_is_not_abnormal(worker, kl):
    s = run([make_event(at(8, 0), IN), make_event(at(23, 0), OUT)], worker, kl)

    assert s.is_abnormal is False
    assert s.ot_hours == 4.0


def test_checkout_after_ot_window_is_abnormal(worker, kl):
    s = run([make_event(at(8, 0), IN), make_event(at(23, 1), OUT)], worker, kl)

    assert s.abnormal_reasons == (AbnormalReason.LATE_CHECKOUT,)
    assert s.abnormal_labels == ["Checkout after 10pm"]
    assert s.amount is None


def test_deleted_events_are_excluded(worker, kl):
    events = [
        make_event(at(8, 0), IN),
        make_event(at(17, 30), OUT, is_deleted=True),
    ]
    s = run(events, worker, kl)

    assert s.abnormal_reasons == (AbnormalReason.MISSING_CHECK_OUT,)
    assert s.check_out_time is None


def test_failed_scans_are_ignored(worker, kl):
    events = [
        make_event(at(7, 0), IN, status=ScanStatus.FAIL),
        make_event(at(8, 0), IN),
        make_event(at(17, 30), OUT),
    ]
    s = run(events, worker, kl)

    assert s.check_in_time == events[1].scan_time


def test_success_without_kind_is_not_aggregated(worker, kl):
    s = run([make_event(at(8, 0), None), make_event(at(17, 30), OUT)], worker, kl)

    assert s.check_in_time is None
    assert AbnormalReason.MISSING_CHECK_IN in s.abnormal_reasons
    assert s.total_hours is None


def test_success_without_kind_does_not_move_check_in(worker, kl):
    events = [make_event(at(7, 0), None), make_event(at(8, 0), IN), make_event(at(17, 30), OUT)]
    s = run(events, worker, kl)

    assert s.check_in_time == events[1].scan_time
    assert s.total_hours == 9.5


def test_uses_first_check_in_and_last_check_out(worker, kl):
    events = [
        make_event(at(9, 0), IN, site_id=11, site_name="Depot"),
        make_event(at(12, 0), OUT, site_id=11, site_name="Depot"),
        make_event(at(7, 50), IN),
        make_event(at(17, 10), OUT, site_id=12, site_name="Yard"),
    ]
    s = run(events, worker, kl)

    assert s.check_in_time == events[2].scan_time
    assert s.check_out_time == events[3].scan_time
    assert (s.site_in_id, s.site_in_name) == (10, "HQ")
    assert (s.site_out_id, s.site_out_name) == (12, "Yard")


def test_checkout_before_check_in_clamps_to_zero(worker, kl):
    s = run([make_event(at(17, 0), IN), make_event(at(8, 0), OUT)], worker, kl)

    assert s.total_hours == 0.0
    assert AbnormalReason.SHORT_DAY in s.abnormal_reasons


def test_all_reasons_accumulate_in_order(worker, kl):
    s = run([], worker, kl)

    assert s.abnormal_reasons == (AbnormalReason.MISSING_CHECK_IN, AbnormalReason.MISSING_CHECK_OUT)


def test_explicit_rates_and_notes_are_carried(worker, kl):
    s = run(
        [make_event(at(8, 0), IN), make_event(at(17, 0), OUT)],
        worker,
        kl,
        rates=PayRates(normal_rate=12.5, ot_rate=20.0),
        notes=ReviewNotes(late_note="traffic", abnormal_note=None),
    )

    assert s.normal_rate == 12.5
    assert s.amount == 112.5
    assert s.late_note == "traffic"


def test_same_input_gives_same_session(worker, kl):
    events = [make_event(at(8, 3), IN), make_event(at(21, 40), OUT)]

    assert run(events, worker, kl) == run(list(reversed(events)), worker, kl)
