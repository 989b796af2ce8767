from datetime import date, datetime, time
from decimal import Decimal

import pytest

from core.attendance_policy import AttendancePolicy, get_attendance_policy
from core.metrics_logic import AttendanceMetrics, calculate_metrics, hours_from_minutes, metrics_changed
from core.punch_logic import PunchRecord

DAY = date(2024, 1, 1)


def at(hour, minute=0, second=0, day=1):
    return datetime(2024, 1, day, hour, minute, second)


def test_late_arrival_with_break_punches():
    record = PunchRecord(
        attendance_date=DAY,
        time_in=at(8, 10), time_out=at(17, 0),
        break_in=at(12, 0), break_out=at(13, 0),
    )
    metrics = calculate_metrics(record)
    assert metrics.late_minutes == 10
    # 530 total - 60 break = 470 net
    assert metrics.undertime_minutes == 10
    assert metrics.hours_worked == Decimal('7.83')


def test_on_time_full_day_with_break_punches():
    record = PunchRecord(
        attendance_date=DAY,
        time_in=at(8, 0), time_out=at(17, 0),
        break_in=at(12, 0), break_out=at(13, 0),
    )
    assert calculate_metrics(record) == AttendanceMetrics(0, 0, Decimal('8.00'))


def test_night_shift_uses_next_day_timeout():
    record = PunchRecord(
        attendance_date=DAY,
        time_in=at(22, 0),
        next_day_timeout=at(6, 0, day=2),
        is_nightshift=True,
    )
    metrics = calculate_metrics(record)
    assert metrics.undertime_minutes == 60
    assert metrics.hours_worked == Decimal('7.00')
    # lateness is always measured against 08:00 on attendance_date
    assert metrics.late_minutes == 14 * 60


def test_late_arrival_with_default_break():
    record = PunchRecord(attendance_date=DAY, time_in=at(9, 30), time_out=at(17, 0))
    metrics = calculate_metrics(record)
    assert metrics.late_minutes == 90
    assert metrics.undertime_minutes == 90
    assert metrics.hours_worked == Decimal('6.50')


def test_no_time_in_gives_zero_metrics():
    record = PunchRecord(
        attendance_date=DAY, time_out=at(17, 0),
        next_day_timeout=at(6, 0, day=2), is_nightshift=True,
        late_minutes=Decimal('15'), hours_worked=Decimal('8'),
    )
    assert calculate_metrics(record) == AttendanceMetrics(0, 0, Decimal('0'))


def test_no_time_out_keeps_late_but_zeroes_the_rest():
    record = PunchRecord(attendance_date=DAY, time_in=at(8, 45))
    assert calculate_metrics(record) == AttendanceMetrics(45, 0, Decimal('0'))


@pytest.mark.parametrize('time_in, expected', [
    (at(7, 0), 0),
    (at(7, 59, 59), 0),
    (at(8, 0), 0),
    (at(8, 0, 59), 0),
    (at(8, 1), 1),
    (at(8, 10, 45), 10),
    (at(12, 0), 240),
])
def test_lateness_floor(time_in, expected):
    record = PunchRecord(attendance_date=DAY, time_in=time_in, time_out=at(17, 0))
    assert calculate_metrics(record).late_minutes == expected


def test_night_shift_ignores_time_out_when_next_day_timeout_set():
    base = dict(attendance_date=DAY, time_in=at(22, 0), next_day_timeout=at(6, 0, day=2), is_nightshift=True)
    with_time_out = PunchRecord(time_out=at(23, 0), **base)
    without_time_out = PunchRecord(**base)
    assert calculate_metrics(with_time_out) == calculate_metrics(without_time_out)


def test_night_shift_time_out_without_day_increment_rolls_over():
    record = PunchRecord(attendance_date=DAY, time_in=at(22, 0), time_out=at(6, 0), is_nightshift=True)
    metrics = calculate_metrics(record)
    assert metrics.undertime_minutes == 60
    assert metrics.hours_worked == Decimal('7.00')


def test_default_break_is_charged_without_break_punches():
    record = PunchRecord(attendance_date=DAY, time_in=at(8, 0), time_out=at(12, 0))
    metrics = calculate_metrics(record)
    assert metrics.hours_worked == Decimal('3.00')
    assert metrics.undertime_minutes == 480 - 180


def test_default_break_floors_net_at_zero():
    record = PunchRecord(attendance_date=DAY, time_in=at(8, 0), time_out=at(8, 30))
    metrics = calculate_metrics(record)
    assert metrics.hours_worked == Decimal('0.00')
    assert metrics.undertime_minutes == 480


def test_time_out_before_time_in_on_day_shift_counts_as_nothing_worked():
    record = PunchRecord(attendance_date=DAY, time_in=at(17, 0), time_out=at(8, 0))
    metrics = calculate_metrics(record)
    assert metrics.hours_worked == Decimal('0.00')
    assert metrics.undertime_minutes == 480


def test_actual_short_break_is_used():
    record = PunchRecord(
        attendance_date=DAY, time_in=at(8, 0), time_out=at(16, 30),
        break_in=at(12, 0), break_out=at(12, 30),
    )
    metrics = calculate_metrics(record)
    assert metrics.hours_worked == Decimal('8.00')
    assert metrics.undertime_minutes == 0


def test_overtime_does_not_go_negative():
    record = PunchRecord(attendance_date=DAY, time_in=at(7, 0), time_out=at(20, 0))
    metrics = calculate_metrics(record)
    assert metrics.undertime_minutes == 0
    assert metrics.hours_worked == Decimal('12.00')


def test_calculation_is_idempotent():
    record = PunchRecord(attendance_date=DAY, time_in=at(8, 17), time_out=at(16, 52))
    assert calculate_metrics(record) == calculate_metrics(record)


def test_string_timestamps_are_parsed():
    record = PunchRecord(attendance_date='2024-01-01', time_in='2024-01-01 09:30:00', time_out='2024-01-01 17:00:00')
    assert calculate_metrics(record) == AttendanceMetrics(90, 90, Decimal('6.50'))


def test_malformed_timestamp_raises():
    record = PunchRecord(attendance_date=DAY, time_in='yesterday-ish', time_out=at(17, 0))
    with pytest.raises(ValueError):
        calculate_metrics(record)


def test_hours_rounding():
    assert hours_from_minutes(1) == Decimal('0.02')
    assert hours_from_minutes(50) == Decimal('0.83')
    assert hours_from_minutes(470) == Decimal('7.83')


def test_injected_policy():
    policy = AttendancePolicy(expected_time_in=time(9, 0), standard_work_minutes=420, default_break_minutes=30)
    record = PunchRecord(attendance_date=DAY, time_in=at(9, 30), time_out=at(17, 0))
    assert calculate_metrics(record, policy=policy) == AttendanceMetrics(30, 0, Decimal('7.00'))


def test_policy_from_settings(settings):
    settings.ATTENDANCE_EXPECTED_TIME_IN = '09:15'
    settings.ATTENDANCE_STANDARD_WORK_MINUTES = 420
    policy = get_attendance_policy()
    assert policy.expected_time_in == time(9, 15)
    assert policy.standard_work_minutes == 420
    assert policy.default_break_minutes == 60


def test_policy_bad_time_setting_falls_back(settings):
    settings.ATTENDANCE_EXPECTED_TIME_IN = 'eight'
    assert get_attendance_policy().expected_time_in == time(8, 0)


def test_metrics_changed_tolerance():
    old = AttendanceMetrics(10, 0, Decimal('7.83'))
    assert not metrics_changed(old, AttendanceMetrics(10, 0, Decimal('7.835')))
    assert metrics_changed(old, AttendanceMetrics(10, 0, Decimal('7.85')))
    assert metrics_changed(old, AttendanceMetrics(10, 0, Decimal('7.84')))
    assert metrics_changed(old, AttendanceMetrics(11, 0, Decimal('7.83')))


def test_metrics_changed_treats_none_as_zero():
    old = PunchRecord(attendance_date=DAY, late_minutes=None, undertime_minutes=None, hours_worked=None)
    assert not metrics_changed(old, AttendanceMetrics())
