from datetime import date
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from core.models import AuditLog, ProcessedAttendance

from .helpers import local

DAY = date(2024, 1, 1)


@pytest.fixture
def client():
    return APIClient()


@pytest.mark.django_db
def test_list_attendance_filtered_by_date(client, make_attendance):
    make_attendance(attendance_date=DAY, time_in=local(2024, 1, 1, 8, 0), time_out=local(2024, 1, 1, 17, 0))
    make_attendance(attendance_date=date(2024, 1, 2), time_in=local(2024, 1, 2, 8, 0), time_out=local(2024, 1, 2, 17, 0))

    resp = client.get('/api/attendance/', {'date': '2024-01-01'})

    assert resp.status_code == 200
    assert resp.data['count'] == 1
    row = resp.data['results'][0]
    assert row['attendance_date'] == '2024-01-01'
    assert row['employee_idno'] == '1001'
    assert row['employee_name'] == 'Reyes, Ana'


@pytest.mark.django_db
def test_list_attendance_filtered_by_night_shift(client, make_attendance):
    make_attendance(attendance_date=DAY, time_in=local(2024, 1, 1, 8, 0))
    make_attendance(attendance_date=DAY, time_in=local(2024, 1, 1, 22, 0), is_nightshift=True)
    resp = client.get('/api/attendance/', {'is_nightshift': 'true'})
    assert resp.data['count'] == 1


@pytest.mark.django_db
def test_recalculate_endpoint_dry_run(client, make_attendance):
    att = make_attendance(attendance_date=DAY, time_in=local(2024, 1, 1, 9, 30), time_out=local(2024, 1, 1, 17, 0))

    resp = client.post('/api/attendance/recalculate/', {'date': '2024-01-01', 'dry_run': True}, format='json')

    assert resp.status_code == 200
    assert resp.data['dry_run'] is True
    assert resp.data['changed'] == 1
    assert resp.data['previews'][0]['id'] == att.pk
    att.refresh_from_db()
    assert att.late_minutes == 0
    assert not AuditLog.objects.exists()


@pytest.mark.django_db
def test_recalculate_endpoint_live_skips_posted_rows(client, make_attendance):
    open_row = make_attendance(attendance_date=DAY, time_in=local(2024, 1, 1, 9, 30), time_out=local(2024, 1, 1, 17, 0))
    posted = make_attendance(
        attendance_date=DAY, time_in=local(2024, 1, 1, 9, 30), time_out=local(2024, 1, 1, 17, 0),
        posting_status=ProcessedAttendance.POSTING_POSTED,
    )

    resp = client.post('/api/attendance/recalculate/', {}, format='json')

    assert resp.status_code == 200
    assert resp.data['total_records'] == 1
    open_row.refresh_from_db()
    posted.refresh_from_db()
    assert open_row.hours_worked == Decimal('6.50')
    assert posted.hours_worked == 0
    log = AuditLog.objects.get()
    assert log.actor == 'api'
    assert log.ip_address == '127.0.0.1'


@pytest.mark.django_db
def test_fix_mode(client, make_attendance):
    att = make_attendance(
        attendance_date=DAY, time_in=local(2024, 1, 1, 22, 0),
        time_out=local(2024, 1, 1, 6, 0), is_nightshift=True,
    )
    resp = client.post('/api/attendance/recalculate/', {'mode': 'fix'}, format='json')
    assert resp.status_code == 200
    assert resp.data['mode'] == 'fix'
    att.refresh_from_db()
    assert att.source == ProcessedAttendance.SOURCE_FIXED_IMPORT


@pytest.mark.django_db
@pytest.mark.parametrize('body', [
    {'start_date': '2024-01-31', 'end_date': '2024-01-01'},
    {'end_date': '2024-01-01'},
    {'batch_size': 0},
    {'mode': 'delete'},
])
def test_recalculate_endpoint_rejects_bad_input(client, make_attendance, body):
    make_attendance(attendance_date=DAY, time_in=local(2024, 1, 1, 9, 30), time_out=local(2024, 1, 1, 17, 0))
    resp = client.post('/api/attendance/recalculate/', body, format='json')
    assert resp.status_code == 400
    assert ProcessedAttendance.objects.get().late_minutes == 0


@pytest.mark.django_db
def test_audit_log_lists_live_runs(client, make_attendance):
    make_attendance(attendance_date=DAY, time_in=local(2024, 1, 1, 9, 30), time_out=local(2024, 1, 1, 17, 0))
    client.post('/api/attendance/recalculate/', {}, format='json')
    resp = client.get('/api/audit-log/')
    assert resp.status_code == 200
    assert resp.data[0]['action'] == 'recalculate'
    assert resp.data[0]['details']['changed'] == 1
