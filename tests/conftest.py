import pytest

from core.models import Employee, ProcessedAttendance


@pytest.fixture
def employee(db):
    return Employee.objects.create(idno='1001', first_name='Ana', last_name='Reyes', department='Production')


@pytest.fixture
def other_employee(db):
    return Employee.objects.create(idno='1002', first_name='Ben', last_name='Santos', department='Warehouse')


@pytest.fixture
def make_attendance(employee):
    def _make(**kwargs):
        kwargs.setdefault('employee', employee)
        kwargs.setdefault('source', ProcessedAttendance.SOURCE_IMPORT)
        return ProcessedAttendance.objects.create(**kwargs)
    return _make
