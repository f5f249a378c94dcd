from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal

from django.db import IntegrityError
from django.test import TestCase
from rest_framework.exceptions import ValidationError

from attendance.models import AttendanceRecord
from attendance.services import list_attendance_for_period, perform_check_in, perform_check_out
from employees.models import Employee


def _at(day, hour, minute=0):
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=dt_timezone.utc)


class AttendanceFeatureTests(TestCase):
    def setUp(self):
        self.employee = Employee.objects.create(
            employee_id="EMP-001",
            first_name="Jane",
            last_name="Doe",
            email="jane@example.com",
            hire_date=date(2023, 1, 1),
        )
        self.day = date(2024, 4, 2)

    def test_hours_worked_derived_on_save(self):
        record = AttendanceRecord.objects.create(
            employee=self.employee,
            date=self.day,
            check_in_at=_at(self.day, 9),
            check_out_at=_at(self.day, 17, 45),
        )
        self.assertEqual(record.hours_worked, Decimal("8.75"))
        self.assertTrue(record.is_present)

    def test_row_without_check_in_is_an_absence(self):
        record = AttendanceRecord.objects.create(employee=self.employee, date=self.day)
        self.assertEqual(record.hours_worked, Decimal("0.00"))
        self.assertEqual(record.status, AttendanceRecord.STATUS_ABSENT)
        self.assertFalse(record.is_present)

    def test_one_record_per_employee_per_day(self):
        AttendanceRecord.objects.create(employee=self.employee, date=self.day)
        with self.assertRaises(IntegrityError):
            AttendanceRecord.objects.create(employee=self.employee, date=self.day)

    def test_check_in_and_out(self):
        record = perform_check_in(self.employee, when=_at(self.day, 8))
        self.assertEqual(record.date, self.day)

        with self.assertRaises(ValidationError):
            perform_check_in(self.employee, when=_at(self.day, 9))

        record = perform_check_out(self.employee, when=_at(self.day, 18))
        self.assertEqual(record.hours_worked, Decimal("10.00"))

        with self.assertRaises(ValidationError):
            perform_check_out(self.employee, when=_at(self.day, 19))

    def test_check_out_must_follow_check_in(self):
        perform_check_in(self.employee, when=_at(self.day, 8))
        with self.assertRaises(ValidationError):
            perform_check_out(self.employee, when=_at(self.day, 7))

    def test_list_for_period_is_inclusive_and_ordered(self):
        for day in (date(2024, 4, 30), date(2024, 4, 1), date(2024, 5, 1), date(2024, 3, 31)):
            AttendanceRecord.objects.create(employee=self.employee, date=day, check_in_at=_at(day, 9))
        records = list_attendance_for_period(self.employee, date(2024, 4, 1), date(2024, 4, 30))
        self.assertEqual([record.date for record in records], [date(2024, 4, 1), date(2024, 4, 30)])
