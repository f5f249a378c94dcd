from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.exceptions import ValidationError

from employees.models import Employee
from timeoff.models import LeaveRequest
from timeoff.services import (
    approve_leave_request,
    approved_leave_days_in_period,
    calculate_number_of_days,
    cancel_leave_request,
    create_leave_request,
    leave_balance,
    list_approved_leave_for_period,
    reject_leave_request,
)


class LeaveRequestFeatureTests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.manager = User.objects.create_user(username="manager", password="pass")
        self.employee = Employee.objects.create(
            employee_id="EMP-001",
            first_name="Jane",
            last_name="Doe",
            email="jane@example.com",
            hire_date=date(2023, 1, 1),
            basic_salary=Decimal("22000.00"),
            casual_leave_entitlement=2,
        )

    def _approved(self, start, end, days, leave_type=LeaveRequest.TYPE_ANNUAL):
        return LeaveRequest.objects.create(
            employee=self.employee,
            leave_type=leave_type,
            start_date=start,
            end_date=end,
            number_of_days=Decimal(days),
            status=LeaveRequest.STATUS_APPROVED,
        )

    def test_number_of_days_is_inclusive_span(self):
        self.assertEqual(calculate_number_of_days(date(2024, 4, 1), date(2024, 4, 5)), Decimal("5"))
        self.assertEqual(calculate_number_of_days(date(2024, 4, 1), date(2024, 4, 1), is_half_day=True), Decimal("0.5"))
        with self.assertRaises(ValidationError):
            calculate_number_of_days(date(2024, 4, 5), date(2024, 4, 1))
        with self.assertRaises(ValidationError):
            calculate_number_of_days(date(2024, 4, 1), date(2024, 4, 2), is_half_day=True)

    def test_create_request_starts_pending(self):
        leave = create_leave_request(self.employee, LeaveRequest.TYPE_ANNUAL, date(2024, 4, 1), date(2024, 4, 3), "Trip")
        self.assertEqual(leave.status, LeaveRequest.STATUS_PENDING)
        self.assertEqual(leave.number_of_days, Decimal("3"))

    def test_overlapping_requests_are_rejected(self):
        create_leave_request(self.employee, LeaveRequest.TYPE_ANNUAL, date(2024, 4, 1), date(2024, 4, 3))
        with self.assertRaises(ValidationError):
            create_leave_request(self.employee, LeaveRequest.TYPE_SICK, date(2024, 4, 3), date(2024, 4, 4))

    def test_cancelled_requests_do_not_block_new_ones(self):
        leave = create_leave_request(self.employee, LeaveRequest.TYPE_ANNUAL, date(2024, 4, 1), date(2024, 4, 3))
        cancel_leave_request(leave.id)
        replacement = create_leave_request(self.employee, LeaveRequest.TYPE_ANNUAL, date(2024, 4, 2), date(2024, 4, 2))
        self.assertTrue(replacement.is_pending)

    def test_request_exceeding_entitlement_is_rejected(self):
        with self.assertRaises(ValidationError):
            create_leave_request(self.employee, LeaveRequest.TYPE_CASUAL, date(2024, 4, 1), date(2024, 4, 3))

    def test_year_end_request_is_charged_to_each_year(self):
        leave = create_leave_request(self.employee, LeaveRequest.TYPE_CASUAL, date(2024, 12, 31), date(2025, 1, 2))
        self.assertEqual(leave.number_of_days, Decimal("3"))

    def test_year_end_request_respects_the_following_years_balance(self):
        self._approved(date(2025, 1, 20), date(2025, 1, 20), 1, leave_type=LeaveRequest.TYPE_CASUAL)
        with self.assertRaises(ValidationError):
            create_leave_request(self.employee, LeaveRequest.TYPE_CASUAL, date(2024, 12, 31), date(2025, 1, 2))

    def test_unentitled_types_skip_the_balance_check(self):
        leave = create_leave_request(self.employee, LeaveRequest.TYPE_UNPAID, date(2024, 4, 1), date(2024, 4, 30))
        self.assertEqual(leave.number_of_days, Decimal("30"))

    def test_unknown_leave_type_is_rejected(self):
        with self.assertRaises(ValidationError):
            create_leave_request(self.employee, "sabbatical", date(2024, 4, 1), date(2024, 4, 2))

    def test_approval_and_rejection_are_guarded(self):
        leave = create_leave_request(self.employee, LeaveRequest.TYPE_ANNUAL, date(2024, 4, 1), date(2024, 4, 3))
        approved = approve_leave_request(leave.id, user=self.manager, comments="Enjoy")
        self.assertEqual(approved.status, LeaveRequest.STATUS_APPROVED)
        self.assertEqual(approved.decided_by, self.manager)
        self.assertIsNotNone(approved.decided_at)

        with self.assertRaises(ValidationError):
            reject_leave_request(leave.id, user=self.manager)
        self.assertEqual(LeaveRequest.objects.get(id=leave.id).status, LeaveRequest.STATUS_APPROVED)

    def test_only_approved_overlapping_leave_is_listed(self):
        inside = self._approved(date(2024, 4, 8), date(2024, 4, 9), 2)
        spanning = self._approved(date(2024, 3, 28), date(2024, 4, 2), 6)
        self._approved(date(2024, 5, 6), date(2024, 5, 7), 2)
        LeaveRequest.objects.create(
            employee=self.employee,
            leave_type=LeaveRequest.TYPE_SICK,
            start_date=date(2024, 4, 15),
            end_date=date(2024, 4, 15),
            number_of_days=Decimal("1"),
        )

        leaves = list_approved_leave_for_period(self.employee, date(2024, 4, 1), date(2024, 4, 30))
        self.assertEqual(leaves, [spanning, inside])

    def test_days_in_period_are_clipped(self):
        self._approved(date(2024, 3, 28), date(2024, 4, 2), 6)
        self._approved(date(2024, 4, 8), date(2024, 4, 9), 2, leave_type=LeaveRequest.TYPE_SICK)

        self.assertEqual(approved_leave_days_in_period(self.employee, date(2024, 4, 1), date(2024, 4, 30)), Decimal("4"))
        self.assertEqual(approved_leave_days_in_period(self.employee, date(2024, 3, 1), date(2024, 3, 31)), Decimal("4"))
        self.assertEqual(
            approved_leave_days_in_period(
                self.employee, date(2024, 4, 1), date(2024, 4, 30), leave_type=LeaveRequest.TYPE_SICK
            ),
            Decimal("2"),
        )

    def test_balance_uses_calendar_year_usage(self):
        self._approved(date(2023, 12, 29), date(2024, 1, 2), 5)
        self._approved(date(2024, 6, 3), date(2024, 6, 7), 5)

        balance = leave_balance(self.employee, 2024)
        self.assertEqual(balance["annual"], {"allocated": Decimal("20"), "used": Decimal("7"), "remaining": Decimal("13")})
        self.assertEqual(balance["casual"]["remaining"], Decimal("2"))
        self.assertEqual(set(balance), {"annual", "sick", "casual", "maternity", "paternity"})
