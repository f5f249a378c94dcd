from datetime import date, datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
import uuid

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from django.test import SimpleTestCase, TestCase
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.test import APIClient

from attendance.models import AttendanceRecord
from employees.models import Department, Employee
from timeoff.models import LeaveRequest

from payroll.calculator import (
    AttendanceEntry,
    LeaveEntry,
    SalaryProfile,
    annual_income_tax,
    calculate_payroll,
    count_working_days,
    leave_days_within,
    monthly_income_tax,
)
from payroll.exceptions import (
    CalculationError,
    DuplicateRecordError,
    InvalidConfigurationError,
    InvalidTransitionError,
    NotFoundError,
)
from payroll.models import PayrollRecord
from payroll.services import (
    approve_payroll,
    filter_payroll_records,
    generate_bulk_payroll,
    generate_payroll,
    payroll_summary,
    reject_payroll,
)

# April 2024 has 22 weekdays.
YEAR = 2024
MONTH = 4


def _shift(day: date, start_hour: int, hours: int):
    check_in = datetime(day.year, day.month, day.day, start_hour, tzinfo=dt_timezone.utc)
    return check_in, check_in + timedelta(hours=hours)


def _weekdays(year: int, month: int):
    day = date(year, month, 1)
    while day.month == month:
        if day.weekday() < 5:
            yield day
        day += timedelta(days=1)


def _attendance(days, hours=8, overrides=None):
    overrides = overrides or {}
    entries = []
    for day in days:
        check_in, check_out = _shift(day, 9, overrides.get(day, hours))
        entries.append(
            AttendanceEntry(
                date=day,
                check_in_at=check_in,
                check_out_at=check_out,
                hours_worked=Decimal(overrides.get(day, hours)),
            )
        )
    return entries


class PayrollCalculatorTests(SimpleTestCase):
    def setUp(self):
        self.profile = SalaryProfile(basic_salary=Decimal("22000.00"), annual_leave_entitlement=20)
        self.days = list(_weekdays(YEAR, MONTH))[:20]

    def test_end_to_end_example(self):
        result = calculate_payroll(self.profile, YEAR, MONTH, attendance=_attendance(self.days))

        self.assertEqual(result.working_days, 22)
        self.assertEqual(result.attendance_days, 20)
        self.assertEqual(result.daily_rate, Decimal("1000"))
        self.assertEqual(result.overtime_amount, Decimal("0.00"))
        self.assertEqual(result.gross_pay, Decimal("22000.00"))
        self.assertEqual(result.deductions["pf"], Decimal("1800.00"))
        self.assertEqual(result.deductions["esi"], Decimal("0.00"))
        self.assertEqual(result.deductions["tax"], Decimal("58.33"))
        self.assertEqual(result.tax_amount, Decimal("58.33"))
        self.assertEqual(result.deductions["unpaid_leave"], Decimal("0.00"))
        self.assertEqual(result.total_deductions, Decimal("1858.33"))
        self.assertEqual(result.net_pay, Decimal("20141.67"))

    def test_calculation_is_deterministic(self):
        attendance = _attendance(self.days, overrides={self.days[0]: 11})
        leaves = [LeaveEntry(start_date=date(2024, 4, 29), end_date=date(2024, 4, 30), number_of_days=Decimal("2"))]
        first = calculate_payroll(self.profile, YEAR, MONTH, attendance, leaves)
        second = calculate_payroll(self.profile, YEAR, MONTH, attendance, leaves)
        self.assertEqual(first, second)

    def test_gross_is_never_below_basic_salary(self):
        profile = SalaryProfile(
            basic_salary=Decimal("15000.00"),
            allowances={"house": Decimal("1200"), "transport": Decimal("300"), "food": Decimal("0")},
        )
        result = calculate_payroll(profile, YEAR, MONTH, attendance=_attendance(self.days))
        self.assertGreaterEqual(result.gross_pay, profile.basic_salary)
        self.assertEqual(result.total_allowances, Decimal("1500.00"))
        self.assertEqual(result.gross_pay, Decimal("16500.00"))

    def test_overtime_increases_gross_monotonically(self):
        base = calculate_payroll(self.profile, YEAR, MONTH, _attendance(self.days, overrides={self.days[0]: 10}))
        more = calculate_payroll(self.profile, YEAR, MONTH, _attendance(self.days, overrides={self.days[0]: 11}))

        # 2 overtime hours at 1000 / 8 * 1.5
        self.assertEqual(base.overtime_hours, Decimal("2.00"))
        self.assertEqual(base.overtime_amount, Decimal("375.00"))
        self.assertGreater(more.overtime_amount, base.overtime_amount)
        self.assertGreater(more.gross_pay, base.gross_pay)

    def test_hours_up_to_standard_day_produce_no_overtime(self):
        result = calculate_payroll(self.profile, YEAR, MONTH, _attendance(self.days, hours=6))
        self.assertEqual(result.overtime_hours, Decimal("0.00"))

    def test_absence_rows_are_not_counted_as_attendance(self):
        attendance = _attendance(self.days[:3]) + [AttendanceEntry(date=self.days[3])]
        result = calculate_payroll(self.profile, YEAR, MONTH, attendance)
        self.assertEqual(result.attendance_days, 3)

    def test_attendance_outside_the_period_is_ignored(self):
        attendance = _attendance(self.days[:2]) + _attendance([date(2024, 3, 29)], hours=12)
        result = calculate_payroll(self.profile, YEAR, MONTH, attendance)
        self.assertEqual(result.attendance_days, 2)
        self.assertEqual(result.overtime_hours, Decimal("0.00"))

    def test_tax_bracket_boundary(self):
        self.assertEqual(annual_income_tax(Decimal("250000")), Decimal("0"))
        self.assertGreater(annual_income_tax(Decimal("250001")), Decimal("0"))

    def test_payslip_tax_just_above_exempt_threshold_is_positive(self):
        at_threshold = calculate_payroll(SalaryProfile(basic_salary=Decimal("250000") / 12), YEAR, MONTH)
        above = calculate_payroll(SalaryProfile(basic_salary=Decimal("250001") / 12), YEAR, MONTH)

        self.assertEqual(at_threshold.tax_amount, Decimal("0.00"))
        self.assertEqual(above.gross_pay, Decimal("20833.42"))
        self.assertGreater(above.tax_amount, Decimal("0"))
        self.assertEqual(above.deductions["tax"], Decimal("0.01"))
        self.assertEqual(above.net_pay, above.gross_pay - above.total_deductions)

    def test_gross_is_exact_sum_of_rounded_components(self):
        profile = SalaryProfile(basic_salary=Decimal("20000.00"), allowances={"house": Decimal("100.005")})
        result = calculate_payroll(profile, YEAR, MONTH, _attendance(self.days, overrides={self.days[0]: 9}))

        # 1 overtime hour at 20000 / 22 / 8 * 1.5
        self.assertEqual(result.overtime_amount, Decimal("170.45"))
        self.assertEqual(result.allowances["house"], Decimal("100.01"))
        self.assertEqual(result.gross_pay, result.basic_salary + result.total_allowances + result.overtime_amount)
        self.assertEqual(result.gross_pay, Decimal("20270.46"))

    def test_tax_bracket_table(self):
        self.assertEqual(annual_income_tax(Decimal("500000")), Decimal("12500"))
        self.assertEqual(annual_income_tax(Decimal("1000000")), Decimal("112500"))
        self.assertEqual(annual_income_tax(Decimal("1200000")), Decimal("172500"))
        self.assertEqual(monthly_income_tax(Decimal("20000")), Decimal("0"))

    def test_provident_fund_is_capped(self):
        capped = calculate_payroll(SalaryProfile(basic_salary=Decimal("20000")), YEAR, MONTH)
        uncapped = calculate_payroll(SalaryProfile(basic_salary=Decimal("10000")), YEAR, MONTH)
        self.assertEqual(capped.deductions["pf"], Decimal("1800.00"))
        self.assertEqual(uncapped.deductions["pf"], Decimal("1200.00"))

    def test_esi_applies_up_to_threshold(self):
        at_threshold = calculate_payroll(SalaryProfile(basic_salary=Decimal("21000")), YEAR, MONTH)
        above = calculate_payroll(SalaryProfile(basic_salary=Decimal("21000.01")), YEAR, MONTH)
        self.assertEqual(at_threshold.deductions["esi"], Decimal("157.50"))
        self.assertEqual(above.deductions["esi"], Decimal("0.00"))

    def test_configured_deductions_are_carried(self):
        profile = SalaryProfile(
            basic_salary=Decimal("10000"),
            deductions={"professional": Decimal("200"), "other": Decimal("50.50")},
        )
        result = calculate_payroll(profile, YEAR, MONTH)
        self.assertEqual(result.deductions["professional"], Decimal("200.00"))
        self.assertEqual(result.deductions["other"], Decimal("50.50"))

    def test_leave_beyond_annual_entitlement_is_unpaid(self):
        leaves = [LeaveEntry(start_date=date(2024, 4, 1), end_date=date(2024, 4, 25), number_of_days=Decimal("25"))]
        result = calculate_payroll(self.profile, YEAR, MONTH, leaves=leaves)
        self.assertEqual(result.leave_days, Decimal("25.0"))
        self.assertEqual(result.deductions["unpaid_leave"], Decimal("5000.00"))
        self.assertEqual(result.net_pay, Decimal("15141.67"))

    def test_all_leave_types_count_against_annual_entitlement(self):
        leaves = [
            LeaveEntry(date(2024, 4, 1), date(2024, 4, 15), Decimal("15"), leave_type="annual"),
            LeaveEntry(date(2024, 4, 16), date(2024, 4, 23), Decimal("8"), leave_type="sick"),
        ]
        result = calculate_payroll(self.profile, YEAR, MONTH, leaves=leaves)
        self.assertEqual(result.deductions["unpaid_leave"], Decimal("3000.00"))

    def test_leave_spanning_months_is_clipped_to_period(self):
        leave = LeaveEntry(start_date=date(2024, 3, 28), end_date=date(2024, 4, 3), number_of_days=Decimal("7"))
        self.assertEqual(leave_days_within(leave, date(2024, 4, 1), date(2024, 4, 30)), Decimal("3"))
        self.assertEqual(leave_days_within(leave, date(2024, 3, 1), date(2024, 3, 31)), Decimal("4"))
        self.assertEqual(leave_days_within(leave, date(2024, 5, 1), date(2024, 5, 31)), Decimal("0"))

    def test_half_day_leave_counts_its_own_days(self):
        leave = LeaveEntry(start_date=date(2024, 4, 2), end_date=date(2024, 4, 2), number_of_days=Decimal("0.5"))
        result = calculate_payroll(self.profile, YEAR, MONTH, leaves=[leave])
        self.assertEqual(result.leave_days, Decimal("0.5"))

    def test_net_pay_is_not_clamped(self):
        profile = SalaryProfile(basic_salary=Decimal("1000"), deductions={"other": Decimal("5000")})
        result = calculate_payroll(profile, YEAR, MONTH)
        self.assertLess(result.net_pay, Decimal("0"))
        self.assertEqual(result.net_pay, result.gross_pay - result.total_deductions)

    def test_missing_basic_salary_is_invalid_configuration(self):
        with self.assertRaises(InvalidConfigurationError):
            calculate_payroll(SalaryProfile(basic_salary=None), YEAR, MONTH)

    def test_negative_configuration_is_rejected(self):
        with self.assertRaises(InvalidConfigurationError):
            calculate_payroll(SalaryProfile(basic_salary=Decimal("-1")), YEAR, MONTH)
        with self.assertRaises(InvalidConfigurationError):
            calculate_payroll(
                SalaryProfile(basic_salary=Decimal("100"), allowances={"house": Decimal("-5")}),
                YEAR,
                MONTH,
            )

    def test_negative_hours_worked_is_a_calculation_error(self):
        entry = AttendanceEntry(
            date=date(2024, 4, 2),
            check_in_at=datetime(2024, 4, 2, 9, tzinfo=dt_timezone.utc),
            hours_worked=Decimal("-1"),
        )
        with self.assertRaises(CalculationError):
            calculate_payroll(self.profile, YEAR, MONTH, attendance=[entry])

    def test_working_days_exclude_weekends(self):
        self.assertEqual(count_working_days(date(2024, 4, 6), date(2024, 4, 7)), 0)
        self.assertEqual(count_working_days(date(2024, 2, 1), date(2024, 2, 29)), 21)


class PayrollFixtureMixin:
    def make_employee(self, number="EMP-001", basic_salary=Decimal("22000.00"), department=None, **extra):
        return Employee.objects.create(
            employee_id=number,
            first_name=extra.pop("first_name", "Jane"),
            last_name=extra.pop("last_name", "Doe"),
            email=f"{number.lower()}@example.com",
            hire_date=date(2023, 1, 1),
            basic_salary=basic_salary,
            department=department,
            **extra,
        )

    def record_attendance(self, employee, days, hours=8):
        for day in days:
            check_in, check_out = _shift(day, 9, hours)
            AttendanceRecord.objects.create(employee=employee, date=day, check_in_at=check_in, check_out_at=check_out)


class PayrollGenerationTests(PayrollFixtureMixin, TestCase):
    def setUp(self):
        User = get_user_model()
        self.user = User.objects.create_user(username="hr", password="pass")
        self.employee = self.make_employee()
        self.record_attendance(self.employee, list(_weekdays(YEAR, MONTH))[:20])

    def test_generate_persists_pending_record(self):
        record = generate_payroll(self.employee.id, MONTH, YEAR, generated_by=self.user)

        record.refresh_from_db()
        self.assertEqual(record.status, PayrollRecord.STATUS_PENDING)
        self.assertEqual(record.pay_period_start, date(2024, 4, 1))
        self.assertEqual(record.pay_period_end, date(2024, 4, 30))
        self.assertEqual(record.attendance_days, 20)
        self.assertEqual(record.working_days, 22)
        self.assertEqual(record.gross_pay, Decimal("22000.00"))
        self.assertEqual(record.pf_deduction, Decimal("1800.00"))
        self.assertEqual(record.tax_deduction, Decimal("58.33"))
        self.assertEqual(record.net_pay, Decimal("20141.67"))
        self.assertEqual(record.generated_by, self.user)
        self.assertIsNone(record.approved_by)

    def test_generate_uses_attendance_overtime(self):
        AttendanceRecord.objects.filter(employee=self.employee, date=date(2024, 4, 1)).delete()
        self.record_attendance(self.employee, [date(2024, 4, 1)], hours=10)

        record = generate_payroll(self.employee.id, MONTH, YEAR)
        self.assertEqual(record.overtime_hours, Decimal("2.00"))
        self.assertEqual(record.overtime_amount, Decimal("375.00"))
        self.assertEqual(record.gross_pay, Decimal("22375.00"))

    def test_only_approved_leave_affects_payroll(self):
        LeaveRequest.objects.create(
            employee=self.employee,
            leave_type=LeaveRequest.TYPE_ANNUAL,
            start_date=date(2024, 4, 1),
            end_date=date(2024, 4, 25),
            number_of_days=Decimal("25"),
            status=LeaveRequest.STATUS_APPROVED,
        )
        LeaveRequest.objects.create(
            employee=self.employee,
            leave_type=LeaveRequest.TYPE_SICK,
            start_date=date(2024, 4, 26),
            end_date=date(2024, 4, 30),
            number_of_days=Decimal("5"),
            status=LeaveRequest.STATUS_PENDING,
        )

        record = generate_payroll(self.employee.id, MONTH, YEAR)
        self.assertEqual(record.leave_days, Decimal("25.0"))
        self.assertEqual(record.unpaid_leave_deduction, Decimal("5000.00"))
        self.assertEqual(record.net_pay, Decimal("15141.67"))

    def test_second_generation_is_a_duplicate(self):
        first = generate_payroll(self.employee.id, MONTH, YEAR)
        AttendanceRecord.objects.filter(employee=self.employee).delete()

        with self.assertRaises(DuplicateRecordError):
            generate_payroll(self.employee.id, MONTH, YEAR)

        self.assertEqual(PayrollRecord.objects.filter(employee=self.employee).count(), 1)
        stored = PayrollRecord.objects.get(id=first.id)
        self.assertEqual(stored.attendance_days, 20)
        self.assertEqual(stored.net_pay, first.net_pay)

    def test_unknown_employee_is_not_found(self):
        with self.assertRaises(NotFoundError):
            generate_payroll(uuid.uuid4(), MONTH, YEAR)

    def test_invalid_month_is_rejected(self):
        with self.assertRaises(ValidationError):
            generate_payroll(self.employee.id, 13, YEAR)

    def test_missing_salary_is_invalid_configuration(self):
        unconfigured = self.make_employee("EMP-002", basic_salary=None)
        with self.assertRaises(InvalidConfigurationError):
            generate_payroll(unconfigured.id, MONTH, YEAR)
        self.assertFalse(PayrollRecord.objects.filter(employee=unconfigured).exists())

    def test_record_store_lookup_by_period(self):
        record = generate_payroll(self.employee.id, MONTH, YEAR)
        self.assertEqual(PayrollRecord.objects.for_period(self.employee, MONTH, YEAR), record)
        self.assertIsNone(PayrollRecord.objects.for_period(self.employee, MONTH + 1, YEAR))


class BulkGenerationTests(PayrollFixtureMixin, TestCase):
    def setUp(self):
        self.engineering = Department.objects.create(name="Engineering", code="ENG")
        self.sales = Department.objects.create(name="Sales", code="SAL")
        self.alice = self.make_employee("EMP-001", department=self.engineering, first_name="Alice", last_name="Adams")
        self.bob = self.make_employee("EMP-002", department=self.engineering, first_name="Bob", last_name="Brown")
        self.carol = self.make_employee(
            "EMP-003", basic_salary=None, department=self.sales, first_name="Carol", last_name="Clark"
        )
        self.make_employee("EMP-004", employment_status="TERMINATED", first_name="Dan", last_name="Dole")

    def test_failures_are_collected_and_successes_kept(self):
        generate_payroll(self.bob.id, MONTH, YEAR)

        result = generate_bulk_payroll(MONTH, YEAR)

        self.assertEqual([outcome.employee for outcome in result.successful], [self.alice])
        failed = {outcome.employee: outcome.error for outcome in result.failed}
        self.assertEqual(set(failed), {self.bob, self.carol})
        self.assertIsInstance(failed[self.bob], DuplicateRecordError)
        self.assertIsInstance(failed[self.carol], InvalidConfigurationError)
        self.assertEqual(PayrollRecord.objects.filter(month=MONTH, year=YEAR).count(), 2)

    def test_inactive_employees_are_skipped(self):
        result = generate_bulk_payroll(MONTH, YEAR)
        processed = [outcome.employee.employee_id for outcome in result.successful + result.failed]
        self.assertNotIn("EMP-004", processed)

    def test_department_filter(self):
        result = generate_bulk_payroll(MONTH, YEAR, department_id=self.engineering.id)
        self.assertEqual({outcome.employee for outcome in result.successful}, {self.alice, self.bob})
        self.assertEqual(result.failed, [])


class PayrollTransitionTests(PayrollFixtureMixin, TestCase):
    def setUp(self):
        User = get_user_model()
        self.approver = User.objects.create_user(username="approver", password="pass")
        self.other = User.objects.create_user(username="other", password="pass")
        self.record = generate_payroll(self.make_employee().id, MONTH, YEAR)

    def test_approve_stamps_approver(self):
        record = approve_payroll(self.record.id, approver=self.approver, comments="Looks right")
        record.refresh_from_db()
        self.assertEqual(record.status, PayrollRecord.STATUS_APPROVED)
        self.assertEqual(record.approved_by, self.approver)
        self.assertIsNotNone(record.approved_at)
        self.assertEqual(record.approver_comments, "Looks right")

    def test_reject_stamps_approver(self):
        record = reject_payroll(self.record.id, approver=self.approver)
        self.assertEqual(record.status, PayrollRecord.STATUS_REJECTED)
        self.assertEqual(record.approved_by, self.approver)

    def test_decided_records_cannot_transition_again(self):
        approved = approve_payroll(self.record.id, approver=self.approver)
        stamped_at = PayrollRecord.objects.get(id=approved.id).approved_at

        with self.assertRaises(InvalidTransitionError):
            approve_payroll(self.record.id, approver=self.other)
        with self.assertRaises(InvalidTransitionError):
            reject_payroll(self.record.id, approver=self.other)

        stored = PayrollRecord.objects.get(id=self.record.id)
        self.assertEqual(stored.status, PayrollRecord.STATUS_APPROVED)
        self.assertEqual(stored.approved_by, self.approver)
        self.assertEqual(stored.approved_at, stamped_at)

    def test_rejected_record_cannot_be_approved(self):
        reject_payroll(self.record.id, approver=self.approver)
        with self.assertRaises(InvalidTransitionError):
            approve_payroll(self.record.id, approver=self.other)

    def test_unknown_record_is_not_found(self):
        with self.assertRaises(NotFoundError):
            approve_payroll(uuid.uuid4())


class PayrollQueryTests(PayrollFixtureMixin, TestCase):
    def setUp(self):
        self.engineering = Department.objects.create(name="Engineering", code="ENG")
        self.alice = self.make_employee("EMP-001", department=self.engineering, first_name="Alice", last_name="Adams")
        self.bob = self.make_employee("EMP-002", basic_salary=Decimal("10000.00"), first_name="Bob", last_name="Brown")
        self.april_alice = generate_payroll(self.alice.id, 4, 2024)
        self.april_bob = generate_payroll(self.bob.id, 4, 2024)
        self.march_alice = generate_payroll(self.alice.id, 3, 2024)
        approve_payroll(self.april_alice.id)

    def test_filters(self):
        self.assertEqual(filter_payroll_records({"month": 4, "year": 2024}).count(), 2)
        self.assertEqual(list(filter_payroll_records({"status": "approved"})), [self.april_alice])
        self.assertEqual(filter_payroll_records({"department_id": self.engineering.id}).count(), 2)
        self.assertEqual(list(filter_payroll_records({"search": "brown"})), [self.april_bob])
        self.assertEqual(filter_payroll_records({"employee_id": self.alice.id}).count(), 2)

    def test_date_range_filter(self):
        march = filter_payroll_records({"start_date": "2024-03-01", "end_date": "2024-03-31"})
        self.assertEqual(list(march), [self.march_alice])

    def test_relative_payroll_periods(self):
        today = date(2024, 5, 10)
        self.assertEqual(filter_payroll_records({"payroll_period": "current_month"}, today=today).count(), 0)
        self.assertEqual(filter_payroll_records({"payroll_period": "last_month"}, today=today).count(), 2)
        self.assertEqual(filter_payroll_records({"payroll_period": "current_quarter"}, today=today).count(), 2)
        self.assertEqual(filter_payroll_records({"payroll_period": "current_year"}, today=today).count(), 3)
        self.assertEqual(
            filter_payroll_records({"payroll_period": "last_month"}, today=date(2024, 1, 15)).count(),
            0,
        )

    def test_unknown_payroll_period_is_rejected(self):
        with self.assertRaises(ValidationError):
            filter_payroll_records({"payroll_period": "next_decade"})

    def test_summary_for_month(self):
        summary = payroll_summary(month=4, year=2024)
        self.assertEqual(summary["record_count"], 2)
        self.assertEqual(summary["total_gross"], Decimal("32000.00"))
        self.assertEqual(summary["status_counts"], {"pending": 1, "approved": 1, "rejected": 0})
        self.assertEqual(summary["average_gross"], Decimal("16000.00"))

    def test_summary_for_year_only(self):
        summary = payroll_summary(year=2024)
        self.assertEqual(summary["record_count"], 3)
        self.assertEqual(summary["total_gross"], Decimal("54000.00"))
        self.assertIsNone(summary["month"])
        self.assertEqual(summary["year"], 2024)
        self.assertEqual(payroll_summary(year="2023")["record_count"], 0)

    def test_summary_for_month_only(self):
        summary = payroll_summary(month="3")
        self.assertEqual(summary["record_count"], 1)
        self.assertEqual(summary["month"], 3)
        self.assertIsNone(summary["year"])

    def test_summary_rejects_invalid_filters(self):
        with self.assertRaises(ValidationError):
            payroll_summary(month=13)
        with self.assertRaises(ValidationError):
            payroll_summary(year="next")

    def test_summary_without_records(self):
        summary = payroll_summary(month=1, year=2030)
        self.assertEqual(summary["record_count"], 0)
        self.assertEqual(summary["total_net"], Decimal("0.00"))


class PayrollAPITests(PayrollFixtureMixin, TestCase):
    def setUp(self):
        User = get_user_model()
        self.client = APIClient()
        self.admin = User.objects.create_superuser(username="admin", password="pass", email="admin@example.com")
        self.clerk = User.objects.create_user(username="clerk", password="pass")
        self.employee = self.make_employee()
        self.client.force_authenticate(self.admin)

    def _grant(self, user, *codenames):
        user.user_permissions.add(*Permission.objects.filter(codename__in=codenames, content_type__app_label="payroll"))

    def test_generate_returns_created_payslip(self):
        response = self.client.post(
            "/api/payroll/generate/",
            {"employee_id": str(self.employee.id), "month": MONTH, "year": YEAR},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["data"]["status"], "pending")
        self.assertEqual(body["data"]["net_pay"], "20141.67")
        self.assertEqual(body["data"]["deductions"]["pf"], "1800.00")
        self.assertEqual(body["data"]["generated_by"], "admin")

    def test_duplicate_generation_is_conflict(self):
        generate_payroll(self.employee.id, MONTH, YEAR)
        response = self.client.post(
            "/api/payroll/generate/",
            {"employee_id": str(self.employee.id), "month": MONTH, "year": YEAR},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["errors"], [{"code": "duplicate_record"}])

    def test_generate_validates_payload(self):
        response = self.client.post(
            "/api/payroll/generate/",
            {"employee_id": str(self.employee.id), "month": 13, "year": YEAR},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("month", response.json()["errors"])

    def test_generate_for_missing_salary_is_unprocessable(self):
        employee = self.make_employee("EMP-009", basic_salary=None)
        response = self.client.post(
            "/api/payroll/generate/",
            {"employee_id": str(employee.id), "month": MONTH, "year": YEAR},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)

    def test_bulk_generation_partitions_results(self):
        self.make_employee("EMP-002", basic_salary=None)
        response = self.client.post("/api/payroll/generate/bulk/", {"month": MONTH, "year": YEAR}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()["data"]
        self.assertEqual([row["employee_number"] for row in data["successful"]], ["EMP-001"])
        self.assertEqual(len(data["failed"]), 1)
        self.assertEqual(data["failed"][0]["employee_number"], "EMP-002")
        self.assertEqual(data["failed"][0]["code"], "invalid_configuration")

    def test_approve_and_reject_flow(self):
        record = generate_payroll(self.employee.id, MONTH, YEAR)

        response = self.client.put(f"/api/payroll/{record.id}/approve/", {"comments": "ok"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"]["status"], "approved")
        self.assertEqual(response.json()["data"]["approver_comments"], "ok")

        response = self.client.put(f"/api/payroll/{record.id}/reject/", {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(PayrollRecord.objects.get(id=record.id).status, PayrollRecord.STATUS_APPROVED)

    def test_detail_and_missing_record(self):
        record = generate_payroll(self.employee.id, MONTH, YEAR)
        response = self.client.get(f"/api/payroll/{record.id}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"]["employee_number"], "EMP-001")

        response = self.client.get(f"/api/payroll/{uuid.uuid4()}/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.json()["success"])

    def test_list_is_paginated(self):
        for month in (1, 2, 3):
            generate_payroll(self.employee.id, month, YEAR)
        response = self.client.get("/api/payroll/", {"year": YEAR, "limit": 2, "page": 2})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()["data"]
        self.assertEqual(data["pagination"], {"page": 2, "limit": 2, "total": 3, "pages": 2})
        self.assertEqual([row["month"] for row in data["results"]], [1])

    def test_summary_endpoint(self):
        generate_payroll(self.employee.id, MONTH, YEAR)
        response = self.client.get("/api/payroll/summary/", {"month": MONTH, "year": YEAR})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()["data"]
        self.assertEqual(data["record_count"], 1)
        self.assertEqual(data["total_gross"], "22000.00")
        self.assertEqual(data["status_counts"]["pending"], 1)

    def test_summary_endpoint_accepts_year_alone(self):
        generate_payroll(self.employee.id, MONTH, YEAR)
        generate_payroll(self.employee.id, MONTH - 1, YEAR)
        response = self.client.get("/api/payroll/summary/", {"year": YEAR})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()["data"]
        self.assertEqual(data["record_count"], 2)
        self.assertEqual(data["total_gross"], "44000.00")

    def test_permissions_are_required(self):
        self.client.force_authenticate(self.clerk)
        response = self.client.get("/api/payroll/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self._grant(self.clerk, "view_payrollrecord")
        self.client.force_authenticate(get_user_model().objects.get(pk=self.clerk.pk))
        self.assertEqual(self.client.get("/api/payroll/").status_code, status.HTTP_200_OK)
        response = self.client.post(
            "/api/payroll/generate/",
            {"employee_id": str(self.employee.id), "month": MONTH, "year": YEAR},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_anonymous_requests_are_refused(self):
        self.client.force_authenticate(None)
        response = self.client.get("/api/payroll/")
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))
