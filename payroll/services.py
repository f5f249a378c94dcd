import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import Avg, Count, Q, Sum
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from attendance.services import list_attendance_for_period
from employees.models import Employee
from employees.services import active_employees, get_employee
from timeoff.services import list_approved_leave_for_period

from .calculator import PayrollBreakdown, SalaryProfile, calculate_payroll, month_bounds
from .exceptions import DuplicateRecordError, InvalidTransitionError, NotFoundError, PayrollError
from .models import PayrollRecord

logger = logging.getLogger(__name__)

PERIOD_CURRENT_MONTH = "current_month"
PERIOD_LAST_MONTH = "last_month"
PERIOD_CURRENT_QUARTER = "current_quarter"
PERIOD_CURRENT_YEAR = "current_year"
PAYROLL_PERIODS = (PERIOD_CURRENT_MONTH, PERIOD_LAST_MONTH, PERIOD_CURRENT_QUARTER, PERIOD_CURRENT_YEAR)


def _to_int(value, label: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError({"detail": f"{label} must be an integer."})


def _validate_month(month) -> int:
    month = _to_int(month, "Month")
    if month < 1 or month > 12:
        raise ValidationError({"detail": "Month must be between 1 and 12."})
    return month


def _validate_year(year) -> int:
    year = _to_int(year, "Year")
    if year < 1:
        raise ValidationError({"detail": "Year must be positive."})
    return year


def _validate_period(month, year) -> Tuple[int, int]:
    if not month or not year:
        raise ValidationError({"detail": "Year and month are required."})
    return _validate_month(month), _validate_year(year)


def salary_profile_for(employee: Employee) -> SalaryProfile:
    return SalaryProfile(
        basic_salary=employee.basic_salary,
        allowances=employee.allowances,
        deductions=employee.deduction_config,
        annual_leave_entitlement=employee.annual_leave_entitlement,
    )


def _load_employee(employee_id) -> Employee:
    try:
        return get_employee(employee_id)
    except (Employee.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundError(f"Employee {employee_id} not found.")


def _build_record(employee, month, year, breakdown: PayrollBreakdown, generated_by=None) -> PayrollRecord:
    allowances = breakdown.allowances
    deductions = breakdown.deductions
    return PayrollRecord(
        employee=employee,
        month=month,
        year=year,
        pay_period_start=breakdown.period_start,
        pay_period_end=breakdown.period_end,
        basic_salary=breakdown.basic_salary,
        house_allowance=allowances["house"],
        transport_allowance=allowances["transport"],
        medical_allowance=allowances["medical"],
        food_allowance=allowances["food"],
        other_allowance=allowances["other"],
        total_allowances=breakdown.total_allowances,
        tax_deduction=deductions["tax"],
        pf_deduction=deductions["pf"],
        esi_deduction=deductions["esi"],
        professional_deduction=deductions["professional"],
        other_deduction=deductions["other"],
        unpaid_leave_deduction=deductions["unpaid_leave"],
        total_deductions=breakdown.total_deductions,
        overtime_hours=breakdown.overtime_hours,
        overtime_amount=breakdown.overtime_amount,
        gross_pay=breakdown.gross_pay,
        net_pay=breakdown.net_pay,
        tax_amount=breakdown.tax_amount,
        attendance_days=breakdown.attendance_days,
        working_days=breakdown.working_days,
        leave_days=breakdown.leave_days,
        status=PayrollRecord.STATUS_PENDING,
        generated_by=generated_by,
        generated_at=timezone.now(),
    )


def _generate_for_employee(employee: Employee, month: int, year: int, generated_by=None) -> PayrollRecord:
    if PayrollRecord.objects.for_period(employee, month, year):
        raise DuplicateRecordError(f"Payroll for {month:02d}/{year} already exists for employee {employee.employee_id}.")

    start, end = month_bounds(year, month)
    breakdown = calculate_payroll(
        salary_profile_for(employee),
        year,
        month,
        attendance=list_attendance_for_period(employee, start, end),
        leaves=list_approved_leave_for_period(employee, start, end),
    )
    record = _build_record(employee, month, year, breakdown, generated_by=generated_by)
    try:
        with transaction.atomic():
            record.save(force_insert=True)
    except IntegrityError:
        raise DuplicateRecordError(f"Payroll for {month:02d}/{year} already exists for employee {employee.employee_id}.")
    logger.info(
        "Generated payroll %s for employee %s %02d/%s: gross=%s net=%s",
        record.id,
        employee.employee_id,
        month,
        year,
        record.gross_pay,
        record.net_pay,
    )
    return record


def generate_payroll(employee_id, month, year, generated_by=None) -> PayrollRecord:
    """Calculate and store the pending payroll record of one employee for one month."""
    month, year = _validate_period(month, year)
    employee = _load_employee(employee_id)
    return _generate_for_employee(employee, month, year, generated_by=generated_by)


@dataclass
class GenerationOutcome:
    employee: Employee
    record: Optional[PayrollRecord] = None
    error: Optional[PayrollError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BulkGenerationResult:
    successful: List[GenerationOutcome]
    failed: List[GenerationOutcome]


def _attempt_generation(employee, month, year, generated_by=None) -> GenerationOutcome:
    try:
        record = _generate_for_employee(employee, month, year, generated_by=generated_by)
    except PayrollError as exc:
        logger.warning(
            "Payroll generation failed for employee %s %02d/%s: %s",
            employee.employee_id,
            month,
            year,
            exc.detail,
        )
        return GenerationOutcome(employee=employee, error=exc)
    return GenerationOutcome(employee=employee, record=record)


def generate_bulk_payroll(month, year, department_id=None, generated_by=None) -> BulkGenerationResult:
    """
    Generate payroll for every active employee, optionally within one department.
    Each employee is independent: failures are reported, successes are kept.
    """
    month, year = _validate_period(month, year)
    outcomes = [
        _attempt_generation(employee, month, year, generated_by=generated_by)
        for employee in active_employees(department_id=department_id)
    ]
    result = BulkGenerationResult(
        successful=[outcome for outcome in outcomes if outcome.ok],
        failed=[outcome for outcome in outcomes if not outcome.ok],
    )
    logger.info(
        "Bulk payroll %02d/%s (department=%s): %s generated, %s failed",
        month,
        year,
        department_id,
        len(result.successful),
        len(result.failed),
    )
    return result


def _locked_record(record_id) -> PayrollRecord:
    try:
        return PayrollRecord.objects.select_for_update().get(id=record_id)
    except (PayrollRecord.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundError(f"Payroll record {record_id} not found.")


def _transition(record_id, approve: bool, user=None, comments=None) -> PayrollRecord:
    with transaction.atomic():
        record = _locked_record(record_id)
        if not record.is_pending:
            raise InvalidTransitionError(f"Payroll record is already {record.status}.")
        if approve:
            record.mark_approved(user, comments)
        else:
            record.mark_rejected(user, comments)
        record.save(update_fields=["status", "approved_by", "approved_at", "approver_comments", "updated_at"])
    logger.info("Payroll record %s %s by %s", record.id, record.status, getattr(user, "pk", None))
    return record


def approve_payroll(record_id, approver=None, comments: Optional[str] = None) -> PayrollRecord:
    return _transition(record_id, True, user=approver, comments=comments)


def reject_payroll(record_id, approver=None, comments: Optional[str] = None) -> PayrollRecord:
    return _transition(record_id, False, user=approver, comments=comments)


def get_payroll_record(record_id) -> PayrollRecord:
    try:
        return PayrollRecord.objects.select_related("employee", "employee__department").get(id=record_id)
    except (PayrollRecord.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundError(f"Payroll record {record_id} not found.")


def _parse_date(value, field):
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError({field: "Use YYYY-MM-DD."})


def _period_window(payroll_period: str, today: date) -> Q:
    if payroll_period == PERIOD_CURRENT_MONTH:
        return Q(year=today.year, month=today.month)
    if payroll_period == PERIOD_LAST_MONTH:
        if today.month == 1:
            return Q(year=today.year - 1, month=12)
        return Q(year=today.year, month=today.month - 1)
    if payroll_period == PERIOD_CURRENT_QUARTER:
        first_month = (today.month - 1) // 3 * 3 + 1
        return Q(year=today.year, month__gte=first_month, month__lte=first_month + 2)
    if payroll_period == PERIOD_CURRENT_YEAR:
        return Q(year=today.year)
    raise ValidationError({"payroll_period": f"Choose one of: {', '.join(PAYROLL_PERIODS)}."})


def filter_payroll_records(params, today: Optional[date] = None):
    """
    Queryset of payroll records narrowed by the query parameters supported by
    the list endpoint. Unknown parameters are ignored.
    """
    qs = PayrollRecord.objects.select_related("employee", "employee__department")

    month = params.get("month")
    year = params.get("year")
    if month:
        qs = qs.for_month(month)
    if year:
        qs = qs.for_year(year)
    if params.get("employee_id"):
        qs = qs.filter(employee_id=params["employee_id"])
    if params.get("status"):
        qs = qs.filter(status=params["status"])
    if params.get("department_id"):
        qs = qs.filter(employee__department_id=params["department_id"])

    search = (params.get("search") or "").strip()
    if search:
        qs = qs.filter(
            Q(employee__first_name__icontains=search)
            | Q(employee__last_name__icontains=search)
            | Q(employee__employee_id__icontains=search)
            | Q(employee__email__icontains=search)
        )

    payroll_period = params.get("payroll_period")
    if payroll_period:
        qs = qs.filter(_period_window(payroll_period, today or timezone.localdate()))

    if params.get("start_date"):
        qs = qs.filter(pay_period_end__gte=_parse_date(params["start_date"], "start_date"))
    if params.get("end_date"):
        qs = qs.filter(pay_period_start__lte=_parse_date(params["end_date"], "end_date"))

    return qs.order_by("-year", "-month", "employee__last_name", "employee__first_name")


def payroll_summary(month=None, year=None) -> dict:
    """Totals, averages and per-status counts, optionally filtered by month and/or year."""
    qs = PayrollRecord.objects.all()
    if month:
        month = _validate_month(month)
        qs = qs.for_month(month)
    if year:
        year = _validate_year(year)
        qs = qs.for_year(year)

    totals = qs.aggregate(
        record_count=Count("id"),
        total_gross=Sum("gross_pay"),
        total_net=Sum("net_pay"),
        total_deductions=Sum("total_deductions"),
        total_tax=Sum("tax_amount"),
        total_overtime=Sum("overtime_amount"),
        average_gross=Avg("gross_pay"),
        average_net=Avg("net_pay"),
    )
    zero = Decimal("0.00")
    summary = {key: (value if value is not None else zero) for key, value in totals.items()}
    summary["record_count"] = totals["record_count"]
    for key in ("average_gross", "average_net"):
        summary[key] = Decimal(summary[key]).quantize(zero)

    counts = {status: 0 for status, _ in PayrollRecord.STATUS_CHOICES}
    for row in qs.values("status").annotate(count=Count("id")):
        counts[row["status"]] = row["count"]
    summary["status_counts"] = counts
    summary["month"] = month
    summary["year"] = year
    return summary
