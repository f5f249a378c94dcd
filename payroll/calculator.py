"""
Pure payroll arithmetic.

Turns an employee's salary configuration plus the attendance and approved
leave that fall inside one calendar month into a payslip breakdown. Nothing in
here touches the database; callers pass model instances or the entry
dataclasses below (anything exposing the same attributes works).
"""
import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, Optional, Tuple

from .constants import (
    ALLOWANCE_KEYS,
    CONFIG_DEDUCTION_KEYS,
    DAYS_QUANT,
    ESI_GROSS_THRESHOLD,
    ESI_RATE,
    MONEY_QUANT,
    OVERTIME_MULTIPLIER,
    PF_CAP,
    PF_RATE,
    STANDARD_HOURS_PER_DAY,
    TAX_BRACKETS,
)
from .exceptions import CalculationError, InvalidConfigurationError

ZERO = Decimal("0")


@dataclass(frozen=True)
class SalaryProfile:
    basic_salary: Optional[Decimal]
    allowances: Dict[str, Decimal] = field(default_factory=dict)
    deductions: Dict[str, Decimal] = field(default_factory=dict)
    annual_leave_entitlement: int = 0


@dataclass(frozen=True)
class AttendanceEntry:
    date: date
    check_in_at: Optional[datetime] = None
    check_out_at: Optional[datetime] = None
    hours_worked: Decimal = ZERO


@dataclass(frozen=True)
class LeaveEntry:
    start_date: date
    end_date: date
    number_of_days: Decimal
    leave_type: str = "annual"


@dataclass(frozen=True)
class PayrollBreakdown:
    period_start: date
    period_end: date
    basic_salary: Decimal
    allowances: Dict[str, Decimal]
    total_allowances: Decimal
    deductions: Dict[str, Decimal]
    total_deductions: Decimal
    overtime_hours: Decimal
    overtime_amount: Decimal
    gross_pay: Decimal
    net_pay: Decimal
    tax_amount: Decimal
    attendance_days: int
    working_days: int
    leave_days: Decimal
    daily_rate: Decimal
    hourly_rate: Decimal


def _to_decimal(value, default=ZERO) -> Decimal:
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    return value.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def round_tax(value: Decimal) -> Decimal:
    """Half-up to cents, except that a positive liability never rounds to zero."""
    rounded = round_money(value)
    if value > 0 and rounded == 0:
        return MONEY_QUANT
    return rounded


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def count_working_days(start: date, end: date) -> int:
    """Monday to Friday dates in [start, end]; no holiday calendar."""
    days = 0
    current = start
    while current <= end:
        if current.weekday() < 5:
            days += 1
        current += timedelta(days=1)
    return days


def leave_days_within(leave, start: date, end: date) -> Decimal:
    """
    Days of one leave that fall inside [start, end].

    A leave wholly inside the window counts its own number_of_days; one that
    crosses a boundary is clipped to the calendar days of the overlap.
    """
    overlap_start = max(leave.start_date, start)
    overlap_end = min(leave.end_date, end)
    if overlap_end < overlap_start:
        return ZERO
    overlap_days = Decimal((overlap_end - overlap_start).days + 1)
    return min(_to_decimal(leave.number_of_days), overlap_days)


def annual_income_tax(annual_income: Decimal) -> Decimal:
    """Progressive tax on an annual income using TAX_BRACKETS."""
    tax = ZERO
    lower = ZERO
    for upper, rate in TAX_BRACKETS:
        if annual_income <= lower:
            break
        taxable_top = annual_income if upper is None else min(annual_income, upper)
        tax += (taxable_top - lower) * rate
        if upper is None:
            break
        lower = upper
    return tax


def monthly_income_tax(gross_pay: Decimal) -> Decimal:
    return annual_income_tax(gross_pay * 12) / 12


def provident_fund(gross_pay: Decimal) -> Decimal:
    return min(gross_pay * PF_RATE, PF_CAP)


def employee_state_insurance(gross_pay: Decimal) -> Decimal:
    if gross_pay <= ESI_GROSS_THRESHOLD:
        return gross_pay * ESI_RATE
    return ZERO


def _validated_config(profile: SalaryProfile) -> Tuple[Decimal, Dict[str, Decimal], Dict[str, Decimal]]:
    if profile.basic_salary is None:
        raise InvalidConfigurationError("Basic salary is not configured for this employee.")
    basic_salary = _to_decimal(profile.basic_salary)
    if basic_salary < 0:
        raise InvalidConfigurationError("Basic salary cannot be negative.")

    allowances = {key: _to_decimal(profile.allowances.get(key)) for key in ALLOWANCE_KEYS}
    deductions = {key: _to_decimal(profile.deductions.get(key)) for key in CONFIG_DEDUCTION_KEYS}
    for label, values in (("allowance", allowances), ("deduction", deductions)):
        for key, amount in values.items():
            if amount < 0:
                raise InvalidConfigurationError(f"The {key} {label} cannot be negative.")
    return basic_salary, allowances, deductions


def calculate_payroll(
    profile: SalaryProfile,
    year: int,
    month: int,
    attendance: Iterable = (),
    leaves: Iterable = (),
) -> PayrollBreakdown:
    """
    Compute the payslip for one employee and one calendar month.

    `attendance` items need `date`, `check_in_at` and `hours_worked`;
    `leaves` items need `start_date`, `end_date` and `number_of_days` and
    must already be restricted to approved leave.

    Rounding happens once per stored amount. Basic salary, each allowance and
    the overtime amount are rounded to cents, and gross pay is their exact sum.
    Deductions are computed from that gross and rounded individually; tax uses
    round_tax. Net pay is gross minus the rounded deductions. Daily and hourly
    rates stay unrounded.
    """
    basic_salary, allowances, config_deductions = _validated_config(profile)
    start, end = month_bounds(year, month)

    working_days = count_working_days(start, end)
    if working_days == 0:
        raise CalculationError(f"No working days in {month:02d}/{year}.")

    present = []
    for entry in attendance:
        if entry.date < start or entry.date > end:
            continue
        if entry.check_in_at is None:
            continue
        hours = _to_decimal(entry.hours_worked)
        if hours < 0:
            raise CalculationError(f"Negative hours worked recorded on {entry.date.isoformat()}.")
        present.append(hours)

    attendance_days = len(present)
    overtime_hours = sum((max(ZERO, hours - STANDARD_HOURS_PER_DAY) for hours in present), ZERO)
    leave_days = sum((leave_days_within(leave, start, end) for leave in leaves), ZERO)

    daily_rate = basic_salary / working_days
    hourly_rate = daily_rate / STANDARD_HOURS_PER_DAY

    rounded_basic = round_money(basic_salary)
    rounded_allowances = {key: round_money(amount) for key, amount in allowances.items()}
    total_allowances = sum(rounded_allowances.values(), ZERO)
    overtime_amount = round_money(overtime_hours * hourly_rate * OVERTIME_MULTIPLIER)
    gross_pay = rounded_basic + total_allowances + overtime_amount

    unpaid_leave_days = max(ZERO, leave_days - profile.annual_leave_entitlement)
    deductions = {
        "tax": round_tax(monthly_income_tax(gross_pay)),
        "pf": round_money(provident_fund(gross_pay)),
        "esi": round_money(employee_state_insurance(gross_pay)),
        "professional": round_money(config_deductions["professional"]),
        "other": round_money(config_deductions["other"]),
        "unpaid_leave": round_money(unpaid_leave_days * daily_rate),
    }
    total_deductions = sum(deductions.values(), ZERO)
    net_pay = gross_pay - total_deductions

    for label, amount in [("gross pay", gross_pay), ("overtime", overtime_amount)] + list(deductions.items()):
        if amount < 0:
            raise CalculationError(f"Calculated {label} is negative.")

    return PayrollBreakdown(
        period_start=start,
        period_end=end,
        basic_salary=rounded_basic,
        allowances=rounded_allowances,
        total_allowances=total_allowances,
        deductions=deductions,
        total_deductions=total_deductions,
        overtime_hours=overtime_hours.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP),
        overtime_amount=overtime_amount,
        gross_pay=gross_pay,
        net_pay=net_pay,
        tax_amount=deductions["tax"],
        attendance_days=attendance_days,
        working_days=working_days,
        leave_days=leave_days.quantize(DAYS_QUANT, rounding=ROUND_HALF_UP),
        daily_rate=daily_rate,
        hourly_rate=hourly_rate,
    )
