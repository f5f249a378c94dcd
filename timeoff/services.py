"""
Core helpers for leave requests, request transitions, and balances.

Approved leave is counted in exactly one place,
`approved_leave_days_in_period`, which both balances and payroll rely on.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from django.db import transaction
from rest_framework.exceptions import ValidationError

from payroll.calculator import LeaveEntry, leave_days_within

from .models import LeaveRequest

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = (LeaveRequest.STATUS_PENDING, LeaveRequest.STATUS_APPROVED)


def calculate_number_of_days(start_date: date, end_date: date, is_half_day: bool = False) -> Decimal:
    """Inclusive calendar-day span; a half-day request is always 0.5."""
    if end_date < start_date:
        raise ValidationError({"end_date": "End date cannot be before start date."})
    if is_half_day:
        if end_date != start_date:
            raise ValidationError({"is_half_day": "A half-day leave must start and end on the same day."})
        return Decimal("0.5")
    return Decimal((end_date - start_date).days + 1)


def has_overlap(employee, start_date: date, end_date: date, exclude_request_id=None) -> bool:
    """Check overlapping requests that are still pending or already approved."""
    qs = LeaveRequest.objects.filter(
        employee=employee,
        status__in=ACTIVE_STATUSES,
        start_date__lte=end_date,
        end_date__gte=start_date,
    )
    if exclude_request_id:
        qs = qs.exclude(id=exclude_request_id)
    return qs.exists()


def list_approved_leave_for_period(employee, start: date, end: date) -> List[LeaveRequest]:
    """Approved leave of one employee whose interval overlaps [start, end]."""
    return list(
        LeaveRequest.objects.filter(
            employee=employee,
            status=LeaveRequest.STATUS_APPROVED,
            start_date__lte=end,
            end_date__gte=start,
        ).order_by("start_date")
    )


def approved_leave_days_in_period(employee, start: date, end: date, leave_type: Optional[str] = None) -> Decimal:
    """Approved leave days falling inside [start, end], optionally for a single leave type."""
    leaves = list_approved_leave_for_period(employee, start, end)
    if leave_type:
        leaves = [leave for leave in leaves if leave.leave_type == leave_type]
    return sum((leave_days_within(leave, start, end) for leave in leaves), Decimal("0"))


def leave_balance(employee, year: int) -> dict:
    """
    Allocation, usage and remainder per entitled leave type for a calendar year.
    Returns {leave_type: {"allocated", "used", "remaining"}}.
    """
    start, end = date(year, 1, 1), date(year, 12, 31)
    leaves = list_approved_leave_for_period(employee, start, end)
    balances = {}
    for leave_type, allocated in employee.leave_entitlement.items():
        used = sum(
            (leave_days_within(leave, start, end) for leave in leaves if leave.leave_type == leave_type),
            Decimal("0"),
        )
        allocated = Decimal(allocated)
        balances[leave_type] = {
            "allocated": allocated,
            "used": used,
            "remaining": allocated - used,
        }
    return balances


def create_leave_request(
    employee,
    leave_type: str,
    start_date: date,
    end_date: date,
    reason: str = "",
    is_half_day: bool = False,
    number_of_days: Optional[Decimal] = None,
) -> LeaveRequest:
    """
    Create a pending leave request.
    Rejects overlapping requests and requests exceeding the remaining entitlement
    of an entitled leave type; a request spanning a year end is charged to each
    calendar year for the days that fall in it.
    """
    valid_types = {choice for choice, _ in LeaveRequest.TYPE_CHOICES}
    if leave_type not in valid_types:
        raise ValidationError({"leave_type": f"Unknown leave type '{leave_type}'."})
    days = number_of_days if number_of_days is not None else calculate_number_of_days(start_date, end_date, is_half_day)
    if has_overlap(employee, start_date, end_date):
        raise ValidationError({"detail": "Leave request overlaps an existing pending or approved request."})

    if leave_type in employee.leave_entitlement:
        requested = LeaveEntry(start_date=start_date, end_date=end_date, number_of_days=days, leave_type=leave_type)
        for year in range(start_date.year, end_date.year + 1):
            days_in_year = leave_days_within(requested, date(year, 1, 1), date(year, 12, 31))
            remaining = leave_balance(employee, year)[leave_type]["remaining"]
            if days_in_year > remaining:
                raise ValidationError(
                    {"detail": f"Insufficient {leave_type} leave balance for {year} ({remaining} days remaining)."}
                )

    leave = LeaveRequest.objects.create(
        employee=employee,
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        number_of_days=days,
        is_half_day=is_half_day,
        reason=reason or "",
    )
    logger.info("Leave request %s created for employee %s (%s days)", leave.id, employee.id, days)
    return leave


def _locked_pending_request(request_id) -> LeaveRequest:
    try:
        leave = LeaveRequest.objects.select_for_update().get(id=request_id)
    except LeaveRequest.DoesNotExist:
        raise ValidationError({"detail": "Leave request not found."})
    if not leave.is_pending:
        raise ValidationError({"detail": f"Leave request is already {leave.status}."})
    return leave


def approve_leave_request(request_id, user=None, comments: Optional[str] = None) -> LeaveRequest:
    with transaction.atomic():
        leave = _locked_pending_request(request_id)
        leave.mark_approved(user, comments)
        leave.save()
    logger.info("Leave request %s approved", leave.id)
    return leave


def reject_leave_request(request_id, user=None, comments: Optional[str] = None) -> LeaveRequest:
    with transaction.atomic():
        leave = _locked_pending_request(request_id)
        leave.mark_rejected(user, comments)
        leave.save()
    logger.info("Leave request %s rejected", leave.id)
    return leave


def cancel_leave_request(request_id) -> LeaveRequest:
    with transaction.atomic():
        leave = _locked_pending_request(request_id)
        leave.mark_cancelled()
        leave.save()
    logger.info("Leave request %s cancelled", leave.id)
    return leave
