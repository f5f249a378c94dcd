from datetime import date, datetime
from typing import List, Optional

from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from employees.models import Employee

from .models import AttendanceRecord


def normalize_datetime(value: Optional[datetime]) -> datetime:
    """Ensure datetimes are timezone-aware using current timezone."""
    if value is None:
        return timezone.now()
    if timezone.is_naive(value):
        return timezone.make_aware(value, timezone.get_current_timezone())
    return value


def perform_check_in(employee: Employee, when: Optional[datetime] = None, note: Optional[str] = None) -> AttendanceRecord:
    """Open today's attendance record for the employee."""
    check_in_at = normalize_datetime(when)
    work_date = timezone.localdate(check_in_at)
    try:
        with transaction.atomic():
            record = AttendanceRecord.objects.create(
                employee=employee,
                date=work_date,
                check_in_at=check_in_at,
                note=note,
            )
    except IntegrityError:
        raise ValidationError({"detail": "Attendance already recorded for this day."})
    return record


def perform_check_out(employee: Employee, when: Optional[datetime] = None) -> AttendanceRecord:
    """Complete the open attendance record for check-out."""
    record = (
        AttendanceRecord.objects.filter(
            employee=employee,
            check_in_at__isnull=False,
            check_out_at__isnull=True,
        )
        .order_by("-date")
        .first()
    )
    if not record:
        raise ValidationError({"detail": "No open attendance record found."})

    checkout_at = normalize_datetime(when)
    if checkout_at <= record.check_in_at:
        raise ValidationError({"detail": "Check-out must be after check-in."})
    record.mark_checkout(checkout_at)
    record.save()
    return record


def list_attendance_for_period(employee, start: date, end: date) -> List[AttendanceRecord]:
    """Attendance rows for one employee with `start <= date <= end`, oldest first."""
    return list(
        AttendanceRecord.objects.filter(
            employee=employee,
            date__gte=start,
            date__lte=end,
        ).order_by("date")
    )
