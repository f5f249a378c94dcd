import uuid
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from employees.models import Employee


class AttendanceRecord(models.Model):
    """
    One attendance row per employee per calendar day.
    A row without a check-in represents an absence.
    """

    STATUS_PRESENT = "present"
    STATUS_ABSENT = "absent"
    STATUS_LATE = "late"
    STATUS_HALF_DAY = "half_day"
    STATUS_ON_LEAVE = "on_leave"
    STATUS_HOLIDAY = "holiday"
    STATUS_CHOICES = [
        (STATUS_PRESENT, "Present"),
        (STATUS_ABSENT, "Absent"),
        (STATUS_LATE, "Late"),
        (STATUS_HALF_DAY, "Half Day"),
        (STATUS_ON_LEAVE, "On Leave"),
        (STATUS_HOLIDAY, "Holiday"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    employee = models.ForeignKey(Employee, on_delete=models.PROTECT, related_name="attendance_records")
    date = models.DateField(db_index=True)
    check_in_at = models.DateTimeField(blank=True, null=True)
    check_out_at = models.DateTimeField(blank=True, null=True)
    hours_worked = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default=STATUS_PRESENT, db_index=True)
    note = models.CharField(max_length=500, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "attendance_records"
        verbose_name = "Attendance Record"
        verbose_name_plural = "Attendance Records"
        ordering = ["-date"]
        constraints = [
            models.UniqueConstraint(
                fields=["employee", "date"],
                name="uniq_attendance_record_per_employee_day",
            ),
            models.CheckConstraint(
                condition=Q(check_out_at__gt=F("check_in_at")) | Q(check_out_at__isnull=True),
                name="attendance_checkout_after_checkin",
            ),
        ]
        indexes = [
            models.Index(fields=["employee", "date"], name="attendance_employee_date_idx"),
        ]

    def compute_hours_worked(self) -> Decimal:
        if not self.check_in_at or not self.check_out_at:
            return Decimal("0.00")
        seconds = Decimal(str((self.check_out_at - self.check_in_at).total_seconds()))
        hours = (seconds / Decimal("3600")).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        return max(hours, Decimal("0.00"))

    def mark_checkout(self, checkout_time: Optional[datetime] = None) -> None:
        self.check_out_at = checkout_time or timezone.now()
        self.hours_worked = self.compute_hours_worked()

    def save(self, *args, **kwargs):
        self.hours_worked = self.compute_hours_worked()
        if self.check_in_at is None and self.status == self.STATUS_PRESENT:
            self.status = self.STATUS_ABSENT
        super().save(*args, **kwargs)

    @property
    def is_present(self) -> bool:
        return self.check_in_at is not None

    def __str__(self):
        return f"{self.employee_id} @ {self.date}"
