import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone


class LeaveRequest(models.Model):
    """Represents a leave application made by an employee."""

    TYPE_ANNUAL = "annual"
    TYPE_SICK = "sick"
    TYPE_CASUAL = "casual"
    TYPE_MATERNITY = "maternity"
    TYPE_PATERNITY = "paternity"
    TYPE_COMPASSIONATE = "compassionate"
    TYPE_STUDY = "study"
    TYPE_UNPAID = "unpaid"

    TYPE_CHOICES = [
        (TYPE_ANNUAL, "Annual"),
        (TYPE_SICK, "Sick"),
        (TYPE_CASUAL, "Casual"),
        (TYPE_MATERNITY, "Maternity"),
        (TYPE_PATERNITY, "Paternity"),
        (TYPE_COMPASSIONATE, "Compassionate"),
        (TYPE_STUDY, "Study"),
        (TYPE_UNPAID, "Unpaid"),
    ]

    STATUS_PENDING = "pending"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending Approval"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECTED, "Rejected"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    employee = models.ForeignKey(
        "employees.Employee",
        on_delete=models.CASCADE,
        related_name="leave_requests",
        help_text="Employee requesting leave",
    )
    leave_type = models.CharField(max_length=20, choices=TYPE_CHOICES, db_index=True)
    start_date = models.DateField()
    end_date = models.DateField()
    number_of_days = models.DecimalField(
        max_digits=5,
        decimal_places=1,
        validators=[MinValueValidator(Decimal("0.5"))],
        help_text="Days charged for this leave; defaults to the inclusive calendar span",
    )
    is_half_day = models.BooleanField(default=False)
    reason = models.TextField(blank=True, default="")
    status = models.CharField(max_length=15, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)

    decided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="decided_leave_requests",
    )
    decided_at = models.DateTimeField(blank=True, null=True)
    approver_comments = models.CharField(max_length=500, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "timeoff_leave_requests"
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__gte=F("start_date")),
                name="leave_end_not_before_start",
            ),
        ]
        indexes = [
            models.Index(fields=["employee", "status"], name="leave_employee_status_idx"),
            models.Index(fields=["start_date", "end_date"], name="leave_date_range_idx"),
        ]

    def __str__(self):
        return f"{self.leave_type} leave by {self.employee_id} ({self.status})"

    @property
    def is_pending(self) -> bool:
        return self.status == self.STATUS_PENDING

    def mark_approved(self, user=None, comments=None):
        self.status = self.STATUS_APPROVED
        self.decided_by = user
        self.decided_at = timezone.now()
        self.approver_comments = comments

    def mark_rejected(self, user=None, comments=None):
        self.status = self.STATUS_REJECTED
        self.decided_by = user
        self.decided_at = timezone.now()
        self.approver_comments = comments

    def mark_cancelled(self):
        self.status = self.STATUS_CANCELLED
