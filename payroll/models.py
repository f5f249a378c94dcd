import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone


def _money_field(**kwargs):
    return models.DecimalField(max_digits=20, decimal_places=2, default=Decimal("0.00"), **kwargs)


class PayrollRecordQuerySet(models.QuerySet):
    def for_period(self, employee, month: int, year: int):
        return self.filter(employee=employee, month=month, year=year).first()

    def for_month(self, month: int):
        return self.filter(month=month)

    def for_year(self, year: int):
        return self.filter(year=year)


class PayrollRecord(models.Model):
    """
    Monthly payslip for one employee.
    Created once per (employee, month, year) in `pending` state and only ever
    moved to `approved` or `rejected` afterwards.
    """

    STATUS_PENDING = "pending"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECTED, "Rejected"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    employee = models.ForeignKey(
        "employees.Employee",
        on_delete=models.PROTECT,
        related_name="payroll_records",
    )
    month = models.PositiveSmallIntegerField()
    year = models.PositiveIntegerField()
    pay_period_start = models.DateField()
    pay_period_end = models.DateField()

    basic_salary = _money_field()
    house_allowance = _money_field()
    transport_allowance = _money_field()
    medical_allowance = _money_field()
    food_allowance = _money_field()
    other_allowance = _money_field()
    total_allowances = _money_field()

    tax_deduction = _money_field()
    pf_deduction = _money_field()
    esi_deduction = _money_field()
    professional_deduction = _money_field()
    other_deduction = _money_field()
    unpaid_leave_deduction = _money_field()
    total_deductions = _money_field()

    overtime_hours = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal("0.00"))
    overtime_amount = _money_field()
    gross_pay = _money_field()
    net_pay = _money_field(help_text="Not clamped; a negative value signals over-deduction")
    tax_amount = _money_field()

    attendance_days = models.PositiveSmallIntegerField(default=0)
    working_days = models.PositiveSmallIntegerField(default=0)
    leave_days = models.DecimalField(max_digits=6, decimal_places=1, default=Decimal("0.0"))

    status = models.CharField(max_length=15, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    generated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="generated_payroll_records",
    )
    generated_at = models.DateTimeField(default=timezone.now)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_payroll_records",
    )
    approved_at = models.DateTimeField(blank=True, null=True)
    approver_comments = models.CharField(max_length=500, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PayrollRecordQuerySet.as_manager()

    class Meta:
        db_table = "payroll_records"
        verbose_name = "Payroll Record"
        verbose_name_plural = "Payroll Records"
        ordering = ["-year", "-month", "employee__last_name"]
        constraints = [
            models.UniqueConstraint(
                fields=["employee", "year", "month"],
                name="uniq_payroll_record_per_employee_period",
            ),
            models.CheckConstraint(
                condition=Q(month__gte=1) & Q(month__lte=12),
                name="payroll_month_in_range",
            ),
        ]
        indexes = [
            models.Index(fields=["year", "month"], name="payroll_period_idx"),
            models.Index(fields=["status", "year", "month"], name="payroll_status_period_idx"),
        ]
        permissions = [
            ("generate_payrollrecord", "Can generate payroll records"),
            ("approve_payrollrecord", "Can approve or reject payroll records"),
        ]

    def __str__(self):
        return f"Payroll {self.employee_id} {self.month:02d}/{self.year} ({self.status})"

    @property
    def is_pending(self) -> bool:
        return self.status == self.STATUS_PENDING

    @property
    def allowances(self) -> dict:
        return {
            "house": self.house_allowance,
            "transport": self.transport_allowance,
            "medical": self.medical_allowance,
            "food": self.food_allowance,
            "other": self.other_allowance,
        }

    @property
    def deductions(self) -> dict:
        return {
            "tax": self.tax_deduction,
            "pf": self.pf_deduction,
            "esi": self.esi_deduction,
            "professional": self.professional_deduction,
            "other": self.other_deduction,
            "unpaid_leave": self.unpaid_leave_deduction,
        }

    def mark_approved(self, user=None, comments=None):
        self.status = self.STATUS_APPROVED
        self.approved_by = user
        self.approved_at = timezone.now()
        self.approver_comments = comments

    def mark_rejected(self, user=None, comments=None):
        self.status = self.STATUS_REJECTED
        self.approved_by = user
        self.approved_at = timezone.now()
        self.approver_comments = comments
