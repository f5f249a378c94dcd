from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("employees", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PayrollRecord",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("month", models.PositiveSmallIntegerField()),
                ("year", models.PositiveIntegerField()),
                ("pay_period_start", models.DateField()),
                ("pay_period_end", models.DateField()),
                ("basic_salary", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=20)),
                ("house_allowance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=20)),
                ("transport_allowance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=20)),
                ("medical_allowance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=20)),
                ("food_allowance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=20)),
                ("other_allowance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=20)),
                ("total_allowances", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=20)),
                ("tax_deduction", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=20)),
                ("pf_deduction", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=20)),
                ("esi_deduction", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=20)),
                ("professional_deduction", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=20)),
                ("other_deduction", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=20)),
                ("unpaid_leave_deduction", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=20)),
                ("total_deductions", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=20)),
                ("overtime_hours", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=8)),
                ("overtime_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=20)),
                ("gross_pay", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=20)),
                (
                    "net_pay",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Not clamped; a negative value signals over-deduction",
                        max_digits=20,
                    ),
                ),
                ("tax_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=20)),
                ("attendance_days", models.PositiveSmallIntegerField(default=0)),
                ("working_days", models.PositiveSmallIntegerField(default=0)),
                ("leave_days", models.DecimalField(decimal_places=1, default=Decimal("0.0"), max_digits=6)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")],
                        db_index=True,
                        default="pending",
                        max_length=15,
                    ),
                ),
                ("generated_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("approver_comments", models.CharField(blank=True, max_length=500, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="approved_payroll_records",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "employee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payroll_records",
                        to="employees.employee",
                    ),
                ),
                (
                    "generated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="generated_payroll_records",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Payroll Record",
                "verbose_name_plural": "Payroll Records",
                "db_table": "payroll_records",
                "ordering": ["-year", "-month", "employee__last_name"],
                "permissions": [
                    ("generate_payrollrecord", "Can generate payroll records"),
                    ("approve_payrollrecord", "Can approve or reject payroll records"),
                ],
                "indexes": [
                    models.Index(fields=["year", "month"], name="payroll_period_idx"),
                    models.Index(fields=["status", "year", "month"], name="payroll_status_period_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("employee", "year", "month"),
                        name="uniq_payroll_record_per_employee_period",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("month__gte", 1), ("month__lte", 12)),
                        name="payroll_month_in_range",
                    ),
                ],
            },
        ),
    ]
