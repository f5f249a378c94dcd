from decimal import Decimal

from django.db import migrations, models
import django.core.validators
import django.db.models.deletion
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("employees", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="AttendanceRecord",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("date", models.DateField(db_index=True)),
                ("check_in_at", models.DateTimeField(blank=True, null=True)),
                ("check_out_at", models.DateTimeField(blank=True, null=True)),
                (
                    "hours_worked",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=5,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("present", "Present"),
                            ("absent", "Absent"),
                            ("late", "Late"),
                            ("half_day", "Half Day"),
                            ("on_leave", "On Leave"),
                            ("holiday", "Holiday"),
                        ],
                        db_index=True,
                        default="present",
                        max_length=12,
                    ),
                ),
                ("note", models.CharField(blank=True, max_length=500, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "employee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="attendance_records",
                        to="employees.employee",
                    ),
                ),
            ],
            options={
                "verbose_name": "Attendance Record",
                "verbose_name_plural": "Attendance Records",
                "db_table": "attendance_records",
                "ordering": ["-date"],
                "indexes": [
                    models.Index(fields=["employee", "date"], name="attendance_employee_date_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("employee", "date"),
                        name="uniq_attendance_record_per_employee_day",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("check_out_at__gt", models.F("check_in_at")),
                            ("check_out_at__isnull", True),
                            _connector="OR",
                        ),
                        name="attendance_checkout_after_checkin",
                    ),
                ],
            },
        ),
    ]
