from rest_framework import serializers

from .models import PayrollRecord
from .services import PAYROLL_PERIODS


class PayrollRecordSummarySerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source="employee.full_name", read_only=True)
    employee_number = serializers.CharField(source="employee.employee_id", read_only=True)
    department_name = serializers.CharField(source="employee.department.name", read_only=True, default=None)

    class Meta:
        model = PayrollRecord
        fields = [
            "id",
            "employee",
            "employee_name",
            "employee_number",
            "department_name",
            "year",
            "month",
            "status",
            "gross_pay",
            "total_deductions",
            "net_pay",
            "generated_at",
        ]


class PayrollRecordDetailSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source="employee.full_name", read_only=True)
    employee_number = serializers.CharField(source="employee.employee_id", read_only=True)
    department_name = serializers.CharField(source="employee.department.name", read_only=True, default=None)
    allowances = serializers.SerializerMethodField()
    deductions = serializers.SerializerMethodField()
    generated_by = serializers.CharField(source="generated_by.get_username", read_only=True, default=None)
    approved_by = serializers.CharField(source="approved_by.get_username", read_only=True, default=None)

    class Meta:
        model = PayrollRecord
        fields = [
            "id",
            "employee",
            "employee_name",
            "employee_number",
            "department_name",
            "year",
            "month",
            "pay_period_start",
            "pay_period_end",
            "basic_salary",
            "allowances",
            "total_allowances",
            "deductions",
            "total_deductions",
            "overtime_hours",
            "overtime_amount",
            "gross_pay",
            "net_pay",
            "tax_amount",
            "attendance_days",
            "working_days",
            "leave_days",
            "status",
            "generated_by",
            "generated_at",
            "approved_by",
            "approved_at",
            "approver_comments",
        ]

    def _as_strings(self, values):
        return {key: str(amount) for key, amount in values.items()}

    def get_allowances(self, obj):
        return self._as_strings(obj.allowances)

    def get_deductions(self, obj):
        return self._as_strings(obj.deductions)


class PayrollGenerateSerializer(serializers.Serializer):
    employee_id = serializers.UUIDField()
    year = serializers.IntegerField(min_value=1)
    month = serializers.IntegerField(min_value=1, max_value=12)


class PayrollBulkGenerateSerializer(serializers.Serializer):
    year = serializers.IntegerField(min_value=1)
    month = serializers.IntegerField(min_value=1, max_value=12)
    department_id = serializers.UUIDField(required=False, allow_null=True)


class PayrollDecisionSerializer(serializers.Serializer):
    comments = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=500)


class PayrollListQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100)
    month = serializers.IntegerField(required=False, min_value=1, max_value=12)
    year = serializers.IntegerField(required=False, min_value=1)
    employee_id = serializers.UUIDField(required=False)
    department_id = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=PayrollRecord.STATUS_CHOICES, required=False)
    search = serializers.CharField(required=False, allow_blank=True)
    payroll_period = serializers.ChoiceField(choices=PAYROLL_PERIODS, required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
