import math

from django.conf import settings
from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import permissions, status
from rest_framework.views import APIView

from accounts.permissions import HasRequiredPermissions
from accounts.utils import api_response

from .serializers import (
    PayrollBulkGenerateSerializer,
    PayrollDecisionSerializer,
    PayrollGenerateSerializer,
    PayrollListQuerySerializer,
    PayrollRecordDetailSerializer,
    PayrollRecordSummarySerializer,
)
from .services import (
    approve_payroll,
    filter_payroll_records,
    generate_bulk_payroll,
    generate_payroll,
    get_payroll_record,
    payroll_summary,
    reject_payroll,
)

VIEW_PERMISSION = "payroll.view_payrollrecord"
GENERATE_PERMISSION = "payroll.generate_payrollrecord"
APPROVE_PERMISSION = "payroll.approve_payrollrecord"


class PayrollAPIView(APIView):
    permission_classes = [permissions.IsAuthenticated, HasRequiredPermissions]
    required_permissions = [VIEW_PERMISSION]


class PayrollRecordListView(PayrollAPIView):
    def get(self, request):
        query = PayrollListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        qs = filter_payroll_records(params)
        page = params["page"]
        limit = params.get("limit") or settings.PAYROLL_PAGE_SIZE
        total = qs.count()
        start = (page - 1) * limit
        rows = qs[start:start + limit]

        serializer = PayrollRecordSummarySerializer(rows, many=True)
        return api_response(
            success=True,
            message="Payroll records retrieved.",
            data={
                "results": serializer.data,
                "pagination": {
                    "page": page,
                    "limit": limit,
                    "total": total,
                    "pages": math.ceil(total / limit) if total else 0,
                },
            },
        )


class PayrollSummaryView(PayrollAPIView):
    def get(self, request):
        summary = payroll_summary(
            month=request.query_params.get("month"),
            year=request.query_params.get("year"),
        )
        data = {key: str(value) if key.startswith(("total_", "average_")) else value for key, value in summary.items()}
        return api_response(success=True, message="Payroll summary retrieved.", data=data)


class PayrollRecordDetailView(PayrollAPIView):
    def get(self, request, record_id):
        record = get_payroll_record(record_id)
        serializer = PayrollRecordDetailSerializer(record)
        return api_response(success=True, message="Payslip retrieved.", data=serializer.data)


class PayrollGenerateView(PayrollAPIView):
    required_permissions = [GENERATE_PERMISSION]

    def post(self, request):
        serializer = PayrollGenerateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        record = generate_payroll(
            data["employee_id"],
            data["month"],
            data["year"],
            generated_by=request.user,
        )
        return api_response(
            success=True,
            message="Payroll generated.",
            data=PayrollRecordDetailSerializer(record).data,
            status=status.HTTP_201_CREATED,
        )


@method_decorator(ratelimit(key="user_or_ip", rate=settings.PAYROLL_BULK_RATE, method="POST", block=True), name="dispatch")
class PayrollBulkGenerateView(PayrollAPIView):
    required_permissions = [GENERATE_PERMISSION]

    def post(self, request):
        serializer = PayrollBulkGenerateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = generate_bulk_payroll(
            data["month"],
            data["year"],
            department_id=data.get("department_id"),
            generated_by=request.user,
        )
        successful = [
            {
                "employee_id": str(outcome.employee.id),
                "employee_number": outcome.employee.employee_id,
                "payroll_id": str(outcome.record.id),
                "net_pay": str(outcome.record.net_pay),
            }
            for outcome in result.successful
        ]
        failed = [
            {
                "employee_id": str(outcome.employee.id),
                "employee_number": outcome.employee.employee_id,
                "code": outcome.error.get_codes(),
                "reason": str(outcome.error.detail),
            }
            for outcome in result.failed
        ]
        return api_response(
            success=True,
            message=f"Payroll generated for {len(successful)} employee(s); {len(failed)} failed.",
            data={"successful": successful, "failed": failed},
        )


class PayrollApproveView(PayrollAPIView):
    required_permissions = [APPROVE_PERMISSION]

    def put(self, request, record_id):
        serializer = PayrollDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = approve_payroll(record_id, approver=request.user, comments=serializer.validated_data.get("comments"))
        return api_response(
            success=True,
            message="Payroll approved.",
            data=PayrollRecordDetailSerializer(record).data,
        )


class PayrollRejectView(PayrollAPIView):
    required_permissions = [APPROVE_PERMISSION]

    def put(self, request, record_id):
        serializer = PayrollDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = reject_payroll(record_id, approver=request.user, comments=serializer.validated_data.get("comments"))
        return api_response(
            success=True,
            message="Payroll rejected.",
            data=PayrollRecordDetailSerializer(record).data,
        )
