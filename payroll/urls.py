from django.urls import path

from .views import (
    PayrollApproveView,
    PayrollBulkGenerateView,
    PayrollGenerateView,
    PayrollRecordDetailView,
    PayrollRecordListView,
    PayrollRejectView,
    PayrollSummaryView,
)

urlpatterns = [
    path("", PayrollRecordListView.as_view(), name="payroll-list"),
    path("summary/", PayrollSummaryView.as_view(), name="payroll-summary"),
    path("generate/", PayrollGenerateView.as_view(), name="payroll-generate"),
    path("generate/bulk/", PayrollBulkGenerateView.as_view(), name="payroll-generate-bulk"),
    path("<uuid:record_id>/", PayrollRecordDetailView.as_view(), name="payroll-detail"),
    path("<uuid:record_id>/approve/", PayrollApproveView.as_view(), name="payroll-approve"),
    path("<uuid:record_id>/reject/", PayrollRejectView.as_view(), name="payroll-reject"),
]
