from django.contrib import admin

from .models import LeaveRequest


@admin.register(LeaveRequest)
class LeaveRequestAdmin(admin.ModelAdmin):
    list_display = ("employee", "leave_type", "start_date", "end_date", "number_of_days", "status")
    list_filter = ("status", "leave_type")
    search_fields = ("employee__first_name", "employee__last_name", "employee__employee_id")
    readonly_fields = ("decided_by", "decided_at", "created_at", "updated_at")
