from django.contrib import admin

from .models import AttendanceRecord


@admin.register(AttendanceRecord)
class AttendanceRecordAdmin(admin.ModelAdmin):
    list_display = ("employee", "date", "check_in_at", "check_out_at", "hours_worked", "status")
    list_filter = ("status", "date")
    search_fields = ("employee__first_name", "employee__last_name", "employee__employee_id")
    readonly_fields = ("hours_worked", "created_at", "updated_at")
