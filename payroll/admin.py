from django.contrib import admin

from .models import PayrollRecord


@admin.register(PayrollRecord)
class PayrollRecordAdmin(admin.ModelAdmin):
    list_display = ("employee", "month", "year", "gross_pay", "net_pay", "status", "generated_at")
    list_filter = ("status", "year", "month")
    search_fields = ("employee__first_name", "employee__last_name", "employee__employee_id")
    readonly_fields = [field.name for field in PayrollRecord._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
