from django.contrib import admin
from .models import Department, Employee


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'code']
    readonly_fields = ['id', 'created_at', 'updated_at']


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ['employee_id', 'first_name', 'last_name', 'department', 'employment_status', 'basic_salary']
    list_filter = ['employment_status', 'employment_type', 'department']
    search_fields = ['employee_id', 'first_name', 'last_name', 'email']
    readonly_fields = ['id', 'created_at', 'updated_at']

    fieldsets = (
        ('Identity', {
            'fields': ('id', 'employee_id', 'first_name', 'middle_name', 'last_name', 'email')
        }),
        ('Employment', {
            'fields': ('job_title', 'department', 'employment_type', 'employment_status',
                       'hire_date', 'termination_date')
        }),
        ('Salary', {
            'fields': ('basic_salary', 'currency', 'house_allowance', 'transport_allowance',
                       'medical_allowance', 'food_allowance', 'other_allowance',
                       'professional_fee_deduction', 'other_deduction')
        }),
        ('Leave Entitlement', {
            'fields': ('annual_leave_entitlement', 'sick_leave_entitlement', 'casual_leave_entitlement',
                       'maternity_leave_entitlement', 'paternity_leave_entitlement')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
