"""Employee directory lookups used by payroll."""
from .models import Employee


def get_employee(employee_id):
    """Return the employee with its department loaded; raises Employee.DoesNotExist."""
    return Employee.objects.select_related('department').get(id=employee_id)


def active_employees(department_id=None):
    qs = Employee.objects.filter(employment_status=Employee.STATUS_ACTIVE).select_related('department')
    if department_id:
        qs = qs.filter(department_id=department_id)
    return qs.order_by('last_name', 'first_name', 'employee_id')
