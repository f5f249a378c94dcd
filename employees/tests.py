from datetime import date
from decimal import Decimal
import uuid

from django.db import IntegrityError
from django.test import TestCase

from employees.models import Department, Employee
from employees.services import active_employees, get_employee


class EmployeeDirectoryTests(TestCase):
    def setUp(self):
        self.department = Department.objects.create(name='Finance', code='FIN')
        self.employee = Employee.objects.create(
            employee_id='EMP-001',
            first_name='Jane',
            middle_name='Q',
            last_name='Doe',
            email='jane@example.com',
            hire_date=date(2023, 1, 1),
            department=self.department,
            basic_salary=Decimal('5000.00'),
            house_allowance=Decimal('400.00'),
            professional_fee_deduction=Decimal('25.00'),
        )

    def test_salary_configuration_views(self):
        self.assertEqual(self.employee.full_name, 'Jane Q Doe')
        self.assertEqual(self.employee.allowances['house'], Decimal('400.00'))
        self.assertEqual(self.employee.allowances['food'], Decimal('0.00'))
        self.assertEqual(self.employee.deduction_config, {'professional': Decimal('25.00'), 'other': Decimal('0.00')})
        self.assertEqual(self.employee.leave_entitlement['annual'], 20)

    def test_get_employee(self):
        self.assertEqual(get_employee(self.employee.id), self.employee)
        with self.assertRaises(Employee.DoesNotExist):
            get_employee(uuid.uuid4())

    def test_active_employees_by_department(self):
        Employee.objects.create(
            employee_id='EMP-002',
            first_name='Sam',
            last_name='Roe',
            email='sam@example.com',
            hire_date=date(2023, 1, 1),
            employment_status='TERMINATED',
            department=self.department,
        )
        other = Employee.objects.create(
            employee_id='EMP-003',
            first_name='Ann',
            last_name='Abel',
            email='ann@example.com',
            hire_date=date(2023, 1, 1),
        )
        self.assertEqual(list(active_employees()), [other, self.employee])
        self.assertEqual(list(active_employees(department_id=self.department.id)), [self.employee])

    def test_negative_basic_salary_is_rejected_by_the_database(self):
        with self.assertRaises(IntegrityError):
            Employee.objects.create(
                employee_id='EMP-004',
                first_name='Neg',
                last_name='Ative',
                email='neg@example.com',
                hire_date=date(2023, 1, 1),
                basic_salary=Decimal('-1.00'),
            )
