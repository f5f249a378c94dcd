from decimal import Decimal
import uuid

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q


class Department(models.Model):
    """Department within the company"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255, unique=True)
    code = models.CharField(max_length=20, unique=True, help_text='Department code (e.g., HR, IT, FIN)')
    description = models.TextField(blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'departments'
        verbose_name = 'Department'
        verbose_name_plural = 'Departments'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.code})"


class Employee(models.Model):
    """Employee master record, including the salary configuration used by payroll"""

    STATUS_ACTIVE = 'ACTIVE'

    EMPLOYMENT_STATUS_CHOICES = [
        ('ACTIVE', 'Active'),
        ('INACTIVE', 'Inactive'),
        ('ON_LEAVE', 'On Leave'),
        ('TERMINATED', 'Terminated'),
    ]

    EMPLOYMENT_TYPE_CHOICES = [
        ('FULL_TIME', 'Full Time'),
        ('PART_TIME', 'Part Time'),
        ('CONTRACT', 'Contract'),
        ('INTERN', 'Intern'),
        ('TEMPORARY', 'Temporary'),
    ]

    MONEY_VALIDATORS = [MinValueValidator(Decimal('0.00'))]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    employee_id = models.CharField(max_length=50, unique=True, help_text='Company-assigned employee ID')
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    middle_name = models.CharField(max_length=100, blank=True, null=True)
    email = models.EmailField(unique=True, help_text='Work email')

    # Employment Details
    job_title = models.CharField(max_length=255, blank=True, default='')
    department = models.ForeignKey(Department, on_delete=models.SET_NULL, null=True, blank=True, related_name='employees')
    employment_type = models.CharField(max_length=20, choices=EMPLOYMENT_TYPE_CHOICES, default='FULL_TIME')
    employment_status = models.CharField(max_length=20, choices=EMPLOYMENT_STATUS_CHOICES, default=STATUS_ACTIVE)
    hire_date = models.DateField()
    termination_date = models.DateField(blank=True, null=True)

    # Salary configuration (monthly amounts); null basic salary means payroll is not configured
    basic_salary = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True, validators=MONEY_VALIDATORS)
    house_allowance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), validators=MONEY_VALIDATORS)
    transport_allowance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), validators=MONEY_VALIDATORS)
    medical_allowance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), validators=MONEY_VALIDATORS)
    food_allowance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), validators=MONEY_VALIDATORS)
    other_allowance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), validators=MONEY_VALIDATORS)
    professional_fee_deduction = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), validators=MONEY_VALIDATORS)
    other_deduction = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), validators=MONEY_VALIDATORS)
    currency = models.CharField(max_length=10, default='USD')

    # Leave entitlement (days per year)
    annual_leave_entitlement = models.PositiveIntegerField(default=20)
    sick_leave_entitlement = models.PositiveIntegerField(default=10)
    casual_leave_entitlement = models.PositiveIntegerField(default=5)
    maternity_leave_entitlement = models.PositiveIntegerField(default=90)
    paternity_leave_entitlement = models.PositiveIntegerField(default=7)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'employees'
        verbose_name = 'Employee'
        verbose_name_plural = 'Employees'
        indexes = [
            models.Index(fields=['employment_status'], name='employees_status_idx'),
            models.Index(fields=['department', 'employment_status'], name='employees_dept_status_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(basic_salary__isnull=True) | Q(basic_salary__gte=0),
                name='employee_basic_salary_non_negative',
            ),
        ]
        ordering = ['last_name', 'first_name']

    def __str__(self):
        return f"{self.first_name} {self.last_name} ({self.employee_id})"

    @property
    def full_name(self):
        if self.middle_name:
            return f"{self.first_name} {self.middle_name} {self.last_name}"
        return f"{self.first_name} {self.last_name}"

    @property
    def is_active(self):
        return self.employment_status == self.STATUS_ACTIVE

    @property
    def allowances(self):
        return {
            'house': self.house_allowance,
            'transport': self.transport_allowance,
            'medical': self.medical_allowance,
            'food': self.food_allowance,
            'other': self.other_allowance,
        }

    @property
    def deduction_config(self):
        return {
            'professional': self.professional_fee_deduction,
            'other': self.other_deduction,
        }

    @property
    def leave_entitlement(self):
        return {
            'annual': self.annual_leave_entitlement,
            'sick': self.sick_leave_entitlement,
            'casual': self.casual_leave_entitlement,
            'maternity': self.maternity_leave_entitlement,
            'paternity': self.paternity_leave_entitlement,
        }
