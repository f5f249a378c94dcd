from rest_framework import status
from rest_framework.exceptions import APIException


class PayrollError(APIException):
    """Base class for payroll failures surfaced to API clients as 4xx responses."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Payroll request could not be processed."
    default_code = "payroll_error"


class NotFoundError(PayrollError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Requested resource was not found."
    default_code = "not_found"


class DuplicateRecordError(PayrollError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Payroll for this month already exists."
    default_code = "duplicate_record"


class InvalidConfigurationError(PayrollError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Employee salary configuration is invalid."
    default_code = "invalid_configuration"


class InvalidTransitionError(PayrollError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Payroll has already been processed."
    default_code = "invalid_transition"


class CalculationError(PayrollError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Payroll could not be calculated."
    default_code = "calculation_error"
