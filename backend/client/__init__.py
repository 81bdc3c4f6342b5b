"""Python client for the payroll calculator API."""

from .api import CalculationsNotReady, NetworkError, PayrollApiClient, PayrollApiError, parse_result
from .wizard import PayrollWizard, Step, StepLocked, format_currency

__all__ = [
    "CalculationsNotReady",
    "NetworkError",
    "PayrollApiClient",
    "PayrollApiError",
    "PayrollWizard",
    "Step",
    "StepLocked",
    "format_currency",
    "parse_result",
]
