from __future__ import annotations

import math
import re
from typing import Any, Mapping

from backend.core.errors import PayrollError
from backend.core.schema import EMPLOYEE_FIELDS, NUMERIC_FIELDS, EmployeeInput

UPPER_BOUNDS: dict[str, tuple[float, str]] = {
    "hoursPerDay": (24, "Hours per day cannot exceed 24"),
    "daysPerWeek": (7, "Days per week cannot exceed 7"),
    "weeksPerYear": (52, "Weeks per year cannot exceed 52"),
    "federalTaxRate": (50, "Federal tax rate seems too high (>50%)"),
}


class ValidationError(PayrollError):
    """Raised when domain validation fails."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


def humanize_field(field: str) -> str:
    """Split a camelCase field name into lower-case words."""

    return re.sub(r"([A-Z])", r" \1", field).strip().lower()


def is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def parse_number(value: Any) -> float | None:
    """Parse a submitted numeric value, returning ``None`` when it is not a finite number."""

    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def validate_employee(raw: Mapping[str, Any]) -> EmployeeInput:
    """Validate a submitted employee form, stopping at the first bad field."""

    for field in EMPLOYEE_FIELDS:
        if is_blank(raw.get(field)):
            raise ValidationError(f"Please fill in the {humanize_field(field)}", field)

    numbers: dict[str, float] = {}
    for field in NUMERIC_FIELDS:
        number = parse_number(raw.get(field))
        if number is None or number < 0:
            raise ValidationError(f"Please enter a valid {humanize_field(field)}", field)
        numbers[field] = number

    for field, (limit, message) in UPPER_BOUNDS.items():
        if numbers[field] > limit:
            raise ValidationError(message, field)

    # The hourly rate is unbounded; every derived figure stays finite once these products do.
    daily = numbers["hourlyRate"] * numbers["hoursPerDay"]
    weekly = daily * numbers["daysPerWeek"]
    if not all(math.isfinite(value) for value in (daily, weekly, weekly * numbers["weeksPerYear"])):
        raise ValidationError("Hourly rate is too large to calculate payroll", "hourlyRate")

    return EmployeeInput(
        employee_name=str(raw["employeeName"]).strip(),
        employee_id=str(raw["employeeId"]).strip(),
        department=str(raw["department"]).strip(),
        hourly_rate=numbers["hourlyRate"],
        hours_per_day=numbers["hoursPerDay"],
        days_per_week=numbers["daysPerWeek"],
        weeks_per_year=numbers["weeksPerYear"],
        federal_tax_rate=numbers["federalTaxRate"],
    )


def validate_field_name(field: str) -> str:
    if field not in EMPLOYEE_FIELDS:
        raise ValidationError(f"Unknown field: {field}", field)
    return field


def coerce_field_value(field: str, value: Any) -> Any:
    """Store numeric-looking edits of numeric fields as floats and anything else as given."""

    if field not in NUMERIC_FIELDS:
        return value
    number = parse_number(value)
    return value if number is None else number
