import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from backend.core.validation import (
    ValidationError,
    coerce_field_value,
    humanize_field,
    validate_employee,
    validate_field_name,
)

VALID = {
    "employeeName": "Jane Doe",
    "employeeId": "E-100",
    "department": "Engineering",
    "hourlyRate": "20",
    "hoursPerDay": "8",
    "daysPerWeek": "5",
    "weeksPerYear": "52",
    "federalTaxRate": "12",
}


def test_valid_form_becomes_employee_input():
    employee = validate_employee(VALID)
    assert employee.employee_name == "Jane Doe"
    assert employee.hourly_rate == 20.0
    assert employee.to_payload()["federalTaxRate"] == 12.0


def test_json_numbers_are_accepted():
    employee = validate_employee(dict(VALID, hourlyRate=22.5, hoursPerDay=8))
    assert employee.hourly_rate == 22.5


def test_upper_bounds_are_inclusive():
    employee = validate_employee(
        dict(VALID, hoursPerDay="24", daysPerWeek="7", weeksPerYear="52", federalTaxRate="50")
    )
    assert (employee.hours_per_day, employee.days_per_week, employee.weeks_per_year, employee.federal_tax_rate) == (
        24,
        7,
        52,
        50,
    )


@pytest.mark.parametrize(
    "field, value, message",
    [
        ("hoursPerDay", "25", "Hours per day cannot exceed 24"),
        ("daysPerWeek", "8", "Days per week cannot exceed 7"),
        ("weeksPerYear", "53", "Weeks per year cannot exceed 52"),
        ("federalTaxRate", "51", "Federal tax rate seems too high (>50%)"),
    ],
)
def test_out_of_bounds_values_are_rejected(field, value, message):
    with pytest.raises(ValidationError) as excinfo:
        validate_employee(dict(VALID, **{field: value}))
    assert excinfo.value.message == message
    assert excinfo.value.field == field


@pytest.mark.parametrize("field", list(VALID))
@pytest.mark.parametrize("blank", ["", "   ", None])
def test_blank_required_field_is_rejected(field, blank):
    with pytest.raises(ValidationError) as excinfo:
        validate_employee(dict(VALID, **{field: blank}))
    assert excinfo.value.field == field
    assert excinfo.value.message == f"Please fill in the {humanize_field(field)}"


@pytest.mark.parametrize("value", ["-1", "abc", "nan", "inf"])
def test_invalid_number_is_rejected(value):
    with pytest.raises(ValidationError) as excinfo:
        validate_employee(dict(VALID, hourlyRate=value))
    assert str(excinfo.value) == "Please enter a valid hourly rate"


def test_first_violation_wins():
    with pytest.raises(ValidationError) as excinfo:
        validate_employee(dict(VALID, department="", hourlyRate="abc", hoursPerDay="30"))
    assert excinfo.value.field == "department"


def test_humanize_field_splits_camel_case():
    assert humanize_field("employeeName") == "employee name"
    assert humanize_field("federalTaxRate") == "federal tax rate"


def test_unknown_update_field_is_rejected():
    assert validate_field_name("hourlyRate") == "hourlyRate"
    with pytest.raises(ValidationError):
        validate_field_name("salary")


def test_coerce_field_value_only_touches_numeric_fields():
    assert coerce_field_value("hourlyRate", "21.5") == 21.5
    assert coerce_field_value("hourlyRate", "") == ""
    assert coerce_field_value("employeeId", "1001") == "1001"


@pytest.mark.parametrize(
    "overrides",
    [
        {"hourlyRate": "1e306", "hoursPerDay": "24", "daysPerWeek": "7"},
        {"hourlyRate": "1e307", "hoursPerDay": "24", "daysPerWeek": "0"},
    ],
)
def test_hourly_rate_that_overflows_pay_is_rejected(overrides):
    with pytest.raises(ValidationError) as excinfo:
        validate_employee(dict(VALID, **overrides))
    assert excinfo.value.field == "hourlyRate"
    assert excinfo.value.message == "Hourly rate is too large to calculate payroll"


def test_large_but_finite_hourly_rate_is_accepted():
    employee = validate_employee(dict(VALID, hourlyRate="1e12"))
    assert employee.hourly_rate == 1e12
