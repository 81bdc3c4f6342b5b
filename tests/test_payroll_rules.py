import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from backend.core.payroll_rules import DEDUCTION_RATES, calculate, calculate_payroll
from backend.core.validation import validate_employee

EXAMPLE = {
    "employeeName": "Jane Doe",
    "employeeId": "E-100",
    "department": "Engineering",
    "hourlyRate": "20",
    "hoursPerDay": "8",
    "daysPerWeek": "5",
    "weeksPerYear": "52",
    "federalTaxRate": "12",
}

DEDUCTION_PARTS = ("social_security", "medicare", "wa_pfml", "wa_cares", "federal_tax", "workers_comp")


def test_example_employee_figures():
    result = calculate_payroll(validate_employee(EXAMPLE))

    assert result.daily_pay == pytest.approx(160)
    assert result.weekly_pay == pytest.approx(800)
    assert result.annual_pay == pytest.approx(41600)
    assert result.gross_annual_pay == result.annual_pay
    assert result.monthly_wage == pytest.approx(3466.67, abs=0.01)
    assert result.social_security == pytest.approx(2579.20, abs=0.01)
    assert result.medicare == pytest.approx(603.20, abs=0.01)
    assert result.wa_pfml == pytest.approx(241.03, abs=0.01)
    assert result.wa_cares == pytest.approx(241.28, abs=0.01)
    assert result.federal_tax == pytest.approx(4992.00, abs=0.01)
    assert result.workers_comp == pytest.approx(331.27, abs=0.01)
    assert result.total_deductions == pytest.approx(8987.97, abs=0.01)
    assert result.net_pay == pytest.approx(32612.03, abs=0.01)
    assert result.net_take_home_pay == result.net_pay


@pytest.mark.parametrize(
    "rate, hours, days, weeks, tax",
    [
        (20, 8, 5, 52, 12),
        (0.01, 0.5, 1, 1, 0),
        (87.35, 24, 7, 52, 50),
        (15.75, 7.5, 4, 48, 22.5),
    ],
)
def test_deductions_and_net_pay_are_consistent(rate, hours, days, weeks, tax):
    values = {
        "hourlyRate": rate,
        "hoursPerDay": hours,
        "daysPerWeek": days,
        "weeksPerYear": weeks,
        "federalTaxRate": tax,
    }
    result = calculate(values)
    assert result is not None

    parts = sum(getattr(result, name) for name in DEDUCTION_PARTS)
    assert result.total_deductions == pytest.approx(parts)
    assert result.net_pay + result.total_deductions == pytest.approx(result.annual_pay)


def test_calculation_is_deterministic():
    first = calculate(EXAMPLE)
    second = calculate(dict(EXAMPLE))
    assert first is not None
    assert first.model_dump_json() == second.model_dump_json()


def test_payload_uses_camel_case_keys():
    payload = calculate(EXAMPLE).to_payload()
    assert set(payload) == {
        "dailyPay",
        "weeklyPay",
        "monthlyWage",
        "annualPay",
        "grossAnnualPay",
        "socialSecurity",
        "medicare",
        "waPfml",
        "waCares",
        "federalTax",
        "workersComp",
        "totalDeductions",
        "netPay",
        "netTakeHomePay",
    }


@pytest.mark.parametrize("hourly_rate", [None, "", "abc", "nan"])
def test_missing_hourly_rate_is_not_computable(hourly_rate):
    values = dict(EXAMPLE, hourlyRate=hourly_rate)
    assert calculate(values) is None


def test_missing_other_numeric_field_is_not_computable():
    values = dict(EXAMPLE)
    del values["weeksPerYear"]
    assert calculate(values) is None


def test_zero_hourly_rate_is_a_zero_result_not_missing():
    result = calculate(dict(EXAMPLE, hourlyRate="0"))
    assert result is not None
    assert result.annual_pay == 0
    assert result.net_pay == 0


def test_rates_loaded_from_config():
    assert DEDUCTION_RATES == {
        "social_security": 0.062,
        "medicare": 0.0145,
        "wa_pfml": 0.005794,
        "wa_cares": 0.0058,
        "workers_comp": 0.007963,
    }


def test_overflowing_figures_are_not_computable():
    values = dict(EXAMPLE, hourlyRate="1e306", hoursPerDay="24", daysPerWeek="7")
    assert calculate(values) is None
