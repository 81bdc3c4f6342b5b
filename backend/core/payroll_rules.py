from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Mapping

import yaml

from backend.core.schema import EmployeeInput, PayrollResult
from backend.core.validation import parse_number

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"

DEFAULT_RATES: dict[str, float] = {
    "social_security": 0.062,
    "medicare": 0.0145,
    "wa_pfml": 0.005794,
    "wa_cares": 0.0058,
    "workers_comp": 0.007963,
}


def _load_deduction_rates() -> dict[str, float]:
    path = CONFIG_DIR / "deduction_rates.yaml"
    if not path.exists():
        return dict(DEFAULT_RATES)
    with path.open("r", encoding="utf-8") as fp:
        loaded = yaml.safe_load(fp) or {}
    rates = dict(DEFAULT_RATES)
    for key, value in (loaded.get("rates") or {}).items():
        if key in rates:
            rates[key] = float(value)
    return rates


DEDUCTION_RATES = _load_deduction_rates()


def _compute(
    hourly_rate: float,
    hours_per_day: float,
    days_per_week: float,
    weeks_per_year: float,
    federal_tax_rate: float,
) -> PayrollResult:
    daily_pay = hourly_rate * hours_per_day
    weekly_pay = daily_pay * days_per_week
    monthly_wage = weekly_pay * weeks_per_year / 12
    annual_pay = weekly_pay * weeks_per_year

    social_security = annual_pay * DEDUCTION_RATES["social_security"]
    medicare = annual_pay * DEDUCTION_RATES["medicare"]
    wa_pfml = annual_pay * DEDUCTION_RATES["wa_pfml"]
    wa_cares = annual_pay * DEDUCTION_RATES["wa_cares"]
    federal_tax = annual_pay * (federal_tax_rate / 100)
    workers_comp = annual_pay * DEDUCTION_RATES["workers_comp"]

    total_deductions = social_security + medicare + wa_pfml + wa_cares + federal_tax + workers_comp
    net_pay = annual_pay - total_deductions

    return PayrollResult(
        daily_pay=daily_pay,
        weekly_pay=weekly_pay,
        monthly_wage=monthly_wage,
        annual_pay=annual_pay,
        gross_annual_pay=annual_pay,
        social_security=social_security,
        medicare=medicare,
        wa_pfml=wa_pfml,
        wa_cares=wa_cares,
        federal_tax=federal_tax,
        workers_comp=workers_comp,
        total_deductions=total_deductions,
        net_pay=net_pay,
        net_take_home_pay=net_pay,
    )


def calculate_payroll(employee: EmployeeInput) -> PayrollResult:
    """Derive wages, statutory deductions and net pay for a validated employee."""

    return _compute(
        employee.hourly_rate,
        employee.hours_per_day,
        employee.days_per_week,
        employee.weeks_per_year,
        employee.federal_tax_rate,
    )


def calculate(values: Mapping[str, Any]) -> PayrollResult | None:
    """Calculate from a raw, possibly partial, camelCase input mapping.

    Returns ``None`` while the input is not yet computable, i.e. when the
    hourly rate or another numeric field is missing or unparseable, or when
    the figures overflow to a non-finite value. An
    explicit hourly rate of zero still produces a (zero-valued) result.
    """

    hourly_rate = parse_number(values.get("hourlyRate"))
    if hourly_rate is None:
        return None

    rest = [
        parse_number(values.get(field))
        for field in ("hoursPerDay", "daysPerWeek", "weeksPerYear", "federalTaxRate")
    ]
    if any(value is None for value in rest):
        return None
    hours_per_day, days_per_week, weeks_per_year, federal_tax_rate = rest
    result = _compute(hourly_rate, hours_per_day, days_per_week, weeks_per_year, federal_tax_rate)
    if not all(math.isfinite(value) for value in result.model_dump().values()):
        return None
    return result
