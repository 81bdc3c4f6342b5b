from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TEXT_FIELDS = ("employeeName", "employeeId", "department")
NUMERIC_FIELDS = ("hourlyRate", "hoursPerDay", "daysPerWeek", "weeksPerYear", "federalTaxRate")
EMPLOYEE_FIELDS = TEXT_FIELDS + NUMERIC_FIELDS


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


class EmployeeInput(CamelModel):
    employee_name: str
    employee_id: str
    department: str
    hourly_rate: float = Field(ge=0)
    hours_per_day: float = Field(ge=0, le=24)
    days_per_week: float = Field(ge=0, le=7)
    weeks_per_year: float = Field(ge=0, le=52)
    federal_tax_rate: float = Field(ge=0, le=50)


class PayrollResult(CamelModel):
    daily_pay: float = 0.0
    weekly_pay: float = 0.0
    monthly_wage: float = 0.0
    annual_pay: float = 0.0
    gross_annual_pay: float = 0.0
    social_security: float = 0.0
    medicare: float = 0.0
    wa_pfml: float = 0.0
    wa_cares: float = 0.0
    federal_tax: float = 0.0
    workers_comp: float = 0.0
    total_deductions: float = 0.0
    net_pay: float = 0.0
    net_take_home_pay: float = 0.0


class FieldUpdate(BaseModel):
    field: str
    value: str | float | int | None = None
