"""Infrastructure layer for payroll persistence."""
from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Protocol

from backend.core.schema import EMPLOYEE_FIELDS, NUMERIC_FIELDS, PayrollResult
from backend.core.validation import parse_number
from backend.domain import PayrollState

from .sheets import GoogleSheetsClient

logger = logging.getLogger(__name__)

HEADER_RANGE = "A1:U1"
ROW_RANGE = "A2:U2"
INPUT_RANGE = "A2:H2"
RESULT_RANGE = "I2:U2"

HEADER_ROW = [
    "Employee Name",
    "Employee ID",
    "Department",
    "Hourly Rate",
    "Hours per Day",
    "Days per Week",
    "Weeks per Year",
    "Federal Tax Rate (%)",
    "Daily Pay",
    "Weekly Pay",
    "Monthly Wage",
    "Annual Pay",
    "Social Security",
    "Medicare",
    "WA PFML",
    "WA Cares",
    "Federal Tax",
    "Workers Comp",
    "Total Deductions",
    "Net Pay",
    "Net Take-Home Pay",
]

# Columns I..U; gross annual pay is not stored separately.
RESULT_COLUMNS = [
    "daily_pay",
    "weekly_pay",
    "monthly_wage",
    "annual_pay",
    "social_security",
    "medicare",
    "wa_pfml",
    "wa_cares",
    "federal_tax",
    "workers_comp",
    "total_deductions",
    "net_pay",
    "net_take_home_pay",
]


class PayrollStore(Protocol):
    """Persistence contract for the canonical employee input and its result."""

    def is_ready(self) -> bool: ...

    def initialise(self) -> None: ...

    def load_input(self) -> dict[str, Any]: ...

    def load_result(self) -> PayrollResult | None: ...

    def save(self, values: Mapping[str, Any], result: PayrollResult | None) -> None:
        """Replace input and result together; a failed write leaves both untouched."""
        ...

    def save_result(self, result: PayrollResult | None) -> None: ...

    def reset(self) -> None: ...

    def close(self) -> None: ...


class InMemoryPayrollStore:
    """Process-local store used in demo mode and tests."""

    def __init__(self) -> None:
        self._state = PayrollState()

    def is_ready(self) -> bool:
        return True

    def initialise(self) -> None:
        return None

    def load_input(self) -> dict[str, Any]:
        return dict(self._state.employee)

    def load_result(self) -> PayrollResult | None:
        return self._state.result

    def save(self, values: Mapping[str, Any], result: PayrollResult | None) -> None:
        self._state = PayrollState(employee=dict(values), result=result)

    def save_result(self, result: PayrollResult | None) -> None:
        self._state.result = result

    def reset(self) -> None:
        self._state = PayrollState()

    def close(self) -> None:
        return None


class SheetsPayrollStore:
    """Store mirrored into fixed cells of a Google spreadsheet."""

    def __init__(self, client: GoogleSheetsClient, is_authenticated: Callable[[], bool]) -> None:
        self._client = client
        self._is_authenticated = is_authenticated

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _cell_value(field: str, value: Any) -> Any:
        if field in NUMERIC_FIELDS:
            number = parse_number(value)
            if number is not None:
                return number
        return "" if value is None else value

    def _first_row(self, a1_range: str) -> list[Any]:
        rows = self._client.read_range(a1_range)
        return rows[0] if rows else []

    @staticmethod
    def _result_row(result: PayrollResult | None) -> list[Any]:
        if result is None:
            return [""] * len(RESULT_COLUMNS)
        return [getattr(result, name) for name in RESULT_COLUMNS]

    # ------------------------------------------------------------------
    # store contract
    # ------------------------------------------------------------------
    def is_ready(self) -> bool:
        return self._is_authenticated()

    def initialise(self) -> None:
        if not self._client.spreadsheet_id:
            logger.warning("GOOGLE_SPREADSHEET_ID not set; spreadsheet initialisation skipped")
            return
        title = self._client.get_title()
        logger.info("Connected to Google Sheets: %s", title)
        self._client.write_range(HEADER_RANGE, [HEADER_ROW])

    def load_input(self) -> dict[str, Any]:
        row = self._first_row(INPUT_RANGE)
        values: dict[str, Any] = {}
        for index, field in enumerate(EMPLOYEE_FIELDS):
            if index < len(row) and row[index] != "":
                values[field] = row[index]
        return values

    def load_result(self) -> PayrollResult | None:
        row = self._first_row(RESULT_RANGE)
        numbers: dict[str, float] = {}
        for index, name in enumerate(RESULT_COLUMNS):
            number = parse_number(row[index]) if index < len(row) else None
            if number is None:
                return None
            numbers[name] = number
        return PayrollResult(gross_annual_pay=numbers["annual_pay"], **numbers)

    def save(self, values: Mapping[str, Any], result: PayrollResult | None) -> None:
        # Input and result share row 2, so one values.update replaces both.
        row = [self._cell_value(field, values.get(field)) for field in EMPLOYEE_FIELDS]
        self._client.write_range(ROW_RANGE, [row + self._result_row(result)])
        logger.info("Employee data written to Google Sheets")

    def save_result(self, result: PayrollResult | None) -> None:
        self._client.write_range(RESULT_RANGE, [self._result_row(result)])

    def reset(self) -> None:
        self.save({}, None)

    def close(self) -> None:
        self._client.close()
