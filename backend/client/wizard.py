"""Three-step payroll wizard: capture input, show wages, show deductions."""
from __future__ import annotations

import logging
import re
import time
from enum import IntEnum
from typing import Any, Callable, Mapping

from backend.core.schema import PayrollResult
from backend.core.validation import validate_employee

from .api import NetworkError, PayrollApiClient, PayrollApiError, parse_result

logger = logging.getLogger(__name__)

# Seconds between background refreshes of the latest result.
REFRESH_INTERVAL = 3.0
# Seconds an edited field must stay quiet before it is sent.
EDIT_DEBOUNCE = 1.0

WAGE_LINES = [
    ("Daily Pay", "daily_pay"),
    ("Weekly Pay", "weekly_pay"),
    ("Monthly Wage", "monthly_wage"),
    ("Annual Pay", "annual_pay"),
]

DEDUCTION_LINES = [
    ("Gross Annual Pay", "gross_annual_pay"),
    ("Social Security", "social_security"),
    ("Medicare", "medicare"),
    ("WA PFML", "wa_pfml"),
    ("WA Cares", "wa_cares"),
    ("Federal Tax", "federal_tax"),
    ("Workers Comp", "workers_comp"),
    ("Total Deductions", "total_deductions"),
    ("Net Pay", "net_pay"),
    ("Net Take-Home Pay", "net_take_home_pay"),
]

_LOCATION = re.compile(r"^#?step(\d+)$")


class Step(IntEnum):
    INPUT = 1
    WAGES = 2
    DEDUCTIONS = 3


class StepLocked(ValueError):
    """Raised when navigating past step 1 before calculations are available."""


def format_currency(amount: float | None) -> str:
    value = amount or 0.0
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


class PayrollWizard:
    """Client-side state machine mirroring the three form steps.

    The current step is mirrored into a ``#stepN`` location with a
    back/forward history. Leaving step 1 requires a result with positive
    annual pay.
    """

    def __init__(
        self,
        api: PayrollApiClient,
        *,
        max_attempts: int = 30,
        interval: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        debounce: float = EDIT_DEBOUNCE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._api = api
        self._max_attempts = max_attempts
        self._interval = interval
        self._sleep = sleep
        self._debounce = debounce
        self._clock = clock
        self._pending: dict[str, Any] = {}
        self._last_edit = 0.0
        self.employee: dict[str, Any] = {}
        self.calculations: PayrollResult | None = None
        self._history: list[Step] = [Step.INPUT]
        self._cursor = 0

    @property
    def step(self) -> Step:
        return self._history[self._cursor]

    @property
    def location(self) -> str:
        return f"#step{int(self.step)}"

    # ------------------------------------------------------------------
    # navigation
    # ------------------------------------------------------------------
    def _check_unlocked(self, step: Step) -> None:
        if step is not Step.INPUT and (self.calculations is None or self.calculations.annual_pay <= 0):
            raise StepLocked("Submit employee details before viewing results")

    def go_to(self, step: int) -> Step:
        target = Step(step)
        self._check_unlocked(target)
        if target is self.step:
            return target
        del self._history[self._cursor + 1 :]
        self._history.append(target)
        self._cursor += 1
        return target

    def back(self) -> Step:
        if self._cursor > 0:
            self._cursor -= 1
        return self.step

    def forward(self) -> Step:
        if self._cursor < len(self._history) - 1:
            self._cursor += 1
        return self.step

    def restore(self, location: str) -> Step:
        """Follow a ``#stepN`` location; unknown or locked locations are ignored."""

        match = _LOCATION.match(location.strip())
        if not match:
            return self.step
        number = int(match.group(1))
        if number not in {step.value for step in Step}:
            return self.step
        try:
            return self.go_to(number)
        except StepLocked:
            return self.step

    # ------------------------------------------------------------------
    # data flow
    # ------------------------------------------------------------------
    def submit(self, raw: Mapping[str, Any]) -> PayrollResult:
        validate_employee(raw)
        self.employee = dict(raw)
        self._api.create_employee(self.employee)
        self.calculations = self._api.wait_for_calculations(
            max_attempts=self._max_attempts,
            interval=self._interval,
            sleep=self._sleep,
        )
        self.go_to(Step.WAGES)
        return self.calculations

    @property
    def pending_edits(self) -> dict[str, Any]:
        return dict(self._pending)

    def edit(self, field: str, value: Any) -> None:
        """Record a live edit; it is sent by :meth:`flush` once typing settles."""

        self.employee[field] = value
        self._pending[field] = value
        self._last_edit = self._clock()

    def flush(self, *, force: bool = False) -> list[str]:
        """Send pending edits, latest value per field, once they are quiet for the debounce delay.

        Write failures propagate; fields not yet sent stay pending.
        """

        if not self._pending:
            return []
        if not force and self._clock() - self._last_edit < self._debounce:
            return []
        sent: list[str] = []
        for field, value in list(self._pending.items()):
            self._api.update_field(field, value)
            del self._pending[field]
            sent.append(field)
        return sent

    def refresh(self) -> PayrollResult | None:
        """One background poll of the latest result; read failures wait for the next tick."""

        try:
            result = self._api.latest_calculations()
        except (NetworkError, PayrollApiError) as exc:
            logger.warning("Real-time refresh failed: %s", exc)
            return self.calculations
        if result is not None:
            self.calculations = result
        return self.calculations

    def apply_update(self, payload: Mapping[str, Any]) -> None:
        """Apply a pushed ``dataUpdated``/``calculationComplete`` payload."""

        result = parse_result(dict(payload))
        if result is not None:
            self.calculations = result

    # ------------------------------------------------------------------
    # views
    # ------------------------------------------------------------------
    def _lines(self, lines: list[tuple[str, str]]) -> dict[str, str]:
        result = self.calculations
        return {label: format_currency(getattr(result, name) if result else None) for label, name in lines}

    def wage_view(self) -> dict[str, str]:
        return self._lines(WAGE_LINES)

    def deduction_view(self) -> dict[str, str]:
        return self._lines(DEDUCTION_LINES)

    def summary(self) -> str:
        if not self.employee.get("employeeName"):
            return ""
        return f"Employee: {self.employee['employeeName']} (ID: {self.employee.get('employeeId', '')})"
