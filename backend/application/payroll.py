"""Application service coordinating payroll submissions, edits and pushes."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, Mapping
from urllib.parse import quote

from backend.core.errors import AuthError, UpstreamError
from backend.core.payroll_rules import calculate, calculate_payroll
from backend.core.schema import PayrollResult
from backend.core.validation import coerce_field_value, validate_employee, validate_field_name
from backend.infrastructure import PayrollStore

from .auth import AuthProvider
from .broadcast import Broadcaster

logger = logging.getLogger(__name__)

CALCULATION_COMPLETE = "calculationComplete"
DATA_UPDATED = "dataUpdated"
ERROR_EVENT = "error"

Calculator = Callable[[Mapping[str, Any]], PayrollResult | None]


def result_payload(result: PayrollResult | None) -> dict[str, Any]:
    """Wire form of a result; an empty object means not yet computable."""

    return result.to_payload() if result is not None else {}


def _fingerprint(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, sort_keys=True)


class PayrollService:
    """Coordinates payroll use cases over an injected store, auth provider and broadcaster."""

    def __init__(
        self,
        store: PayrollStore,
        auth: AuthProvider,
        broadcaster: Broadcaster,
        *,
        calculator: Calculator = calculate,
    ) -> None:
        self._store = store
        self._auth = auth
        self._broadcaster = broadcaster
        self._calculator = calculator
        self._last_pushed = _fingerprint({})

    @property
    def store(self) -> PayrollStore:
        return self._store

    @property
    def auth(self) -> AuthProvider:
        return self._auth

    @property
    def broadcaster(self) -> Broadcaster:
        return self._broadcaster

    # ------------------------------------------------------------------
    # authentication
    # ------------------------------------------------------------------
    def auth_status(self) -> dict[str, Any]:
        status: dict[str, Any] = {"authenticated": self._auth.is_authenticated()}
        if self._auth.demo:
            status["demo"] = True
        return status

    def authorization(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"authUrl": self._auth.authorization_url()}
        if self._auth.demo:
            payload["demo"] = True
            payload["message"] = "Demo mode - no authentication required"
        return payload

    async def authorize(self, code: str | None, error: str | None = None) -> str:
        """Finish the OAuth callback and return the location to redirect to."""

        if self._auth.demo:
            return self._auth.success_redirect
        if error:
            logger.warning("OAuth authorization error: %s", error)
            return "/?error=access_denied"
        if not code:
            logger.warning("OAuth callback received without a code")
            return "/?error=no_code"

        try:
            await asyncio.to_thread(self._auth.complete, code)
            await asyncio.to_thread(self._store.initialise)
        except (AuthError, UpstreamError) as exc:
            logger.error("Authentication failed: %s", exc)
            return "/?error=" + quote(f"Authentication failed: {exc}", safe="")

        logger.info("Authentication successful")
        return self._auth.success_redirect

    def _require_auth(self) -> None:
        if not self._store.is_ready():
            raise AuthError("Not authenticated with Google Sheets")

    # ------------------------------------------------------------------
    # use cases
    # ------------------------------------------------------------------
    async def create_employee(self, raw: Mapping[str, Any]) -> PayrollResult:
        """Replace the stored employee wholesale and push the fresh result."""

        self._require_auth()
        employee = validate_employee(raw)

        result = calculate_payroll(employee)
        await asyncio.to_thread(self._store.save, employee.to_payload(), result)

        logger.info("Payroll calculated for employee %s", employee.employee_id)
        self._publish(CALCULATION_COMPLETE, result_payload(result))
        return result

    async def update_field(self, field: str, value: Any) -> PayrollResult | None:
        """Apply a single live edit, recalculate once and push once."""

        self._require_auth()
        validate_field_name(field)

        values = await asyncio.to_thread(self._store.load_input)
        values[field] = coerce_field_value(field, value)
        result = self._calculator(values)
        await asyncio.to_thread(self._store.save, values, result)

        logger.info("Updated %s", field)
        self._publish(DATA_UPDATED, result_payload(result))
        return result

    async def latest(self) -> PayrollResult | None:
        return await asyncio.to_thread(self._store.load_result)

    async def resync(self) -> bool:
        """Re-read the canonical input and push only when the result changed.

        Returns ``True`` when an update was broadcast.
        """

        if not self._store.is_ready() or self._broadcaster.subscriber_count == 0:
            return False

        values = await asyncio.to_thread(self._store.load_input)
        result = self._calculator(values)
        payload = result_payload(result)
        if _fingerprint(payload) == self._last_pushed:
            return False

        await asyncio.to_thread(self._store.save_result, result)
        self._publish(DATA_UPDATED, payload)
        logger.info("Real-time sync: values updated from the canonical store")
        return True

    def report_error(self, message: str) -> None:
        self._broadcaster.publish(ERROR_EVENT, {"message": message})

    def _publish(self, event: str, payload: dict[str, Any]) -> None:
        self._last_pushed = _fingerprint(payload)
        self._broadcaster.publish(event, payload)

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    def reset(self) -> None:
        self._store.reset()
        self._last_pushed = _fingerprint({})

    def close(self) -> None:
        self._store.close()
        self._auth.close()
