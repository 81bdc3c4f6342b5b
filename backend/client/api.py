"""HTTP client for the payroll calculator API."""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Mapping

import httpx

from backend.core.schema import PayrollResult

logger = logging.getLogger(__name__)


class NetworkError(RuntimeError):
    """Raised when the server cannot be reached."""


class PayrollApiError(RuntimeError):
    """Raised when the server answers a request with an error status."""

    def __init__(self, status_code: int, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.field = field


class CalculationsNotReady(RuntimeError):
    """Raised when calculations did not become available within the polling budget."""


def parse_result(payload: Any) -> PayrollResult | None:
    """Convert a wire payload into a result; ``{}`` means not yet computable."""

    if not isinstance(payload, dict) or not payload:
        return None
    return PayrollResult.model_validate(payload)


class PayrollApiClient:
    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        *,
        timeout: float = 10.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._client = http_client or httpx.Client(base_url=base_url, timeout=timeout)
        self._owns_client = http_client is None

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise NetworkError(f"{method} {path} failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.status_code >= 400:
            message = payload.get("error") if isinstance(payload, dict) else None
            field = payload.get("field") if isinstance(payload, dict) else None
            raise PayrollApiError(response.status_code, str(message or response.reason_phrase), field)
        return payload

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def auth_status(self) -> dict[str, Any]:
        return self._request("GET", "/api/auth/status")

    def auth_url(self) -> str:
        return str(self._request("GET", "/api/auth/url").get("authUrl") or "")

    def create_employee(self, employee: Mapping[str, Any]) -> PayrollResult | None:
        payload = self._request("POST", "/api/employee/create", json=dict(employee))
        return parse_result(payload.get("calculations"))

    def update_field(self, field: str, value: Any) -> None:
        self._request("POST", "/api/data/update", json={"field": field, "value": value})

    def latest_calculations(self) -> PayrollResult | None:
        return parse_result(self._request("GET", "/api/calculations/latest"))

    def wait_for_calculations(
        self,
        *,
        max_attempts: int = 30,
        interval: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> PayrollResult:
        """Poll until a result with positive annual pay arrives.

        Network failures are logged and retried on the next attempt. Raises
        :class:`CalculationsNotReady` once ``max_attempts`` polls are spent.
        """

        for attempt in range(1, max_attempts + 1):
            try:
                result = self.latest_calculations()
            except (NetworkError, PayrollApiError) as exc:
                logger.warning("Polling calculations failed (attempt %d): %s", attempt, exc)
                result = None
            if result is not None and result.annual_pay > 0:
                return result
            if attempt < max_attempts:
                sleep(interval)
        raise CalculationsNotReady(f"Calculations not available after {max_attempts} attempts")

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
