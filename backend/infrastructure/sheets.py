"""Minimal Google Sheets v4 REST client."""
from __future__ import annotations

from typing import Any, Callable, Sequence
from urllib.parse import quote

import httpx

from backend.core.errors import UpstreamError

SHEETS_API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"


class SheetsError(UpstreamError):
    """Raised when the Sheets API returns an error or cannot be reached."""


class GoogleSheetsClient:
    """Reads and writes A1 ranges of a single spreadsheet."""

    def __init__(
        self,
        spreadsheet_id: str,
        token_provider: Callable[[], str],
        *,
        api_base: str = SHEETS_API_BASE,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._spreadsheet_id = spreadsheet_id
        self._token_provider = token_provider
        self._api_base = api_base.rstrip("/")
        self._client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None

    @property
    def spreadsheet_id(self) -> str:
        return self._spreadsheet_id

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _url(self, suffix: str = "") -> str:
        if not self._spreadsheet_id:
            raise SheetsError("GOOGLE_SPREADSHEET_ID is not configured")
        return f"{self._api_base}/{quote(self._spreadsheet_id, safe='')}{suffix}"

    @staticmethod
    def _values_suffix(a1_range: str) -> str:
        return f"/values/{quote(a1_range, safe='!:')}"

    def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {self._token_provider()}"}
        try:
            response = self._client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            raise SheetsError(f"Google Sheets unreachable: {exc}") from exc

        if response.status_code >= 400:
            try:
                error = response.json().get("error") or {}
            except ValueError:
                error = {}
            message = error.get("message") if isinstance(error, dict) else None
            raise SheetsError(f"Google Sheets request failed ({response.status_code}): {message or response.reason_phrase}")

        try:
            return response.json()
        except ValueError:
            return {}

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def get_title(self) -> str:
        payload = self._request("GET", self._url(), params={"fields": "properties.title"})
        return str((payload.get("properties") or {}).get("title") or "")

    def read_range(self, a1_range: str) -> list[list[Any]]:
        payload = self._request(
            "GET",
            self._url(self._values_suffix(a1_range)),
            params={"valueRenderOption": "UNFORMATTED_VALUE"},
        )
        values = payload.get("values") or []
        return [list(row) for row in values if isinstance(row, list)]

    def write_range(
        self,
        a1_range: str,
        rows: Sequence[Sequence[Any]],
        *,
        value_input_option: str = "RAW",
    ) -> None:
        body = {
            "range": a1_range,
            "majorDimension": "ROWS",
            "values": [list(row) for row in rows],
        }
        self._request(
            "PUT",
            self._url(self._values_suffix(a1_range)),
            params={"valueInputOption": value_input_option},
            json=body,
        )

    def close(self) -> None:  # pragma: no cover - best effort cleanup
        if self._owns_client:
            self._client.close()


__all__ = ["GoogleSheetsClient", "SheetsError"]
