"""Domain state for the single-tenant payroll calculator."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from backend.core.schema import PayrollResult


@dataclass(slots=True)
class PayrollState:
    """Latest raw employee input and the result derived from it."""

    employee: dict[str, Any] = field(default_factory=dict)
    result: PayrollResult | None = None
