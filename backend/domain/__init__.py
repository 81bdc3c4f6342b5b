"""Domain layer definitions."""

from .payroll import PayrollState

__all__ = [
    "PayrollState",
]
