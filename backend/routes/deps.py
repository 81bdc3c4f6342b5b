from __future__ import annotations

from fastapi import Request

from backend.application import PayrollService


def get_payroll_service(request: Request) -> PayrollService:
    """Return the service built by ``create_app`` for this application."""

    return request.app.state.payroll_service
