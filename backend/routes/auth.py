from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse

from backend.application import PayrollService
from backend.routes.deps import get_payroll_service

router = APIRouter(tags=["auth"])


@router.get("/api/auth/status")
async def auth_status(service: PayrollService = Depends(get_payroll_service)) -> dict:
    return service.auth_status()


@router.get("/api/auth/url")
async def auth_url(service: PayrollService = Depends(get_payroll_service)) -> dict:
    return service.authorization()


@router.get("/auth/callback", include_in_schema=False)
async def auth_callback(
    code: str | None = Query(default=None),
    error: str | None = Query(default=None),
    service: PayrollService = Depends(get_payroll_service),
) -> RedirectResponse:
    target = await service.authorize(code, error)
    return RedirectResponse(target, status_code=302)
