from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from backend.application import PayrollService, result_payload
from backend.core.schema import FieldUpdate
from backend.routes.deps import get_payroll_service

router = APIRouter(prefix="/api", tags=["payroll"])


@router.post("/employee/create")
async def create_employee(
    payload: dict[str, Any] = Body(...),
    service: PayrollService = Depends(get_payroll_service),
) -> dict:
    """Replace the current employee and return the recalculated payroll."""
    result = await service.create_employee(payload)
    response: dict[str, Any] = {"success": True, "calculations": result_payload(result)}
    if service.auth.demo:
        response["demo"] = True
    return response


@router.post("/data/update")
async def update_field(
    update: FieldUpdate,
    service: PayrollService = Depends(get_payroll_service),
) -> dict:
    await service.update_field(update.field, update.value)
    response: dict[str, Any] = {"success": True}
    if service.auth.demo:
        response["demo"] = True
    return response


@router.get("/calculations/latest")
async def latest_calculations(service: PayrollService = Depends(get_payroll_service)) -> dict:
    return result_payload(await service.latest())
