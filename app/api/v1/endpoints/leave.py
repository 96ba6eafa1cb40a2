"""Leave API (tenant-scoped): leave types, balances and the request lifecycle."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.v1.dependencies import (
    get_current_user_id,
    get_leave_service,
    get_leave_type_service,
)
from app.application.dtos.leave import LeaveRequestFilters
from app.application.use_cases.leave import LeaveService, LeaveTypeService
from app.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.core.limiter import limit_writes
from app.domain.exceptions import ValidationException
from app.schemas.common import PageResponse
from app.schemas.leave import (
    BalanceAdjustRequest,
    LeaveApproveRequest,
    LeaveBalanceResponse,
    LeaveCancelRequest,
    LeaveRejectRequest,
    LeaveRequestCreate,
    LeaveRequestResponse,
    LeaveTypeCreateRequest,
    LeaveTypeResponse,
    LeaveTypeUpdateRequest,
)

router = APIRouter()

Leave = Annotated[LeaveService, Depends(get_leave_service)]
LeaveTypes = Annotated[LeaveTypeService, Depends(get_leave_type_service)]
UserId = Annotated[str | None, Depends(get_current_user_id)]


# Leave types


@router.post("/types", response_model=LeaveTypeResponse, status_code=201)
@limit_writes
async def create_leave_type(request: Request, body: LeaveTypeCreateRequest, svc: LeaveTypes):
    return LeaveTypeResponse.model_validate(await svc.create_leave_type(body.to_input()))


@router.get("/types", response_model=list[LeaveTypeResponse])
async def list_leave_types(svc: LeaveTypes, include_inactive: bool = False):
    types = await svc.list_leave_types(include_inactive=include_inactive)
    return [LeaveTypeResponse.model_validate(t) for t in types]


@router.get("/types/{leave_type_id}", response_model=LeaveTypeResponse)
async def get_leave_type(leave_type_id: str, svc: LeaveTypes):
    return LeaveTypeResponse.model_validate(await svc.get_leave_type(leave_type_id))


@router.patch("/types/{leave_type_id}", response_model=LeaveTypeResponse)
@limit_writes
async def update_leave_type(
    request: Request, leave_type_id: str, body: LeaveTypeUpdateRequest, svc: LeaveTypes
):
    return LeaveTypeResponse.model_validate(
        await svc.update_leave_type(leave_type_id, body.changes())
    )


# Balances


@router.get("/balances/{employee_id}", response_model=list[LeaveBalanceResponse])
async def get_balances(
    employee_id: str,
    svc: LeaveTypes,
    year: Annotated[int | None, Query(ge=2000, le=2100)] = None,
):
    """Balances per active leave type; missing rows are created from the type defaults."""
    balances = await svc.get_balances(employee_id, year)
    return [LeaveBalanceResponse.model_validate(b) for b in balances]


@router.post("/balances/{employee_id}/adjust", response_model=LeaveBalanceResponse)
@limit_writes
async def adjust_balance(
    request: Request,
    employee_id: str,
    body: BalanceAdjustRequest,
    svc: LeaveTypes,
    user_id: UserId,
):
    if not user_id:
        raise ValidationException("X-User-Id is required to adjust balances", field="adjusted_by")
    balance = await svc.adjust_balance(
        employee_id, body.leave_type_id, body.year, body.days, body.reason, user_id
    )
    return LeaveBalanceResponse.model_validate(balance)


# Requests


@router.post("/requests", response_model=LeaveRequestResponse, status_code=201)
@limit_writes
async def request_leave(
    request: Request, body: LeaveRequestCreate, svc: Leave, user_id: UserId
):
    """Pending when the type requires approval; approved immediately otherwise."""
    result = await svc.request_leave(body.to_input(), performed_by=user_id)
    return LeaveRequestResponse.model_validate(result)


@router.get("/requests", response_model=PageResponse[LeaveRequestResponse])
async def list_leave_requests(
    svc: Leave,
    employee_id: str | None = None,
    leave_type_id: str | None = None,
    status: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
):
    filters = LeaveRequestFilters(
        employee_id=employee_id,
        leave_type_id=leave_type_id,
        status=status,
        date_from=date_from,
        date_to=date_to,
        page=page,
        page_size=page_size,
    )
    result = await svc.list_leave_requests(filters)
    return PageResponse[LeaveRequestResponse].from_page(
        result, LeaveRequestResponse.model_validate
    )


@router.get("/requests/pending/{manager_id}", response_model=list[LeaveRequestResponse])
async def get_pending_approvals(manager_id: str, svc: Leave):
    """Pending requests of the manager's direct reports, oldest first."""
    pending = await svc.get_pending_approvals(manager_id)
    return [LeaveRequestResponse.model_validate(r) for r in pending]


@router.get("/requests/{request_id}", response_model=LeaveRequestResponse)
async def get_leave_request(request_id: str, svc: Leave):
    return LeaveRequestResponse.model_validate(await svc.get_leave_request(request_id))


@router.post("/requests/{request_id}/approve", response_model=LeaveRequestResponse)
@limit_writes
async def approve_leave(
    request: Request, request_id: str, body: LeaveApproveRequest, svc: Leave
):
    result = await svc.approve_leave(request_id, body.approver_id, body.comments)
    return LeaveRequestResponse.model_validate(result)


@router.post("/requests/{request_id}/reject", response_model=LeaveRequestResponse)
@limit_writes
async def reject_leave(
    request: Request, request_id: str, body: LeaveRejectRequest, svc: Leave
):
    result = await svc.reject_leave(request_id, body.approver_id, body.reason)
    return LeaveRequestResponse.model_validate(result)


@router.post("/requests/{request_id}/cancel", response_model=LeaveRequestResponse)
@limit_writes
async def cancel_leave(
    request: Request, request_id: str, body: LeaveCancelRequest, svc: Leave
):
    result = await svc.cancel_leave(request_id, body.cancelled_by, body.reason)
    return LeaveRequestResponse.model_validate(result)
