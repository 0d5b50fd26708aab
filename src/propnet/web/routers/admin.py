from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Query, Response
from pydantic import BaseModel, Field

from propnet.core.modules.admin.models import ADMIN_COOKIE, ADMIN_SESSION_TTL
from propnet.core.modules.profile.models import AccountStatus, ProfileView
from propnet.core.modules.property.models import ApprovalStatus, PropertyView
from propnet.core.db import PaginationResult
from propnet.web.deps import AdminTokenDep, AppDep
from propnet.web.openapi import ErrorResponse

router = APIRouter(tags=["admin"])


class AdminLoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=254)
    password: str = Field(..., min_length=1, max_length=72)


class AdminMeResponse(BaseModel):
    authenticated: bool
    username: str | None = None


class StatusUpdateRequest(BaseModel):
    """Review decision; only approved or rejected are accepted."""

    status: ApprovalStatus = Field(..., description="approved or rejected")


class SuccessResponse(BaseModel):
    success: bool = True


ADMIN_ERRORS: dict[int | str, dict[str, Any]] = {
    403: {"model": ErrorResponse, "description": "Admin privileges required"},
}


@router.post(
    "/secure-portal/login",
    summary="Admin login",
    operation_id="adminLogin",
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
)
async def admin_login(request: AdminLoginRequest, app: AppDep, response: Response) -> SuccessResponse:
    token = await app.admin_login(request.username, request.password)
    response.set_cookie(
        key=ADMIN_COOKIE,
        value=token,
        httponly=True,
        samesite="lax",
        secure=app.config.production,
        max_age=int(ADMIN_SESSION_TTL.total_seconds()),
        path="/",
    )
    return SuccessResponse()


@router.post("/secure-portal/logout", summary="Admin logout", operation_id="adminLogout")
async def admin_logout(app: AppDep, admin_token: AdminTokenDep, response: Response) -> SuccessResponse:
    await app.admin_logout(admin_token)
    response.delete_cookie(ADMIN_COOKIE, path="/", secure=app.config.production, httponly=True, samesite="lax")
    return SuccessResponse()


@router.get(
    "/secure-portal/me",
    summary="Admin session status",
    operation_id="adminMe",
    responses={401: {"model": AdminMeResponse, "description": "No admin session"}},
)
async def admin_me(app: AppDep, admin_token: AdminTokenDep, response: Response) -> AdminMeResponse:
    username = await app.get_admin_username(admin_token)
    if username is None:
        response.status_code = 401
        return AdminMeResponse(authenticated=False)
    return AdminMeResponse(authenticated=True, username=username)


@router.get("/admin/users", summary="List broker accounts", operation_id="adminListUsers", responses=ADMIN_ERRORS)
async def list_users(
    app: AppDep,
    admin_token: AdminTokenDep,
    status: AccountStatus | None = None,
    limit: Annotated[int, Query(ge=1, le=200, description="Maximum items to return")] = 50,
    offset: Annotated[int, Query(ge=0, description="Number of items to skip")] = 0,
) -> PaginationResult[ProfileView]:
    return await app.admin_list_users(admin_token, status, limit, offset)


@router.patch(
    "/admin/users/{profile_id}",
    summary="Approve or reject broker",
    operation_id="adminSetUserStatus",
    responses={
        **ADMIN_ERRORS,
        400: {"model": ErrorResponse, "description": "Invalid status"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def set_user_status(
    profile_id: UUID, request: StatusUpdateRequest, app: AppDep, admin_token: AdminTokenDep
) -> ProfileView:
    return await app.admin_set_user_status(admin_token, profile_id, AccountStatus(request.status.value))


@router.get(
    "/admin/properties", summary="List listings", operation_id="adminListProperties", responses=ADMIN_ERRORS
)
async def list_properties(
    app: AppDep,
    admin_token: AdminTokenDep,
    status: ApprovalStatus | None = None,
    limit: Annotated[int, Query(ge=1, le=200, description="Maximum items to return")] = 50,
    offset: Annotated[int, Query(ge=0, description="Number of items to skip")] = 0,
) -> PaginationResult[PropertyView]:
    return await app.admin_list_properties(admin_token, status, limit, offset)


@router.patch(
    "/admin/properties/{property_id}",
    summary="Approve or reject listing",
    operation_id="adminSetPropertyStatus",
    responses={
        **ADMIN_ERRORS,
        400: {"model": ErrorResponse, "description": "Invalid status"},
        404: {"model": ErrorResponse, "description": "Property not found"},
    },
)
async def set_property_status(
    property_id: UUID, request: StatusUpdateRequest, app: AppDep, admin_token: AdminTokenDep
) -> PropertyView:
    return await app.admin_set_property_status(admin_token, property_id, request.status)
