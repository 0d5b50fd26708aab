from typing import Any
from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel

from propnet.core.modules.property.models import PropertyDetails, PropertySubmission, PropertyView
from propnet.web.deps import AppDep, SessionTokenDep
from propnet.web.openapi import ErrorResponse

router = APIRouter(tags=["properties"])


class SuccessResponse(BaseModel):
    success: bool = True


OWN_LISTING_ERRORS: dict[int | str, dict[str, Any]] = {
    401: {"model": ErrorResponse, "description": "Not authenticated"},
    403: {"model": ErrorResponse, "description": "Listing belongs to another agent"},
    404: {"model": ErrorResponse, "description": "Property not found"},
}


@router.get(
    "/properties",
    summary="List my listings",
    operation_id="listMyProperties",
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
)
async def list_my_properties(app: AppDep, session_token: SessionTokenDep) -> list[PropertyView]:
    return await app.get_my_properties(session_token)


@router.post(
    "/properties",
    summary="Create listing",
    description="Create a listing pending owner consent and text the consent link to the owner. "
    "The response reports the SMS outcome and carries the consent token for sharing by hand.",
    operation_id="createProperty",
    status_code=201,
    responses={
        201: {"description": "Listing created"},
        400: {"model": ErrorResponse, "description": "Invalid request"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def create_property(details: PropertyDetails, app: AppDep, session_token: SessionTokenDep) -> PropertySubmission:
    return await app.create_property(session_token, details)


@router.get(
    "/properties/{property_id}",
    summary="Get listing",
    operation_id="getProperty",
    responses=OWN_LISTING_ERRORS,
)
async def get_property(property_id: UUID, app: AppDep, session_token: SessionTokenDep) -> PropertyView:
    return await app.get_property(session_token, property_id)


@router.put(
    "/properties/{property_id}",
    summary="Edit listing",
    description="Replace the listing details. The listing returns to pending owner consent "
    "with a new consent token, and the owner is texted the new link.",
    operation_id="updateProperty",
    responses={400: {"model": ErrorResponse, "description": "Invalid request"}, **OWN_LISTING_ERRORS},
)
async def update_property(
    property_id: UUID, details: PropertyDetails, app: AppDep, session_token: SessionTokenDep
) -> PropertySubmission:
    return await app.update_property(session_token, property_id, details)


@router.delete(
    "/properties/{property_id}",
    summary="Delete listing",
    operation_id="deleteProperty",
    responses=OWN_LISTING_ERRORS,
)
async def delete_property(property_id: UUID, app: AppDep, session_token: SessionTokenDep) -> SuccessResponse:
    await app.delete_property(session_token, property_id)
    return SuccessResponse()
