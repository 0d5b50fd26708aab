from fastapi import APIRouter

from propnet.core.modules.profile.models import ProfileDetails, ProfileUpdate, ProfileView
from propnet.web.deps import AppDep, SessionTokenDep
from propnet.web.openapi import ErrorResponse

router = APIRouter(tags=["profile"])


@router.post(
    "/profile/complete",
    summary="Complete profile",
    description="Submit onboarding details for the signed-in broker.",
    operation_id="completeProfile",
    responses={
        200: {"description": "Updated profile"},
        400: {"model": ErrorResponse, "description": "Invalid request"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def complete_profile(details: ProfileDetails, app: AppDep, session_token: SessionTokenDep) -> ProfileView:
    return await app.complete_profile(session_token, details)


@router.post(
    "/profile/update",
    summary="Update profile",
    description="Change the given profile fields of the signed-in broker. Omitted fields keep their values.",
    operation_id="updateProfile",
    responses={
        200: {"description": "Updated profile"},
        400: {"model": ErrorResponse, "description": "Invalid request"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def update_profile(update: ProfileUpdate, app: AppDep, session_token: SessionTokenDep) -> ProfileView:
    return await app.update_profile(session_token, update)
