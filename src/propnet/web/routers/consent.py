"""Owner-facing consent endpoints, reached from the link sent to the property owner."""

from typing import Any

from fastapi import APIRouter

from propnet.core.modules.property.models import ConsentResult, ConsentView
from propnet.web.deps import AppDep
from propnet.web.openapi import ErrorResponse

router = APIRouter(tags=["consent"])

CONSENT_ERRORS: dict[int | str, dict[str, Any]] = {
    404: {"model": ErrorResponse, "description": "Consent link invalid"},
    409: {"model": ErrorResponse, "description": "Consent already processed; action holds the earlier decision"},
    500: {"model": ErrorResponse, "description": "Storage error"},
}


@router.get(
    "/consent/{consent_token}",
    summary="Get consent request",
    description="Listing summary and agent details for the owner to review.",
    operation_id="getConsent",
    responses={404: {"model": ErrorResponse, "description": "Consent link invalid"}},
)
async def get_consent(consent_token: str, app: AppDep) -> ConsentView:
    return await app.get_consent(consent_token)


@router.post(
    "/consent/{consent_token}",
    summary="Approve listing",
    operation_id="approveConsent",
    responses=CONSENT_ERRORS,
)
async def approve_consent(consent_token: str, app: AppDep) -> ConsentResult:
    return await app.approve_consent(consent_token)


@router.post(
    "/consent/{consent_token}/reject",
    summary="Reject listing",
    operation_id="rejectConsent",
    responses=CONSENT_ERRORS,
)
async def reject_consent(consent_token: str, app: AppDep) -> ConsentResult:
    return await app.reject_consent(consent_token)
