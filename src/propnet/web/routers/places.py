from typing import Annotated

from fastapi import APIRouter, Query

from propnet.core.modules.geocode.models import GeocodeResponse, PlaceSuggestion
from propnet.web.deps import AppDep, SessionTokenDep
from propnet.web.openapi import ErrorResponse

router = APIRouter(tags=["places"])


@router.get(
    "/places/geocode",
    summary="Geocode address",
    operation_id="geocode",
    responses={
        400: {"model": ErrorResponse, "description": "Missing address"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "No match for the address"},
        502: {"model": ErrorResponse, "description": "Provider error"},
    },
)
async def geocode(
    app: AppDep, session_token: SessionTokenDep, address: Annotated[str, Query(min_length=1)]
) -> GeocodeResponse:
    return await app.geocode(session_token, address)


@router.get(
    "/places/autocomplete",
    summary="Suggest places",
    operation_id="autocompletePlaces",
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        502: {"model": ErrorResponse, "description": "Provider error"},
    },
)
async def autocomplete(
    app: AppDep, session_token: SessionTokenDep, input: Annotated[str, Query(min_length=1)]
) -> list[PlaceSuggestion]:
    return await app.autocomplete(session_token, input)
