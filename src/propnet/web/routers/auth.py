from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from propnet.config import Config
from propnet.core.modules.profile.models import PhoneCheck, ProfileView
from propnet.core.modules.session.models import SESSION_COOKIE, SessionGrant
from propnet.web.deps import AppDep, SessionTokenDep
from propnet.web.openapi import ErrorResponse

router = APIRouter(tags=["auth"])


class PhoneRequest(BaseModel):
    phone: str = Field(..., min_length=1, description="Phone number, with or without country code")


class VerifyOtpRequest(PhoneRequest):
    code: str = Field(..., min_length=1, description="Code received by SMS")


class SetupPinRequest(PhoneRequest):
    pin: str = Field(..., min_length=1, description="New 4-6 digit PIN")
    keep_logged_in: bool = Field(False, description="Keep the session for 30 days instead of 1")


class VerifyPinRequest(PhoneRequest):
    pin: str = Field(..., min_length=1, description="Login PIN")
    keep_logged_in: bool = Field(True, description="Keep the session for 30 days instead of 1")


class ResetPinRequest(PhoneRequest):
    code: str = Field(..., min_length=1, description="Code received by SMS")
    new_pin: str = Field(..., min_length=1, description="New 4-6 digit PIN")


class SendOtpResponse(BaseModel):
    success: bool = True
    status: str = Field(..., description="Provider verification status")


class VerifyOtpResponse(BaseModel):
    success: bool = True
    requires_profile_complete: bool
    user: ProfileView


class LoginResponse(BaseModel):
    success: bool = True
    message: str
    redirect_to: str | None = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str


def set_session_cookie(response: Response, grant: SessionGrant, config: Config) -> None:
    response.set_cookie(
        key=SESSION_COOKIE,
        value=grant.token,
        httponly=True,
        samesite="lax",
        secure=config.production,
        max_age=grant.max_age,
        path="/",
    )


@router.post(
    "/auth/check-phone",
    summary="Check phone registration",
    description="Report whether a profile exists for the phone and whether it has a PIN.",
    operation_id="checkPhone",
    responses={400: {"model": ErrorResponse, "description": "Invalid phone number"}},
)
async def check_phone(request: PhoneRequest, app: AppDep) -> PhoneCheck:
    return await app.check_phone(request.phone)


@router.post(
    "/auth/send-otp",
    summary="Send verification code",
    operation_id="sendOtp",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid phone number or provider rejected the request"},
        503: {"model": ErrorResponse, "description": "Phone verification not configured"},
    },
)
async def send_otp(request: PhoneRequest, app: AppDep) -> SendOtpResponse:
    status = await app.send_otp(request.phone)
    return SendOtpResponse(status=status)


@router.post(
    "/auth/verify-otp",
    summary="Verify phone",
    description="Check the SMS code. Creates an incomplete profile on first verification.",
    operation_id="verifyOtp",
    responses={400: {"model": ErrorResponse, "description": "Invalid verification code"}},
)
async def verify_otp(request: VerifyOtpRequest, app: AppDep) -> VerifyOtpResponse:
    profile = await app.verify_otp(request.phone, request.code)
    return VerifyOtpResponse(requires_profile_complete=not profile.profile_complete, user=profile)


@router.post(
    "/auth/setup-pin",
    summary="Create PIN",
    description="Set the first PIN for a verified phone and start a session.",
    operation_id="setupPin",
    responses={
        400: {"model": ErrorResponse, "description": "PIN already exists or invalid PIN"},
        404: {"model": ErrorResponse, "description": "Profile not found"},
    },
)
async def setup_pin(request: SetupPinRequest, app: AppDep, response: Response) -> MessageResponse:
    grant = await app.setup_pin(request.phone, request.pin, request.keep_logged_in)
    set_session_cookie(response, grant, app.config)
    return MessageResponse(message="PIN created successfully")


@router.post(
    "/auth/verify-pin",
    summary="Log in",
    description="Authenticate with phone and PIN. Sets the session cookie.",
    operation_id="verifyPin",
    responses={
        400: {"model": ErrorResponse, "description": "PIN not set"},
        401: {"model": ErrorResponse, "description": "Invalid phone number or PIN"},
    },
)
async def verify_pin(request: VerifyPinRequest, app: AppDep, response: Response) -> LoginResponse:
    grant, redirect_to = await app.verify_pin(request.phone, request.pin, request.keep_logged_in)
    set_session_cookie(response, grant, app.config)
    return LoginResponse(message="Login successful", redirect_to=redirect_to)


@router.post(
    "/auth/reset-pin",
    summary="Reset PIN",
    description="Replace a forgotten PIN after verifying an SMS code.",
    operation_id="resetPin",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid code or PIN"},
        404: {"model": ErrorResponse, "description": "Phone number not registered"},
    },
)
async def reset_pin(request: ResetPinRequest, app: AppDep) -> MessageResponse:
    await app.reset_pin(request.phone, request.code, request.new_pin)
    return MessageResponse(message="PIN reset successfully")


@router.post(
    "/auth/logout",
    summary="End session",
    description="Clear the session cookie. Issued credentials are not revoked server-side.",
    operation_id="logout",
)
async def logout(app: AppDep, response: Response) -> MessageResponse:
    response.delete_cookie(SESSION_COOKIE, path="/", secure=app.config.production, httponly=True, samesite="lax")
    return MessageResponse(message="Logged out")


@router.get(
    "/auth/me",
    summary="Current profile",
    operation_id="getMe",
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
)
async def me(app: AppDep, session_token: SessionTokenDep) -> ProfileView:
    return await app.get_current_profile(session_token)
