from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

from propnet.core.modules.admin.models import ADMIN_COOKIE
from propnet.core.modules.session.models import SESSION_COOKIE

# Reachable without a broker session
PUBLIC_ENDPOINTS = {
    ("POST", "/api/auth/check-phone"),
    ("POST", "/api/auth/send-otp"),
    ("POST", "/api/auth/verify-otp"),
    ("POST", "/api/auth/setup-pin"),
    ("POST", "/api/auth/verify-pin"),
    ("POST", "/api/auth/reset-pin"),
    ("POST", "/api/auth/logout"),
    ("GET", "/api/consent/{consent_token}"),
    ("POST", "/api/consent/{consent_token}"),
    ("POST", "/api/consent/{consent_token}/reject"),
    ("POST", "/api/secure-portal/login"),
    ("GET", "/health"),
}


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="PropNet API",
            version="0.1.0",
            summary="Property listings, broker accounts and owner consent",
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "SessionCookie": {
                "type": "apiKey",
                "in": "cookie",
                "name": SESSION_COOKIE,
                "description": "Signed broker session credential",
            },
            "AdminSessionCookie": {
                "type": "apiKey",
                "in": "cookie",
                "name": ADMIN_COOKIE,
                "description": "Administrator portal session",
            },
        }

        openapi_schema["security"] = [{"SessionCookie": []}]

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                if (method.upper(), path) in PUBLIC_ENDPOINTS:
                    operation["security"] = []
                elif path.startswith(("/api/admin", "/api/secure-portal")):
                    operation["security"] = [{"AdminSessionCookie": []}]

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")
    action: str | None = Field(None, description="Existing state, only on 409 consent conflicts")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "Not authenticated", "type": "authentication_error"},
                {"message": "Consent link invalid", "type": "not_found"},
                {"message": "Consent already processed", "type": "conflict", "action": "approved"},
            ]
        }
    }
