from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import APIKeyCookie

from propnet.app import App
from propnet.core.modules.admin.models import ADMIN_COOKIE
from propnet.core.modules.session.models import SESSION_COOKIE

# Security schemes; validation happens in App so a missing cookie is not an error here
session_cookie_scheme = APIKeyCookie(name=SESSION_COOKIE, auto_error=False)
admin_cookie_scheme = APIKeyCookie(name=ADMIN_COOKIE, auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
SessionTokenDep = Annotated[str | None, Depends(session_cookie_scheme)]
AdminTokenDep = Annotated[str | None, Depends(admin_cookie_scheme)]
