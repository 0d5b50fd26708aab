from propnet.web.routers.admin import router as admin_router
from propnet.web.routers.auth import router as auth_router
from propnet.web.routers.consent import router as consent_router
from propnet.web.routers.places import router as places_router
from propnet.web.routers.profile import router as profile_router
from propnet.web.routers.properties import router as properties_router
from propnet.web.routers.tasks import router as tasks_router

__all__ = [
    "admin_router",
    "auth_router",
    "consent_router",
    "places_router",
    "profile_router",
    "properties_router",
    "tasks_router",
]
